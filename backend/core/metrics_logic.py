"""
Attendance metrics: late minutes, undertime minutes, hours worked.

late_minutes      = minutes time_in is after 08:00 on attendance_date (0 if on time, no grace period)
undertime_minutes = 480 - net worked minutes (0 if a full day was worked)
hours_worked      = net worked minutes / 60, 2 decimals, half-up
net worked        = (time out - time in) - break, floored at 0; break defaults to 60 min

Pure functions: missing punches give zeros, only malformed timestamps raise (ValueError).
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from .attendance_policy import get_attendance_policy
from .punch_logic import normalize_punches, to_date, to_local_datetime, whole_minutes

HOURS_QUANT = Decimal('0.01')
# Below half the 0.01 hours step: stored values are quantized, so any real change is at least 0.01
CHANGE_TOLERANCE = Decimal('0.005')


@dataclass(frozen=True)
class AttendanceMetrics:
    late_minutes: int = 0
    undertime_minutes: int = 0
    hours_worked: Decimal = Decimal('0.00')

    def as_dict(self):
        return {
            'late_minutes': self.late_minutes,
            'undertime_minutes': self.undertime_minutes,
            'hours_worked': str(self.hours_worked),
        }


def calculate_late_minutes(record, policy):
    time_in = to_local_datetime(record.time_in)
    if time_in is None:
        return 0
    expected = datetime.combine(to_date(record.attendance_date), policy.expected_time_in)
    if time_in <= expected:
        return 0
    return whole_minutes(time_in - expected)


def hours_from_minutes(minutes):
    return (Decimal(minutes) / Decimal(60)).quantize(HOURS_QUANT, rounding=ROUND_HALF_UP)


def calculate_metrics(record, policy=None):
    """record: PunchRecord (or anything with the same attributes). Returns AttendanceMetrics."""
    policy = policy or get_attendance_policy()
    if record.time_in is None:
        return AttendanceMetrics()

    late = calculate_late_minutes(record, policy)
    shift = normalize_punches(record, policy)
    if shift is None:
        return AttendanceMetrics(late_minutes=late)

    net_worked = max(0, shift.total_minutes - shift.break_minutes)
    undertime = max(0, policy.standard_work_minutes - net_worked)
    return AttendanceMetrics(
        late_minutes=late,
        undertime_minutes=undertime,
        hours_worked=hours_from_minutes(net_worked),
    )


def _as_decimal(value):
    if value is None:
        return Decimal('0')
    return Decimal(str(value))


def metrics_changed(old, new, tolerance=CHANGE_TOLERANCE):
    """
    True when any of late/undertime/hours differs by more than tolerance.
    old/new: objects with late_minutes, undertime_minutes, hours_worked (None counts as 0).
    """
    for field in ('late_minutes', 'undertime_minutes', 'hours_worked'):
        if abs(_as_decimal(getattr(old, field)) - _as_decimal(getattr(new, field))) > tolerance:
            return True
    return False
