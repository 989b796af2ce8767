"""
Attendance policy constants: expected time in, standard work day, default break.
Fixed for every employee and shift type; values come from Django settings so a
deployment can override them without touching the calculation code.
"""
from dataclasses import dataclass
from datetime import time

from django.conf import settings


EXPECTED_TIME_IN_DEFAULT = time(8, 0, 0)
STANDARD_WORK_MINUTES_DEFAULT = 480
DEFAULT_BREAK_MINUTES_DEFAULT = 60


@dataclass(frozen=True)
class AttendancePolicy:
    expected_time_in: time = EXPECTED_TIME_IN_DEFAULT
    standard_work_minutes: int = STANDARD_WORK_MINUTES_DEFAULT
    default_break_minutes: int = DEFAULT_BREAK_MINUTES_DEFAULT


DEFAULT_POLICY = AttendancePolicy()


def _parse_time_setting(value, default):
    """'08:00' / '08:00:00' / time -> time. Falls back to default on bad values."""
    if isinstance(value, time):
        return value
    parts = str(value or '').strip().split(':')
    try:
        hour = int(parts[0])
        minute = int(parts[1]) if len(parts) > 1 else 0
        second = int(parts[2]) if len(parts) > 2 else 0
        return time(hour, minute, second)
    except (ValueError, IndexError):
        return default


def get_attendance_policy():
    """Build the policy from settings.ATTENDANCE_* (defaults: 08:00, 480 min, 60 min break)."""
    return AttendancePolicy(
        expected_time_in=_parse_time_setting(
            getattr(settings, 'ATTENDANCE_EXPECTED_TIME_IN', None), EXPECTED_TIME_IN_DEFAULT
        ),
        standard_work_minutes=int(
            getattr(settings, 'ATTENDANCE_STANDARD_WORK_MINUTES', STANDARD_WORK_MINUTES_DEFAULT)
        ),
        default_break_minutes=int(
            getattr(settings, 'ATTENDANCE_DEFAULT_BREAK_MINUTES', DEFAULT_BREAK_MINUTES_DEFAULT)
        ),
    )
