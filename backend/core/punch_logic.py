"""
Time-punch normalization: turn raw time_in / time_out / break / next_day_timeout values
into (shift_start, shift_end, break_minutes) in local time.
Night shift: time out is read from next_day_timeout; if it still lands before time in
(punch stored with the wrong day), it is pushed forward 24 hours.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .attendance_policy import DEFAULT_POLICY


@dataclass(frozen=True)
class PunchRecord:
    """Immutable snapshot of the attendance fields the metrics and repair logic read and write."""
    attendance_date: date
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    break_in: Optional[datetime] = None
    break_out: Optional[datetime] = None
    next_day_timeout: Optional[datetime] = None
    is_nightshift: bool = False
    late_minutes: Decimal = Decimal('0')
    undertime_minutes: Decimal = Decimal('0')
    hours_worked: Decimal = Decimal('0')
    source: str = ''
    pk: Optional[int] = None
    employee_id: Optional[int] = None

    @classmethod
    def from_attendance(cls, att):
        return cls(
            pk=att.pk,
            employee_id=att.employee_id,
            attendance_date=att.attendance_date,
            time_in=att.time_in,
            time_out=att.time_out,
            break_in=att.break_in,
            break_out=att.break_out,
            next_day_timeout=att.next_day_timeout,
            is_nightshift=bool(att.is_nightshift),
            late_minutes=att.late_minutes,
            undertime_minutes=att.undertime_minutes,
            hours_worked=att.hours_worked,
            source=att.source or '',
        )


@dataclass(frozen=True)
class NormalizedShift:
    shift_start: datetime
    shift_end: datetime
    break_minutes: int

    @property
    def total_minutes(self):
        return whole_minutes(self.shift_end - self.shift_start)


def whole_minutes(delta):
    """Whole minutes in a timedelta, truncated toward zero."""
    return int(delta.total_seconds() / 60)


def to_local_datetime(value):
    """
    None -> None. Strings are parsed ('2024-01-01 08:10[:00]', ISO 8601).
    Aware datetimes are converted to the local zone and made naive so day-boundary math
    uses wall-clock time. Raises ValueError for unparsable strings.
    """
    if value is None:
        return None
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        parsed = parse_datetime(raw)
        if parsed is None:
            raise ValueError(f'Invalid timestamp: {value!r}')
        value = parsed
    if not isinstance(value, datetime):
        raise TypeError(f'Expected datetime, got {type(value).__name__}')
    if timezone.is_aware(value):
        return timezone.localtime(value).replace(tzinfo=None)
    return value


def to_date(value):
    """attendance_date as date; accepts date, datetime or 'YYYY-MM-DD'."""
    if isinstance(value, datetime):
        return to_local_datetime(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        parsed = parse_date(value.strip())
        if parsed is None:
            raise ValueError(f'Invalid date: {value!r}')
        return parsed
    raise TypeError(f'Expected date, got {type(value).__name__}')


def resolve_shift_end(record):
    """next_day_timeout for night shifts that have one, otherwise time_out."""
    if record.is_nightshift and record.next_day_timeout:
        return record.next_day_timeout
    return record.time_out


def break_minutes(record, policy=DEFAULT_POLICY):
    """Actual break length when break_out is after break_in; otherwise the default break (60)."""
    start = to_local_datetime(record.break_in)
    end = to_local_datetime(record.break_out)
    if start and end and end > start:
        return whole_minutes(end - start)
    return policy.default_break_minutes


def normalize_punches(record, policy=DEFAULT_POLICY):
    """Return NormalizedShift, or None when there is no time in or no usable time out."""
    shift_start = to_local_datetime(record.time_in)
    if shift_start is None:
        return None
    shift_end = to_local_datetime(resolve_shift_end(record))
    if shift_end is None:
        return None
    if record.is_nightshift and shift_end < shift_start:
        shift_end += timedelta(days=1)
    return NormalizedShift(
        shift_start=shift_start,
        shift_end=shift_end,
        break_minutes=break_minutes(record, policy),
    )


def next_day_at(attendance_date, clock_value):
    """
    Re-anchor a punch to the day after attendance_date, keeping its local hour/minute/second.
    Returned aware when USE_TZ is on so it can be stored as-is.
    """
    local = to_local_datetime(clock_value)
    anchored = datetime.combine(to_date(attendance_date) + timedelta(days=1), local.time().replace(microsecond=0))
    if settings.USE_TZ:
        return timezone.make_aware(anchored)
    return anchored
