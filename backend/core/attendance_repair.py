"""
Batch correction of stored attendance rows.

recalculate_attendance_metrics: recompute late/undertime/hours for rows with a time_in.
fix_attendance_records: first repair night-shift punch structure, then recompute metrics.

Each row goes through a pure "propose" step (new PunchRecord, nothing mutated) and, only in
live mode, an "apply" step that persists the diff. The whole run is one transaction; dry-run
always rolls it back. A bad row is logged and counted, it does not stop the batch.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date as date_cls, datetime
from decimal import Decimal
from functools import partial
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from .attendance_policy import get_attendance_policy
from .metrics_logic import CHANGE_TOLERANCE, calculate_metrics
from .models import ProcessedAttendance
from .punch_logic import PunchRecord, next_day_at

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100

METRIC_FIELDS = ('late_minutes', 'undertime_minutes', 'hours_worked')
PERSISTED_FIELDS = ('is_nightshift', 'time_out', 'next_day_timeout', 'source') + METRIC_FIELDS

# Bad data in a single row; anything else (DatabaseError, ...) aborts the run
ROW_ERRORS = (ValueError, TypeError, ArithmeticError, ValidationError)


class InvalidFilterError(ValueError):
    """Operator input rejected before any row is read."""


def _parse_filter_date(value, name):
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date_cls):
        return value
    try:
        parsed = parse_date(str(value).strip())
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidFilterError(f'{name} must be a date in YYYY-MM-DD format, got {value!r}')
    return parsed


@dataclass(frozen=True)
class AttendanceFilter:
    employee_id: Optional[int] = None
    date: Optional[date_cls] = None
    start_date: Optional[date_cls] = None
    end_date: Optional[date_cls] = None
    exclude_posted: bool = False

    @classmethod
    def from_options(cls, employee_id=None, date=None, start_date=None, end_date=None, exclude_posted=False):
        """Parse CLI/API values. A single date wins over a range; a range needs both ends, in order."""
        if employee_id in ('', None):
            employee_id = None
        else:
            try:
                employee_id = int(employee_id)
            except (TypeError, ValueError):
                raise InvalidFilterError(f'employee id must be a number, got {employee_id!r}')

        single = _parse_filter_date(date, 'date')
        start = _parse_filter_date(start_date, 'start date')
        end = _parse_filter_date(end_date, 'end date')
        if single is not None:
            start = end = None
        elif (start is None) != (end is None):
            raise InvalidFilterError('Both start date and end date are required for a date range')
        elif start is not None and end < start:
            raise InvalidFilterError(f'End date {end} is before start date {start}')
        return cls(
            employee_id=employee_id,
            date=single,
            start_date=start,
            end_date=end,
            exclude_posted=bool(exclude_posted),
        )

    def apply(self, queryset):
        if self.date is not None:
            queryset = queryset.filter(attendance_date=self.date)
        elif self.start_date is not None:
            queryset = queryset.filter(attendance_date__gte=self.start_date, attendance_date__lte=self.end_date)
        if self.employee_id is not None:
            queryset = queryset.filter(employee_id=self.employee_id)
        if self.exclude_posted:
            queryset = queryset.exclude(posting_status=ProcessedAttendance.POSTING_POSTED)
        return queryset

    def describe(self):
        """Human-readable lines, e.g. for command output."""
        lines = []
        if self.date is not None:
            lines.append(f'Filtering by date: {self.date}')
        elif self.start_date is not None:
            lines.append(f'Filtering by date range: {self.start_date} to {self.end_date}')
        if self.employee_id is not None:
            lines.append(f'Filtering by employee ID: {self.employee_id}')
        if self.exclude_posted:
            lines.append('Skipping posted records')
        return lines

    def as_dict(self):
        return {
            'employee_id': self.employee_id,
            'date': self.date.isoformat() if self.date else None,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'exclude_posted': self.exclude_posted,
        }


@dataclass
class BatchReport:
    dry_run: bool = False
    total_records: int = 0
    processed: int = 0
    changed: int = 0
    errors: int = 0
    error_rows: list = field(default_factory=list)
    previews: list = field(default_factory=list)

    def as_dict(self):
        return {
            'dry_run': self.dry_run,
            'total_records': self.total_records,
            'processed': self.processed,
            'changed': self.changed,
            'errors': self.errors,
            'error_rows': self.error_rows,
            'previews': self.previews,
        }

    def counts(self):
        return {
            'total_records': self.total_records,
            'processed': self.processed,
            'changed': self.changed,
            'errors': self.errors,
        }


# ---------- Propose (pure) ----------

def propose_recalculation(record, policy=None):
    """New PunchRecord with late/undertime/hours recomputed from its punches."""
    metrics = calculate_metrics(record, policy=policy)
    return replace(
        record,
        late_minutes=Decimal(metrics.late_minutes),
        undertime_minutes=Decimal(metrics.undertime_minutes),
        hours_worked=metrics.hours_worked,
    )


def propose_structural_repair(record):
    """
    - next_day_timeout set but is_nightshift off -> turn is_nightshift on (source untouched).
    - is_nightshift on, time_out set, no next_day_timeout -> move time_out to the next day's
      next_day_timeout (same local clock time), clear time_out, source = fixed_import.
    """
    proposed = record
    if record.next_day_timeout and not record.is_nightshift:
        proposed = replace(proposed, is_nightshift=True)
    if proposed.is_nightshift and proposed.time_out and not proposed.next_day_timeout:
        proposed = replace(
            proposed,
            next_day_timeout=next_day_at(proposed.attendance_date, proposed.time_out),
            time_out=None,
            source=ProcessedAttendance.SOURCE_FIXED_IMPORT,
        )
    return proposed


def propose_fix(record, policy=None):
    """Structural repair, then metrics. Only the time_out move marks the row fixed_import."""
    repaired = propose_structural_repair(record)
    return propose_recalculation(repaired, policy=policy)


def diff_records(old, new):
    """Persisted fields that differ: {field: new_value}. Metrics ignore differences within CHANGE_TOLERANCE."""
    changes = {}
    for name in PERSISTED_FIELDS:
        before = getattr(old, name)
        after = getattr(new, name)
        if name in METRIC_FIELDS:
            if abs(Decimal(str(before or 0)) - Decimal(str(after or 0))) > CHANGE_TOLERANCE:
                changes[name] = after
        elif before != after:
            changes[name] = after
    return changes


# ---------- Apply (persist) ----------

def apply_changes(pk, changes):
    """Write changed fields with a queryset update (no save() signals) and bump updated_at."""
    return ProcessedAttendance.objects.filter(pk=pk).update(updated_at=timezone.now(), **changes)


def _display(value):
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, Decimal):
        return str(value)
    return value


def iter_chunks(queryset, batch_size):
    """Yield lists of at most batch_size rows, keyset-paginated on pk."""
    queryset = queryset.order_by('pk')
    last_pk = None
    while True:
        page = queryset if last_pk is None else queryset.filter(pk__gt=last_pk)
        chunk = list(page[:batch_size])
        if not chunk:
            return
        yield chunk
        last_pk = chunk[-1].pk


def _process_row(att, propose, report, dry_run):
    try:
        current = PunchRecord.from_attendance(att)
        proposed = propose(current)
        changes = diff_records(current, proposed)
        if changes:
            if not dry_run:
                with transaction.atomic():
                    apply_changes(att.pk, changes)
            report.changed += 1
            report.previews.append({
                'id': att.pk,
                'employee_id': att.employee_id,
                'attendance_date': str(att.attendance_date),
                'changes': {
                    name: [_display(getattr(current, name)), _display(value)]
                    for name, value in changes.items()
                },
            })
        report.processed += 1
    except ROW_ERRORS as e:
        report.errors += 1
        report.error_rows.append({
            'id': att.pk,
            'employee_id': att.employee_id,
            'attendance_date': str(att.attendance_date),
            'error': str(e),
        })
        logger.warning('Error processing attendance ID %s: %s', att.pk, e, exc_info=True)


def _resolve_batch_size(batch_size):
    if batch_size is None:
        batch_size = getattr(settings, 'ATTENDANCE_RECALC_BATCH_SIZE', DEFAULT_BATCH_SIZE)
    try:
        batch_size = int(batch_size)
    except (TypeError, ValueError):
        raise InvalidFilterError(f'batch size must be a number, got {batch_size!r}')
    if batch_size < 1:
        raise InvalidFilterError('batch size must be at least 1')
    return batch_size


def _run_batch(queryset, propose, filters, dry_run, batch_size, label):
    batch_size = _resolve_batch_size(batch_size)
    queryset = (filters or AttendanceFilter()).apply(queryset)
    report = BatchReport(dry_run=dry_run)
    report.total_records = queryset.count()
    if report.total_records == 0:
        logger.info('%s: no attendance records matched', label)
        return report

    with transaction.atomic():
        for chunk in iter_chunks(queryset, batch_size):
            for att in chunk:
                _process_row(att, propose, report, dry_run)
        if dry_run:
            transaction.set_rollback(True)

    logger.info(
        '%s%s: total=%s processed=%s changed=%s errors=%s',
        label, ' (dry run)' if dry_run else '',
        report.total_records, report.processed, report.changed, report.errors,
    )
    return report


def recalculate_attendance_metrics(filters=None, dry_run=False, batch_size=None, policy=None, queryset=None):
    """
    Recompute late/undertime/hours for matching rows that have a time_in. Returns BatchReport.
    queryset narrows the candidate rows (admin selection); filters still apply on top.
    """
    policy = policy or get_attendance_policy()
    if queryset is None:
        queryset = ProcessedAttendance.objects.all()
    return _run_batch(
        queryset.filter(time_in__isnull=False), partial(propose_recalculation, policy=policy),
        filters, dry_run, batch_size, 'Attendance metrics recalculation',
    )


def fix_attendance_records(filters=None, dry_run=False, batch_size=None, policy=None, queryset=None):
    """Repair night-shift punch structure and recompute metrics for all matching rows. Returns BatchReport."""
    policy = policy or get_attendance_policy()
    if queryset is None:
        queryset = ProcessedAttendance.objects.all()
    return _run_batch(
        queryset, partial(propose_fix, policy=policy), filters, dry_run, batch_size,
        'Attendance fix',
    )
