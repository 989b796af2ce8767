from datetime import date as date_cls, timedelta

from celery import shared_task
from django.utils import timezone

from .attendance_repair import AttendanceFilter, recalculate_attendance_metrics
from .audit_logging import log_batch_run


@shared_task
def recalculate_attendance_metrics_task(date=None):
    """Recalculate late/undertime/hours for one day (default: yesterday, local). Scheduled daily via Celery Beat."""
    target = date or (timezone.localdate() - timedelta(days=1))
    if isinstance(target, date_cls):
        target = target.isoformat()
    filters = AttendanceFilter.from_options(date=target)
    report = recalculate_attendance_metrics(filters)
    log_batch_run('recalculate', report, filters, actor='celery')
    return report.counts()
