"""
Central audit logging: record who ran what against attendance data, and from where.
Call log_batch_run() after a live recalculation / fix run (CLI, API, Celery, admin).
"""
from .models import AuditLog


def _get_client_ip(request):
    if not request:
        return None
    xff = request.META.get('HTTP_X_FORWARDED_FOR')
    if xff:
        return xff.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def _get_user_agent(request):
    if not request:
        return ''
    return (request.META.get('HTTP_USER_AGENT') or '')[:500]


def _get_actor(request, default):
    user = getattr(request, 'user', None) if request else None
    if user is not None and getattr(user, 'is_authenticated', False):
        return user.get_username()
    return default


def log_activity(request, action, module, target_type='', target_id='', details=None, actor=''):
    """
    Log an action.
    action: e.g. recalculate, fix
    module: e.g. attendance
    actor: fallback name when the request has no authenticated user (cli, celery)
    details: optional dict for extra context
    """
    return AuditLog.objects.create(
        actor=_get_actor(request, actor),
        action=action,
        module=module,
        target_type=target_type or '',
        target_id=str(target_id) if target_id else '',
        details=details or {},
        ip_address=_get_client_ip(request),
        user_agent=_get_user_agent(request),
    )


def log_batch_run(action, report, filters, request=None, actor='', extra=None):
    """Audit a live batch run with its filters and counts. Dry runs change nothing and are not logged."""
    if report.dry_run:
        return None
    details = {**report.counts(), **(extra or {})}
    if filters is not None:
        details['filters'] = filters.as_dict()
    if report.error_rows:
        details['error_ids'] = [row['id'] for row in report.error_rows]
    return log_activity(
        request, action, 'attendance', 'processed_attendance', '', details=details, actor=actor,
    )
