import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hr_system.settings')

app = Celery('hr_system')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

# Daily at 1:30 AM: recalculate late/undertime/hours for yesterday's punches
app.conf.beat_schedule = {
    'attendance-metrics-recalc-daily': {
        'task': 'core.tasks.recalculate_attendance_metrics_task',
        'schedule': crontab(hour=1, minute=30),
    },
}
