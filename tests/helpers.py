from datetime import datetime

from django.utils import timezone


def local(*args):
    """Aware datetime for a wall-clock time in the configured TIME_ZONE."""
    return timezone.make_aware(datetime(*args))
