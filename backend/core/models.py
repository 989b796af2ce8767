"""
HR attendance backend - Database Models.
Processed attendance rows are linked to employees by employee_id; derived metrics
(late_minutes, undertime_minutes, hours_worked) are owned by core.metrics_logic.
"""
from django.db import models
from decimal import Decimal


class Employee(models.Model):
    """Master employee table. idno is the badge / biometric id."""
    idno = models.CharField(max_length=50, unique=True, db_index=True)
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    department = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'employees'
        ordering = ['idno']

    def __str__(self):
        return f"{self.idno} - {self.last_name}, {self.first_name}"


class ProcessedAttendance(models.Model):
    """One attendance row per employee per day, built from biometric logs or manual entry."""
    SOURCE_IMPORT = 'import'
    SOURCE_MANUAL_EDIT = 'manual_edit'
    SOURCE_FIXED_IMPORT = 'fixed_import'

    POSTING_NOT_POSTED = 'not_posted'
    POSTING_POSTED = 'posted'
    POSTING_STATUS_CHOICES = [
        (POSTING_NOT_POSTED, 'Not posted'),
        (POSTING_POSTED, 'Posted'),
    ]

    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='attendances')
    attendance_date = models.DateField(db_index=True)
    day = models.CharField(max_length=20, blank=True)
    time_in = models.DateTimeField(null=True, blank=True)
    time_out = models.DateTimeField(null=True, blank=True)
    break_in = models.DateTimeField(null=True, blank=True)
    break_out = models.DateTimeField(null=True, blank=True)
    # Night shift: time out lands on the calendar day after attendance_date
    next_day_timeout = models.DateTimeField(null=True, blank=True)
    is_nightshift = models.BooleanField(default=False)
    late_minutes = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('0'))
    undertime_minutes = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('0'))
    hours_worked = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0'))
    status = models.CharField(max_length=50, blank=True)
    source = models.CharField(max_length=50, blank=True, help_text='import, manual_edit, fixed_import')
    remarks = models.TextField(blank=True)
    posting_status = models.CharField(
        max_length=20, choices=POSTING_STATUS_CHOICES, default=POSTING_NOT_POSTED, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'processed_attendances'
        ordering = ['-attendance_date', 'employee_id']

    def __str__(self):
        return f"{self.employee_id} {self.attendance_date}"

    @property
    def is_posted(self):
        return self.posting_status == self.POSTING_POSTED

    def recalculate_metrics(self, policy=None, save=True):
        """Recompute late/undertime/hours from the current punches. Saves only when a metric moved."""
        from .metrics_logic import calculate_metrics, metrics_changed
        from .punch_logic import PunchRecord

        current = PunchRecord.from_attendance(self)
        metrics = calculate_metrics(current, policy=policy)
        self.late_minutes = Decimal(metrics.late_minutes)
        self.undertime_minutes = Decimal(metrics.undertime_minutes)
        self.hours_worked = metrics.hours_worked
        if save and metrics_changed(current, metrics):
            self.save(update_fields=['late_minutes', 'undertime_minutes', 'hours_worked', 'updated_at'])
        return metrics


class AuditLog(models.Model):
    """Record of who ran what against attendance data, and from where."""
    actor = models.CharField(max_length=255, blank=True)  # e.g. cli, api, celery, admin username
    action = models.CharField(max_length=64, db_index=True)  # e.g. recalculate, fix
    module = models.CharField(max_length=64, db_index=True)  # e.g. attendance
    target_type = models.CharField(max_length=64, blank=True)
    target_id = models.CharField(max_length=100, blank=True)
    details = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'audit_log'
        ordering = ['-created_at']
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'

    def __str__(self):
        return f"{self.actor} {self.action} {self.module} @ {self.created_at}"
