from django.contrib import admin, messages

from .models import Employee, ProcessedAttendance, AuditLog
from .attendance_repair import fix_attendance_records, recalculate_attendance_metrics
from .audit_logging import log_batch_run


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ('idno', 'last_name', 'first_name', 'department', 'is_active')
    list_filter = ('is_active', 'department')
    search_fields = ('idno', 'first_name', 'last_name')


@admin.register(ProcessedAttendance)
class ProcessedAttendanceAdmin(admin.ModelAdmin):
    list_display = (
        'employee', 'attendance_date', 'time_in', 'time_out', 'next_day_timeout', 'is_nightshift',
        'late_minutes', 'undertime_minutes', 'hours_worked', 'source', 'posting_status',
    )
    list_filter = ('attendance_date', 'is_nightshift', 'source', 'posting_status')
    search_fields = ('employee__idno', 'employee__last_name')
    readonly_fields = ('late_minutes', 'undertime_minutes', 'hours_worked', 'created_at', 'updated_at')
    actions = ['recalculate_metrics', 'repair_night_shift']

    def _report_to_user(self, request, report, verb):
        for row in report.error_rows:
            self.message_user(request, f"Attendance {row['id']}: {row['error']}", level=messages.ERROR)
        self.message_user(
            request,
            f'{verb} {report.changed} of {report.total_records} attendance record(s).',
            level=messages.WARNING if report.errors else messages.SUCCESS,
        )

    @admin.action(description='Recalculate late / undertime / hours')
    def recalculate_metrics(self, request, queryset):
        report = recalculate_attendance_metrics(queryset=queryset)
        log_batch_run('recalculate', report, None, request=request, extra={'selected': queryset.count()})
        self._report_to_user(request, report, 'Recalculated')

    @admin.action(description='Repair night-shift time out and recalculate')
    def repair_night_shift(self, request, queryset):
        report = fix_attendance_records(queryset=queryset)
        log_batch_run('fix', report, None, request=request, extra={'selected': queryset.count()})
        self._report_to_user(request, report, 'Fixed')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'actor', 'action', 'module', 'target_type', 'target_id')
    list_filter = ('action', 'module')
    search_fields = ('actor', 'target_id')
