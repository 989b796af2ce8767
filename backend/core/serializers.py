from rest_framework import serializers
from .models import Employee, ProcessedAttendance, AuditLog
from .attendance_repair import AttendanceFilter, InvalidFilterError


class EmployeeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Employee
        fields = ['id', 'idno', 'first_name', 'last_name', 'department', 'is_active']


class ProcessedAttendanceSerializer(serializers.ModelSerializer):
    """Attendance row with derived metrics (read-only: owned by the metrics calculator)."""
    employee_idno = serializers.CharField(source='employee.idno', read_only=True)
    employee_name = serializers.SerializerMethodField()

    class Meta:
        model = ProcessedAttendance
        fields = [
            'id', 'employee', 'employee_idno', 'employee_name', 'attendance_date', 'day',
            'time_in', 'time_out', 'break_in', 'break_out', 'next_day_timeout', 'is_nightshift',
            'late_minutes', 'undertime_minutes', 'hours_worked',
            'status', 'source', 'remarks', 'posting_status', 'updated_at',
        ]
        read_only_fields = ['late_minutes', 'undertime_minutes', 'hours_worked', 'updated_at']

    def get_employee_name(self, obj):
        return f"{obj.employee.last_name}, {obj.employee.first_name}"


class AttendanceRecalculateSerializer(serializers.Serializer):
    """POST body for /attendance/recalculate/. Validates the filter before any row is read."""
    MODE_RECALCULATE = 'recalculate'
    MODE_FIX = 'fix'

    employee_id = serializers.IntegerField(required=False, allow_null=True)
    date = serializers.DateField(required=False, allow_null=True)
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)
    dry_run = serializers.BooleanField(required=False, default=False)
    batch_size = serializers.IntegerField(required=False, default=100, min_value=1)
    mode = serializers.ChoiceField(choices=[MODE_RECALCULATE, MODE_FIX], required=False, default=MODE_RECALCULATE)
    # Payroll-posted rows are frozen unless explicitly included
    skip_posted = serializers.BooleanField(required=False, default=True)

    def validate(self, attrs):
        try:
            attrs['filters'] = AttendanceFilter.from_options(
                employee_id=attrs.get('employee_id'),
                date=attrs.get('date'),
                start_date=attrs.get('start_date'),
                end_date=attrs.get('end_date'),
                exclude_posted=attrs.get('skip_posted', True),
            )
        except InvalidFilterError as e:
            raise serializers.ValidationError(str(e))
        return attrs


class AuditLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = AuditLog
        fields = ['id', 'actor', 'action', 'module', 'target_type', 'target_id', 'details', 'ip_address', 'created_at']
