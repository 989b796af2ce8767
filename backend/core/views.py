import logging

from rest_framework import viewsets
from rest_framework.views import APIView
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from .models import ProcessedAttendance, AuditLog
from .serializers import (
    ProcessedAttendanceSerializer, AttendanceRecalculateSerializer, AuditLogSerializer,
)
from .attendance_repair import recalculate_attendance_metrics, fix_attendance_records
from .audit_logging import log_batch_run

logger = logging.getLogger(__name__)


class ProcessedAttendanceViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = ProcessedAttendance.objects.select_related('employee')
    serializer_class = ProcessedAttendanceSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['employee', 'is_nightshift', 'source', 'posting_status']

    def get_queryset(self):
        qs = super().get_queryset()
        date_single = self.request.query_params.get('date', '').strip()
        date_from = self.request.query_params.get('date_from', '').strip()
        date_to = self.request.query_params.get('date_to', '').strip()
        if date_single:
            qs = qs.filter(attendance_date=date_single)
        if date_from:
            qs = qs.filter(attendance_date__gte=date_from)
        if date_to:
            qs = qs.filter(attendance_date__lte=date_to)
        return qs.order_by('-attendance_date', 'employee_id')


class AttendanceRecalculateView(APIView):
    """
    POST {employee_id?, date?, start_date?, end_date?, dry_run?, batch_size?, mode?, skip_posted?}
    Runs the metrics recalculation (mode=recalculate) or the night-shift fix (mode=fix)
    and returns the batch report. Invalid filters -> 400, nothing touched.
    """
    def post(self, request):
        ser = AttendanceRecalculateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        filters = data['filters']
        if data['mode'] == AttendanceRecalculateSerializer.MODE_FIX:
            run, action = fix_attendance_records, 'fix'
        else:
            run, action = recalculate_attendance_metrics, 'recalculate'
        logger.info('Starting manual %s via API: %s dry_run=%s', action, filters.as_dict(), data['dry_run'])
        report = run(filters, dry_run=data['dry_run'], batch_size=data['batch_size'])
        log_batch_run(action, report, filters, request=request, actor='api')
        return Response({'success': True, 'mode': action, **report.as_dict()})


class AuditLogListView(APIView):
    """Latest attendance batch runs (live only)."""
    def get(self, request):
        qs = AuditLog.objects.filter(module='attendance').order_by('-created_at')[:100]
        return Response(AuditLogSerializer(qs, many=True).data)
