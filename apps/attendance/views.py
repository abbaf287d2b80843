"""
Attendance Views - NFC tap toggle, check-in / check-out, HR tools, tags and readers
"""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.exceptions import ResourceNotFoundException, ValidationException
from apps.core.permissions import MANAGER_ROLES, user_has_role
from apps.core.response import success_response
from apps.core.throttling import AttendancePunchThrottle
from apps.core.utils import parse_iso_date
from apps.core.viewsets import TenantScopedModelViewSet

from .filters import AttendanceRecordFilter, NFCTagFilter, ReaderDeviceFilter
from .models import AttendanceRecord, NFCTag, ReaderDevice
from .serializers import (
    AttendanceRecordListSerializer,
    AttendanceRecordSerializer,
    HeartbeatSerializer,
    ManualAttendanceSerializer,
    MarkLeaveResponseSerializer,
    NFCTagSerializer,
    PunchResponseSerializer,
    PunchSerializer,
    ReaderDeviceSerializer,
    TodaySummarySerializer,
)
from .services import AttendanceService, DeviceService

logger = logging.getLogger(__name__)


class AttendanceViewSet(TenantScopedModelViewSet):
    """
    Attendance records.

    - POST /api/v1/attendance/toggle/: NFC tap (check-in / check-out / noop)
    - POST records/checkin/, records/checkout/: explicit punches
    - POST records/manual/, records/mark-leave/: HR tools
    - GET records/today/, records/today/{employee_id}/
    """

    queryset = AttendanceRecord.objects.select_related('employee')
    serializer_class = AttendanceRecordSerializer
    list_serializer_class = AttendanceRecordListSerializer
    filterset_class = AttendanceRecordFilter
    search_fields = ['employee__name', 'employee__email', 'tag_uid']
    ordering_fields = ['date', 'time_in', 'time_out', 'duration', 'status']
    ordering = ['-date', '-time_in']
    export_filename = 'attendance'
    role_map = {
        'create': MANAGER_ROLES,
        'update': MANAGER_ROLES,
        'partial_update': MANAGER_ROLES,
        'destroy': MANAGER_ROLES,
        'manual': MANAGER_ROLES,
        'mark_leave': MANAGER_ROLES,
        'today_summary': MANAGER_ROLES,
        'export': MANAGER_ROLES,
    }

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action in ('list', 'retrieve') and not user_has_role(self.request.user, *MANAGER_ROLES):
            # Own attendance only
            queryset = queryset.filter(employee__user=self.request.user)
        return queryset

    def _punch_response(self, result):
        payload = PunchResponseSerializer(result, context=self.get_serializer_context()).data
        return success_response(
            payload,
            message=result['message'],
            http_status=status.HTTP_201_CREATED if result['created'] else status.HTTP_200_OK,
        )

    def _punch_data(self, request):
        serializer = PunchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    @extend_schema(request=PunchSerializer, responses=PunchResponseSerializer)
    @action(detail=False, methods=['post'], throttle_classes=[AttendancePunchThrottle])
    def toggle(self, request):
        """Single-reader tap. Decides check-in vs check-out from today's record."""
        result = AttendanceService.toggle(self._resolve_organization(), self._punch_data(request))
        return self._punch_response(result)

    @extend_schema(request=PunchSerializer, responses=PunchResponseSerializer)
    @action(detail=False, methods=['post'], throttle_classes=[AttendancePunchThrottle])
    def checkin(self, request):
        result = AttendanceService.check_in(self._resolve_organization(), self._punch_data(request))
        return self._punch_response(result)

    @extend_schema(request=PunchSerializer, responses=PunchResponseSerializer)
    @action(detail=False, methods=['post'], throttle_classes=[AttendancePunchThrottle])
    def checkout(self, request):
        result = AttendanceService.check_out(self._resolve_organization(), self._punch_data(request))
        return self._punch_response(result)

    @extend_schema(request=ManualAttendanceSerializer, responses=AttendanceRecordSerializer)
    @action(detail=False, methods=['post'])
    def manual(self, request):
        """Manual entry by admin / HR."""
        serializer = ManualAttendanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        record = AttendanceService.manual_entry(
            self._resolve_organization(),
            data.get('employee_id'),
            data.get('check_in'),
            check_out=data.get('check_out'),
            notes=data.get('notes', ''),
            entered_by=request.user,
        )
        return success_response(
            AttendanceRecordSerializer(record, context=self.get_serializer_context()).data,
            message='Manual attendance entry created successfully',
            http_status=status.HTTP_201_CREATED,
        )

    def create(self, request, *args, **kwargs):
        """Compatibility alias for manual entry."""
        return self.manual(request)

    @extend_schema(responses=MarkLeaveResponseSerializer)
    @action(detail=False, methods=['post'], url_path='mark-leave')
    def mark_leave(self, request):
        raw_cutoff = request.data.get('cutoff_date') or request.query_params.get('cutoff_date')
        cutoff_date = parse_iso_date(raw_cutoff)
        if raw_cutoff and cutoff_date is None:
            raise ValidationException('cutoff_date must be in YYYY-MM-DD format', code='INVALID_DATE_FORMAT')

        result = AttendanceService.mark_leave(self._resolve_organization(), cutoff_date)
        return success_response(
            MarkLeaveResponseSerializer(result).data,
            message=f"{result['count']} records marked as leave",
        )

    @extend_schema(responses=TodaySummarySerializer)
    @action(detail=False, methods=['get'], url_path='today')
    def today_summary(self, request):
        summary = AttendanceService.today_summary(self._resolve_organization())
        return Response(TodaySummarySerializer(summary).data)

    @action(detail=False, methods=['get'], url_path=r'today/(?P<employee_id>[^/.]+)')
    def employee_today(self, request, employee_id=None):
        record = AttendanceService.employee_today(self._resolve_organization(), employee_id)
        if record is None:
            return success_response(None, message='No attendance recorded today')
        return Response(AttendanceRecordSerializer(record, context=self.get_serializer_context()).data)


class NFCTagViewSet(TenantScopedModelViewSet):
    """NFC tag enrollment. Writes are restricted to admin / HR."""

    queryset = NFCTag.objects.select_related('employee')
    serializer_class = NFCTagSerializer
    filterset_class = NFCTagFilter
    search_fields = ['tag_uid', 'employee__name']
    ordering_fields = ['enrolled_at', 'last_used_at', 'tag_uid']
    ordering = ['-enrolled_at']
    export_filename = 'nfc_tags'
    role_map = {
        'create': MANAGER_ROLES,
        'update': MANAGER_ROLES,
        'partial_update': MANAGER_ROLES,
        'destroy': MANAGER_ROLES,
    }

    def perform_create(self, serializer):
        serializer.save(
            organization=self._resolve_organization(),
            created_by=self.request.user,
            enrolled_by=self.request.user,
        )
        logger.info("NFC tag enrolled tag=%s employee=%s", serializer.instance.tag_uid,
                    serializer.instance.employee_id)

    @action(detail=False, methods=['get'], url_path=r'by-uid/(?P<tag_uid>[^/]+)')
    def by_uid(self, request, tag_uid=None):
        tag = self.get_queryset().filter(tag_uid=tag_uid).first()
        if tag is None:
            raise ResourceNotFoundException('NFC tag', code='TAG_NOT_FOUND')
        return Response(self.get_serializer(tag).data)


class ReaderDeviceViewSet(TenantScopedModelViewSet):
    """Reader registry and liveness."""

    queryset = ReaderDevice.objects.all()
    serializer_class = ReaderDeviceSerializer
    filterset_class = ReaderDeviceFilter
    search_fields = ['reader_id', 'name', 'location']
    ordering_fields = ['name', 'last_heartbeat', 'status']
    ordering = ['name']
    export_filename = 'readers'
    role_map = {
        'create': MANAGER_ROLES,
        'update': MANAGER_ROLES,
        'partial_update': MANAGER_ROLES,
        'destroy': MANAGER_ROLES,
    }

    @extend_schema(request=HeartbeatSerializer, responses=ReaderDeviceSerializer)
    @action(detail=True, methods=['post'])
    def heartbeat(self, request, pk=None):
        serializer = HeartbeatSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reader = DeviceService.heartbeat(
            self._resolve_organization(),
            pk,
            ip_address=serializer.validated_data.get('ip_address'),
            config=serializer.validated_data.get('config'),
        )
        return success_response(self.get_serializer(reader).data, message='Heartbeat received successfully')
