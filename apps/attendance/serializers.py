"""
Attendance Serializers
"""

from rest_framework import serializers

from apps.core.serializers import TenantScopedSerializer

from .models import AttendanceRecord, NFCTag, ReaderDevice
from .services import DeviceService


class EmployeeSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    email = serializers.EmailField()
    department = serializers.CharField()
    photo_url = serializers.CharField()


class AttendanceRecordListSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.name', read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = [
            'id', 'employee', 'employee_name', 'date', 'time_in', 'time_out',
            'duration', 'status', 'check_in_method', 'reader_id',
        ]


class AttendanceRecordSerializer(TenantScopedSerializer):
    """Admin edit of an attendance row. Creation goes through the tap / manual endpoints."""

    tenant_fields = ('employee',)
    employee_detail = EmployeeSummarySerializer(source='employee', read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = [
            'id', 'employee', 'employee_detail', 'date', 'time_in', 'time_out',
            'duration', 'status', 'check_in_method', 'reader_id', 'location',
            'latitude', 'longitude', 'tag_uid', 'idempotency_key', 'metadata',
            'notes', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'employee', 'date', 'duration', 'tag_uid', 'idempotency_key',
            'created_at', 'updated_at',
        ]

    def validate(self, attrs):
        attrs = super().validate(attrs)
        time_in = attrs.get('time_in', getattr(self.instance, 'time_in', None))
        time_out = attrs.get('time_out', getattr(self.instance, 'time_out', None))
        if time_in and time_out and time_out < time_in:
            raise serializers.ValidationError({'time_out': 'Check-out cannot be before check-in.'})
        return attrs

    def update(self, instance, validated_data):
        from .services import compute_duration_minutes

        instance = super().update(instance, validated_data)
        # An open record has no duration
        duration = None
        if instance.time_out is not None:
            duration = compute_duration_minutes(instance.time_in, instance.time_out)
        if duration != instance.duration:
            instance.duration = duration
            instance.save(update_fields=['duration', 'updated_at'])
        return instance


class PunchSerializer(serializers.Serializer):
    """Tap / punch request"""

    tag_uid = serializers.CharField(max_length=100, required=False, allow_blank=True)
    employee_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    reader_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    latitude = serializers.DecimalField(max_digits=10, decimal_places=8, required=False, allow_null=True)
    longitude = serializers.DecimalField(max_digits=11, decimal_places=8, required=False, allow_null=True)
    idempotency_key = serializers.CharField(max_length=255, required=False, allow_blank=True)
    metadata = serializers.JSONField(required=False)


class PunchResponseSerializer(serializers.Serializer):
    action = serializers.CharField()
    attendance = AttendanceRecordSerializer()
    employee = EmployeeSummarySerializer()


class ManualAttendanceSerializer(serializers.Serializer):
    employee_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    check_in = serializers.DateTimeField(required=False, allow_null=True)
    check_out = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class MarkLeaveResponseSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    updated_records = AttendanceRecordListSerializer(many=True)
    cutoff_date = serializers.DateField()


class TodaySummarySerializer(serializers.Serializer):
    date = serializers.DateField()
    total_employees = serializers.IntegerField()
    present = serializers.IntegerField()
    late = serializers.IntegerField()
    absent = serializers.IntegerField()
    on_leave = serializers.IntegerField()
    checked_out = serializers.IntegerField()
    still_working = serializers.IntegerField()


class NFCTagSerializer(TenantScopedSerializer):
    tenant_fields = ('employee',)
    employee_name = serializers.SerializerMethodField()

    class Meta:
        model = NFCTag
        fields = [
            'id', 'tag_uid', 'employee', 'employee_name', 'status', 'enrolled_at',
            'enrolled_by', 'last_used_at', 'reader_id', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'enrolled_at', 'enrolled_by', 'last_used_at', 'created_at', 'updated_at']

    def validate_tag_uid(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Tag UID is required.')
        return value

    def get_employee_name(self, obj):
        return obj.employee.name if obj.employee_id else None

    def validate(self, attrs):
        attrs = super().validate(attrs)
        organization = self._get_organization()
        if organization is not None and attrs.get('tag_uid'):
            DeviceService.ensure_tag_available(
                organization, attrs['tag_uid'], exclude_id=getattr(self.instance, 'id', None)
            )
        return attrs


class ReaderDeviceSerializer(TenantScopedSerializer):
    type = serializers.ChoiceField(source='reader_type', choices=ReaderDevice.TYPE_CHOICES, required=False)

    class Meta:
        model = ReaderDevice
        fields = [
            'id', 'reader_id', 'name', 'location', 'type', 'status', 'ip_address',
            'last_heartbeat', 'config', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'last_heartbeat', 'created_at', 'updated_at']

    def validate(self, attrs):
        attrs = super().validate(attrs)
        organization = self._get_organization()
        if organization is not None and attrs.get('reader_id'):
            DeviceService.ensure_reader_available(
                organization, attrs['reader_id'], exclude_id=getattr(self.instance, 'id', None)
            )
        return attrs


class HeartbeatSerializer(serializers.Serializer):
    ip_address = serializers.IPAddressField(required=False, allow_null=True)
    config = serializers.JSONField(required=False)
