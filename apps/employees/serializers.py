"""
Employee Serializers
"""

from rest_framework import serializers

from apps.core.serializers import TenantScopedSerializer

from .models import Employee
from .services import EmployeeService


class EmployeeListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Employee
        fields = ['id', 'name', 'email', 'department', 'status', 'nfc_card_id', 'photo_url']


class EmployeeSerializer(TenantScopedSerializer):
    tenant_fields = ('user',)

    class Meta:
        model = Employee
        fields = [
            'id', 'name', 'email', 'department', 'photo_url', 'status',
            'enrollment_date', 'nfc_card_id', 'salary', 'hourly_rate', 'user',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Name is required.')
        return value

    def validate_email(self, value):
        return value.strip().lower()

    def validate_nfc_card_id(self, value):
        return (value or '').strip() or None

    def validate(self, attrs):
        attrs = super().validate(attrs)
        organization = self._get_organization()
        if organization is not None:
            EmployeeService.ensure_unique(
                organization,
                email=attrs.get('email'),
                nfc_card_id=attrs.get('nfc_card_id'),
                exclude_id=getattr(self.instance, 'id', None),
            )
        return attrs


class EmployeeExportSerializer(serializers.ModelSerializer):
    class Meta:
        model = Employee
        fields = ['name', 'email', 'department', 'status', 'nfc_card_id', 'salary', 'hourly_rate', 'enrollment_date']
