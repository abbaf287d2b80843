from rest_framework import serializers

from .models import Organization
from .tenant_guards import resolve_request_organization


class OrganizationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Organization
        fields = [
            'id', 'name', 'email', 'phone', 'website',
            'timezone', 'currency', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']


# ---------------------------------------------------------------------------
# Tenant-safe base serializer (cross-tenant FK guard)
# ---------------------------------------------------------------------------

class TenantScopedSerializer(serializers.ModelSerializer):
    """Base serializer that blocks cross-tenant FK writes."""

    tenant_fields = ()

    def validate(self, attrs):
        attrs = super().validate(attrs)
        organization = self._get_organization()
        if not organization:
            return attrs
        for field_name in self.tenant_fields:
            value = attrs.get(field_name)
            if value is None and self.instance is not None:
                value = getattr(self.instance, field_name, None)
            self._assert_same_org(value, organization, field_name)
        return attrs

    def _get_organization(self):
        request = self.context.get('request') if hasattr(self, 'context') else None
        if request is None:
            return None
        return resolve_request_organization(request)

    @staticmethod
    def _assert_same_org(value, organization, field_name):
        if not value or not organization:
            return
        related_org_id = getattr(value, 'organization_id', None)
        if related_org_id is None:
            return
        if related_org_id != organization.id:
            raise serializers.ValidationError(
                {field_name: 'Cross-tenant reference blocked.'}
            )
