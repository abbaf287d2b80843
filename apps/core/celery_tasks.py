"""
Base Celery Tasks
SECURITY: Enforces tenant isolation for background jobs
"""

from apps.core.models import Organization


class TenantTaskError(Exception):
    pass


class TenantAwareTask:
    """
    Base mixin for tenant-safe Celery tasks
    """

    @staticmethod
    def get_organization(organization_id):
        if not organization_id:
            raise TenantTaskError("organization_id is required")

        try:
            return Organization.objects.get(id=organization_id, is_active=True)
        except Organization.DoesNotExist:
            raise TenantTaskError(f"Invalid organization_id: {organization_id}")

    @staticmethod
    def active_organization_ids():
        return [str(pk) for pk in Organization.objects.filter(is_active=True).values_list('id', flat=True)]
