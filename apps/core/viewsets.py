"""
Shared base ViewSet classes for all apps.

Every tenant-scoped ModelViewSet should inherit from ``TenantScopedModelViewSet``
so that organisation isolation, standard response wrapping, pagination, filtering,
search, ordering, export and role enforcement come for free.
"""

from rest_framework import viewsets, filters
from rest_framework.permissions import IsAuthenticated
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.exceptions import PermissionDeniedException
from apps.core.mixins import ExportMixin
from apps.core.permissions import HasRole, TenantObjectPermission
from apps.core.tenant_guards import resolve_request_organization


# ---------------------------------------------------------------------------
# Base ViewSet, wraps responses in the standard envelope
# ---------------------------------------------------------------------------

class StandardResponseMixin:
    """Wraps *non-paginated* responses in ``{success, data, message}``."""

    def finalize_response(self, request, response, *args, **kwargs):
        response = super().finalize_response(request, response, *args, **kwargs)
        # Only wrap when we have an actual dict/list and it hasn't been wrapped
        if (
            hasattr(response, 'data')
            and response.data is not None
            and not isinstance(response.data, bytes)
            and response.status_code < 400
        ):
            data = response.data
            # Already wrapped by paginator or exception handler
            if isinstance(data, dict) and 'success' in data:
                return response
            response.data = {
                'success': True,
                'data': data,
                'message': self._get_success_message(request, response),
            }
        return response

    def _get_success_message(self, request, response):
        method = request.method
        messages = {
            'POST': 'Created successfully.',
            'PUT': 'Updated successfully.',
            'PATCH': 'Updated successfully.',
            'DELETE': 'Deleted successfully.',
        }
        return messages.get(method, 'OK')


class TenantContextMixin:
    """Organization resolution shared by tenant-scoped views."""

    def _resolve_organization(self, required=True):
        org = resolve_request_organization(self.request)
        if org:
            return org
        if required:
            raise PermissionDeniedException('Organization context required.', code='ORG_CONTEXT_REQUIRED')
        return None


# ---------------------------------------------------------------------------
# Tenant-Scoped ModelViewSet, the backbone for every app
# ---------------------------------------------------------------------------

class TenantScopedModelViewSet(
    StandardResponseMixin,
    ExportMixin,
    TenantContextMixin,
    viewsets.ModelViewSet,
):
    """
    ModelViewSet with built-in:

    • **Multi-tenancy**: auto-filters queryset by the request organization and
      injects it on create.
    • **Role enforcement**: per-action ``role_map`` checked via ``HasRole``.
    • **Pagination / filter / search / ordering**: ``DjangoFilterBackend``,
      ``SearchFilter`` and ``OrderingFilter``.
    • **Export**: ``export`` action from ``ExportMixin``.
    • **Standard response envelope**: ``{success, data, message}`` via
      ``StandardResponseMixin``.
    • **Soft delete**: ``destroy`` flags the row instead of removing it.
    """

    permission_classes = [IsAuthenticated, HasRole, TenantObjectPermission]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    ordering = ['-created_at']

    # -- Subclasses SHOULD set these ----------------------------------------
    # queryset = MyModel.objects.all()
    # serializer_class = MySerializer
    # filterset_class / filterset_fields = ...
    # search_fields = [...]
    # ordering_fields = [...]
    # role_map = {'create': ['admin', 'hr'], ...}

    list_serializer_class = None

    def get_serializer_class(self):
        if self.action == 'list' and self.list_serializer_class:
            return self.list_serializer_class
        return super().get_serializer_class()

    def get_queryset(self):
        qs = super().get_queryset()
        if getattr(self, 'swagger_fake_view', False):
            return qs.none()
        org = self._resolve_organization(required=False)
        if org and hasattr(qs.model, 'organization_id'):
            return qs.filter(organization=org)
        if self.request.user.is_superuser:
            return qs
        # FAIL-CLOSED: no organization context → no data
        return qs.none()

    def perform_create(self, serializer):
        org = self._resolve_organization()
        kwargs = {'organization': org}
        if hasattr(serializer.Meta.model, 'created_by_id'):
            kwargs['created_by'] = self.request.user
        serializer.save(**kwargs)

    def perform_update(self, serializer):
        kwargs = {}
        if hasattr(serializer.Meta.model, 'updated_by_id'):
            kwargs['updated_by'] = self.request.user
        serializer.save(**kwargs)

    def perform_destroy(self, instance):
        # Soft-delete if the model supports it; hard-delete otherwise
        if hasattr(instance, 'is_deleted'):
            instance.delete(deleted_by=self.request.user)
        else:
            instance.delete()
