"""
Employee Views
"""

import logging

from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.exceptions import ResourceNotFoundException
from apps.core.permissions import MANAGER_ROLES
from apps.core.viewsets import TenantScopedModelViewSet

from .filters import EmployeeFilter
from .models import Employee
from .serializers import EmployeeExportSerializer, EmployeeListSerializer, EmployeeSerializer
from .services import EmployeeService

logger = logging.getLogger(__name__)


class EmployeeViewSet(TenantScopedModelViewSet):
    """
    Employee Management API

    - GET /api/v1/employees/: List employees (search by name/email, filter by department/status)
    - POST /api/v1/employees/: Create employee
    - GET /api/v1/employees/by-card/{card}/: Lookup by NFC card
    - DELETE /api/v1/employees/{id}/: Soft delete

    Writes are restricted to admin / HR.
    """

    queryset = Employee.objects.select_related('user')
    serializer_class = EmployeeSerializer
    list_serializer_class = EmployeeListSerializer
    filterset_class = EmployeeFilter
    search_fields = ['name', 'email', 'nfc_card_id']
    ordering_fields = ['name', 'email', 'department', 'enrollment_date', 'created_at']
    ordering = ['name']
    export_filename = 'employees'
    role_map = {
        'create': MANAGER_ROLES,
        'update': MANAGER_ROLES,
        'partial_update': MANAGER_ROLES,
        'destroy': MANAGER_ROLES,
        'export': MANAGER_ROLES,
    }

    def get_export_serializer_class(self):
        return EmployeeExportSerializer

    def perform_create(self, serializer):
        super().perform_create(serializer)
        logger.info(
            "Employee created id=%s org=%s",
            serializer.instance.id,
            serializer.instance.organization_id,
        )

    @action(detail=False, methods=['get'], url_path=r'by-card/(?P<card_id>[^/]+)')
    def by_card(self, request, card_id=None):
        employee = EmployeeService.get_by_card(self._resolve_organization(), card_id)
        if employee is None:
            raise ResourceNotFoundException('Employee', code='EMPLOYEE_NOT_FOUND')
        return Response(EmployeeSerializer(employee, context=self.get_serializer_context()).data)
