"""
Payroll Views
"""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action

from apps.core.permissions import MANAGER_ROLES, user_has_role
from apps.core.response import success_response
from apps.core.viewsets import TenantScopedModelViewSet

from .filters import PayrollRecordFilter, SalaryComponentFilter
from .models import PayrollRecord, SalaryComponent
from .serializers import (
    MarkPaidSerializer,
    PayrollExportSerializer,
    PayrollGenerateResponseSerializer,
    PayrollGenerateSerializer,
    PayrollRecordListSerializer,
    PayrollRecordSerializer,
    SalaryComponentSerializer,
)
from .services import PayrollAggregationService

logger = logging.getLogger(__name__)


class PayrollRecordViewSet(TenantScopedModelViewSet):
    """
    Monthly payroll rows.

    - POST generate/: aggregate a month for one employee or every active one
    - GET export/?month=&year=: CSV (or ``export_format=xlsx``)
    - POST {id}/mark-paid/
    """

    queryset = PayrollRecord.objects.select_related('employee')
    serializer_class = PayrollRecordSerializer
    list_serializer_class = PayrollRecordListSerializer
    filterset_class = PayrollRecordFilter
    search_fields = ['employee__name', 'employee__email']
    ordering_fields = ['year', 'month', 'gross_salary', 'net_salary', 'status']
    ordering = ['-year', '-month', 'employee__name']
    export_filename = 'payroll'
    role_map = {
        'create': MANAGER_ROLES,
        'update': MANAGER_ROLES,
        'partial_update': MANAGER_ROLES,
        'destroy': MANAGER_ROLES,
        'generate': MANAGER_ROLES,
        'mark_paid': MANAGER_ROLES,
        'export': MANAGER_ROLES,
    }

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action in ('list', 'retrieve') and not user_has_role(self.request.user, *MANAGER_ROLES):
            queryset = queryset.filter(employee__user=self.request.user)
        return queryset

    def get_export_serializer_class(self):
        return PayrollExportSerializer

    def get_export_dataframe(self, queryset):
        df = super().get_export_dataframe(queryset)
        return df.rename(columns=PayrollExportSerializer.COLUMN_LABELS)

    @extend_schema(request=PayrollGenerateSerializer, responses=PayrollGenerateResponseSerializer)
    @action(detail=False, methods=['post'])
    def generate(self, request):
        serializer = PayrollGenerateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        organization = self._resolve_organization()

        if data.get('employee_id'):
            record = PayrollAggregationService.generate_for_employee(
                organization, data['employee_id'], data.get('month'), data.get('year'),
                created_by=request.user,
            )
            return success_response(
                PayrollRecordSerializer(record, context=self.get_serializer_context()).data,
                message='Payroll generated successfully',
                http_status=status.HTTP_201_CREATED,
            )

        result = PayrollAggregationService.generate(
            organization, data.get('month'), data.get('year'), created_by=request.user,
        )
        payload = PayrollGenerateResponseSerializer({
            'month': result['month'],
            'year': result['year'],
            'count': len(result['created']),
            'records': result['created'],
            'skipped': result['skipped'],
        }).data
        return success_response(
            payload,
            message=f"Successfully generated payroll for {len(result['created'])} employees",
            http_status=status.HTTP_201_CREATED,
        )

    def create(self, request, *args, **kwargs):
        """Records are only ever produced by the aggregator."""
        return self.generate(request)

    @extend_schema(request=MarkPaidSerializer, responses=PayrollRecordSerializer)
    @action(detail=True, methods=['post'], url_path='mark-paid')
    def mark_paid(self, request, pk=None):
        record = self.get_object()
        serializer = MarkPaidSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = PayrollAggregationService.mark_paid(
            record, serializer.validated_data.get('payment_date'), user=request.user
        )
        logger.info("Payroll %s marked paid", record.id)
        return success_response(self.get_serializer(record).data, message='Payroll marked as paid')


class SalaryComponentViewSet(TenantScopedModelViewSet):
    """Recurring allowances and deductions applied by the payroll generator."""

    queryset = SalaryComponent.objects.select_related('employee')
    serializer_class = SalaryComponentSerializer
    filterset_class = SalaryComponentFilter
    search_fields = ['name', 'employee__name']
    ordering_fields = ['name', 'component_type', 'amount', 'created_at']
    ordering = ['employee__name', 'name']
    required_roles = MANAGER_ROLES
