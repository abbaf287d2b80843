"""
Financial report views
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.core.permissions import MANAGER_ROLES, HasRole
from apps.core.response import success_response
from apps.core.viewsets import TenantContextMixin

from .serializers import SalaryReportSerializer, TaxReportSerializer
from .services import SalaryReportService, TaxReportService


class ReportViewSet(TenantContextMixin, viewsets.ViewSet):
    """Read-only payroll reports for the caller's organization. HR and admins only."""

    permission_classes = [IsAuthenticated, HasRole]
    required_roles = MANAGER_ROLES

    @extend_schema(
        parameters=[
            OpenApiParameter('start_date', str, description='YYYY-MM-DD'),
            OpenApiParameter('end_date', str, description='YYYY-MM-DD'),
        ],
        responses=SalaryReportSerializer,
    )
    @action(detail=False, methods=['get'], url_path='salary-report')
    def salary_report(self, request):
        report = SalaryReportService.salary_report(
            self._resolve_organization(),
            request.query_params.get('start_date'),
            request.query_params.get('end_date'),
        )
        return success_response(SalaryReportSerializer(report).data)

    @extend_schema(
        parameters=[OpenApiParameter('financial_year', str, description='e.g. 2024-25')],
        responses=TaxReportSerializer,
    )
    @action(detail=False, methods=['get'], url_path='tax-report')
    def tax_report(self, request):
        report = TaxReportService.tax_report(
            self._resolve_organization(), request.query_params.get('financial_year')
        )
        return success_response(TaxReportSerializer(report).data)
