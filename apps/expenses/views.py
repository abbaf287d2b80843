"""
Expense Views
"""

import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.decorators import action

from apps.core.exceptions import PermissionDeniedException
from apps.core.permissions import MANAGER_ROLES, user_has_role
from apps.core.response import success_response
from apps.core.viewsets import TenantScopedModelViewSet

from .filters import ExpenseFilter
from .models import Expense
from .serializers import (
    ExpenseAnalyticsSerializer,
    ExpenseDecisionSerializer,
    ExpenseListSerializer,
    ExpenseSerializer,
    ReimburseSerializer,
)
from .services import ExpenseService

logger = logging.getLogger(__name__)


class ExpenseViewSet(TenantScopedModelViewSet):
    """
    Employee expenses.

    Employees file and read their own; HR and admins see every expense
    and drive approval and reimbursement.

    - POST {id}/approve/ {"status": "approved" | "rejected"}
    - POST {id}/reimburse/
    - GET analytics/?period=monthly&year=&month=
    """

    queryset = Expense.objects.select_related('employee', 'approved_by')
    serializer_class = ExpenseSerializer
    list_serializer_class = ExpenseListSerializer
    filterset_class = ExpenseFilter
    search_fields = ['description', 'category', 'employee__name']
    ordering_fields = ['expense_date', 'amount', 'status', 'created_at']
    ordering = ['-expense_date', '-created_at']
    role_map = {
        'update': MANAGER_ROLES,
        'partial_update': MANAGER_ROLES,
        'destroy': MANAGER_ROLES,
        'approve': MANAGER_ROLES,
        'reimburse': MANAGER_ROLES,
        'analytics': MANAGER_ROLES,
        'export': MANAGER_ROLES,
    }

    def _is_manager(self):
        return user_has_role(self.request.user, *MANAGER_ROLES)

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action in ('list', 'retrieve') and not self._is_manager():
            queryset = queryset.filter(employee__user=self.request.user)
        return queryset

    def perform_create(self, serializer):
        employee = serializer.validated_data['employee']
        if not self._is_manager() and employee.user_id != self.request.user.id:
            raise PermissionDeniedException('You can only file expenses for yourself')
        super().perform_create(serializer)
        logger.info("Expense %s filed for employee %s", serializer.instance.id, employee.id)

    @extend_schema(request=ExpenseDecisionSerializer, responses=ExpenseSerializer)
    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        expense = self.get_object()
        serializer = ExpenseDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        expense = ExpenseService.decide(expense, data.get('status'), user=request.user)
        if data.get('notes'):
            expense.notes = data['notes']
            expense.save(update_fields=['notes', 'updated_at'])
        return success_response(self.get_serializer(expense).data, message=f'Expense {expense.status}')

    @extend_schema(request=ReimburseSerializer, responses=ExpenseSerializer)
    @action(detail=True, methods=['post'])
    def reimburse(self, request, pk=None):
        expense = self.get_object()
        serializer = ReimburseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        expense = ExpenseService.reimburse(
            expense, serializer.validated_data.get('reimbursed_at'), user=request.user
        )
        return success_response(self.get_serializer(expense).data, message='Expense reimbursed')

    @extend_schema(
        parameters=[
            OpenApiParameter('period', str, enum=['monthly', 'yearly'], description='Default monthly'),
            OpenApiParameter('year', int),
            OpenApiParameter('month', int, description='Required for monthly'),
        ],
        responses=ExpenseAnalyticsSerializer,
    )
    @action(detail=False, methods=['get'])
    def analytics(self, request):
        params = request.query_params
        result = ExpenseService.analytics(
            self.get_queryset(), params.get('period', 'monthly'), params.get('year'), params.get('month'),
        )
        return success_response(ExpenseAnalyticsSerializer(result).data)
