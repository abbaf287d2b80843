from rest_framework import serializers

from apps.core.exceptions import ValidationException
from apps.core.serializers import TenantScopedSerializer

from .models import Expense


class ExpenseListSerializer(serializers.ModelSerializer):
    employee_name = serializers.ReadOnlyField(source='employee.name')

    class Meta:
        model = Expense
        fields = [
            'id', 'employee', 'employee_name', 'category', 'amount', 'expense_date',
            'status', 'reimbursement_status',
        ]


class ExpenseSerializer(TenantScopedSerializer):
    """Approval and reimbursement fields only change through their actions."""

    tenant_fields = ('employee',)
    employee_name = serializers.ReadOnlyField(source='employee.name')
    approved_by_email = serializers.ReadOnlyField(source='approved_by.email')

    class Meta:
        model = Expense
        fields = [
            'id', 'employee', 'employee_name', 'category', 'description', 'amount',
            'expense_date', 'receipt_url', 'status', 'approved_by', 'approved_by_email',
            'approved_at', 'reimbursement_status', 'reimbursed_at', 'notes',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'status', 'approved_by', 'approved_at', 'reimbursement_status',
            'reimbursed_at', 'created_at', 'updated_at',
        ]
        extra_kwargs = {'amount': {'validators': []}}

    def validate_amount(self, value):
        if value is None or value <= 0:
            raise ValidationException('Amount must be greater than zero', code='INVALID_AMOUNT', field='amount')
        return value

    def validate_category(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Category is required.')
        return value


class ExpenseDecisionSerializer(serializers.Serializer):
    # Raw value; the service rejects anything but approved / rejected
    status = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class ReimburseSerializer(serializers.Serializer):
    reimbursed_at = serializers.DateField(required=False, allow_null=True)


class ExpenseGroupSerializer(serializers.Serializer):
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
    count = serializers.IntegerField()


class CategoryGroupSerializer(ExpenseGroupSerializer):
    category = serializers.CharField()


class StatusGroupSerializer(ExpenseGroupSerializer):
    status = serializers.CharField()


class ReimbursementGroupSerializer(ExpenseGroupSerializer):
    reimbursement_status = serializers.CharField()


class EmployeeGroupSerializer(ExpenseGroupSerializer):
    employee_id = serializers.UUIDField()
    employee_name = serializers.CharField()


class ExpenseAnalyticsSerializer(serializers.Serializer):
    period = serializers.CharField()
    year = serializers.IntegerField()
    month = serializers.IntegerField(allow_null=True)
    total_expenses = serializers.DecimalField(max_digits=14, decimal_places=2)
    count = serializers.IntegerField()
    by_category = CategoryGroupSerializer(many=True)
    by_status = StatusGroupSerializer(many=True)
    by_reimbursement_status = ReimbursementGroupSerializer(many=True)
    by_employee = EmployeeGroupSerializer(many=True)
