from rest_framework import serializers

from apps.core.exceptions import ValidationException
from apps.core.serializers import TenantScopedSerializer
from apps.employees.serializers import EmployeeListSerializer

from .models import PayrollRecord, SalaryComponent


class PayrollRecordListSerializer(serializers.ModelSerializer):
    employee_name = serializers.ReadOnlyField(source='employee.name')

    class Meta:
        model = PayrollRecord
        fields = [
            'id', 'employee', 'employee_name', 'month', 'year', 'present_days',
            'gross_salary', 'deductions', 'net_salary', 'status', 'payment_date',
        ]


class PayrollRecordSerializer(TenantScopedSerializer):
    """Edits after generation. Period and employee are fixed once generated."""

    tenant_fields = ('employee',)
    employee_detail = EmployeeListSerializer(source='employee', read_only=True)
    total_hours = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = PayrollRecord
        fields = [
            'id', 'employee', 'employee_detail', 'month', 'year',
            'present_days', 'leave_days', 'total_minutes', 'total_hours',
            'basic_salary', 'allowances', 'deductions', 'gross_salary', 'net_salary',
            'pf_amount', 'esic_amount', 'tds_amount',
            'status', 'payment_date', 'notes', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'employee', 'month', 'year', 'present_days', 'leave_days',
            'total_minutes', 'created_at', 'updated_at',
        ]


class PayrollGenerateSerializer(serializers.Serializer):
    # Raw values; range checks produce INVALID_MONTH / INVALID_YEAR in the service
    month = serializers.CharField(required=False, allow_blank=True)
    year = serializers.CharField(required=False, allow_blank=True)
    employee_id = serializers.UUIDField(required=False, allow_null=True)


class PayrollGenerateResponseSerializer(serializers.Serializer):
    month = serializers.IntegerField()
    year = serializers.IntegerField()
    count = serializers.IntegerField()
    records = PayrollRecordListSerializer(many=True)
    skipped = EmployeeListSerializer(many=True)


class MarkPaidSerializer(serializers.Serializer):
    payment_date = serializers.DateField(required=False, allow_null=True)


class PayrollExportSerializer(serializers.ModelSerializer):
    """Column layout of the payroll CSV."""

    Employee = serializers.ReadOnlyField(source='employee.name')
    Email = serializers.ReadOnlyField(source='employee.email')
    Department = serializers.ReadOnlyField(source='employee.department')
    present_days_col = serializers.IntegerField(source='present_days', read_only=True)
    leave_days_col = serializers.IntegerField(source='leave_days', read_only=True)
    total_hours_col = serializers.DecimalField(source='total_hours', max_digits=10, decimal_places=2, read_only=True)
    gross_col = serializers.DecimalField(source='gross_salary', max_digits=12, decimal_places=2, read_only=True)
    deductions_col = serializers.DecimalField(source='deductions', max_digits=12, decimal_places=2, read_only=True)
    net_col = serializers.DecimalField(source='net_salary', max_digits=12, decimal_places=2, read_only=True)

    COLUMN_LABELS = {
        'present_days_col': 'Present Days',
        'leave_days_col': 'Leave Days',
        'total_hours_col': 'Total Hours',
        'gross_col': 'Gross Pay',
        'deductions_col': 'Deductions',
        'net_col': 'Net Pay',
    }

    class Meta:
        model = PayrollRecord
        fields = [
            'Employee', 'Email', 'Department', 'present_days_col', 'leave_days_col',
            'total_hours_col', 'gross_col', 'deductions_col', 'net_col',
        ]


class SalaryComponentSerializer(TenantScopedSerializer):
    tenant_fields = ('employee',)
    employee_name = serializers.ReadOnlyField(source='employee.name')

    class Meta:
        model = SalaryComponent
        fields = [
            'id', 'employee', 'employee_name', 'name', 'component_type', 'amount',
            'is_percentage', 'percentage_value', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        # Range checks below carry their own error codes
        extra_kwargs = {
            'amount': {'validators': []},
            'percentage_value': {'validators': []},
        }

    def validate_amount(self, value):
        if value is not None and value < 0:
            raise ValidationException('Amount cannot be negative', code='INVALID_AMOUNT', field='amount')
        return value

    def validate_percentage_value(self, value):
        if value is not None and not 0 <= value <= 100:
            raise ValidationException(
                'Percentage value must be between 0 and 100',
                code='INVALID_PERCENTAGE_VALUE', field='percentage_value',
            )
        return value

    def validate(self, attrs):
        attrs = super().validate(attrs)
        instance = self.instance
        is_percentage = attrs.get('is_percentage', getattr(instance, 'is_percentage', False))
        if is_percentage:
            percentage = attrs.get('percentage_value', getattr(instance, 'percentage_value', None))
            if percentage is None:
                raise ValidationException(
                    'Percentage value is required for percentage components',
                    code='MISSING_PERCENTAGE_VALUE', field='percentage_value',
                )
        return attrs
