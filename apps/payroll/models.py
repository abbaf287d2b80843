from decimal import Decimal
from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from apps.core.models import OrganizationEntity


def _assert_employee_org(instance, field_name='employee'):
    employee = getattr(instance, field_name, None)
    if employee is None:
        return
    if instance.organization_id and employee.organization_id != instance.organization_id:
        raise ValidationError({field_name: "Employee must belong to the same organization."})


# =====================================================
# PAYROLL RECORD (one per employee per month)
# =====================================================

class PayrollRecord(OrganizationEntity):
    """
    Monthly pay for one employee, aggregated from attendance.

    Rows are created by the aggregator and are never recomputed
    afterwards; corrections are manual edits.
    """

    STATUS_DRAFT = 'draft'
    STATUS_PROCESSED = 'processed'
    STATUS_PAID = 'paid'

    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_PROCESSED, 'Processed'),
        (STATUS_PAID, 'Paid'),
    ]

    employee = models.ForeignKey(
        'employees.Employee',
        on_delete=models.CASCADE,
        related_name='payroll_records'
    )
    month = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(12)])
    year = models.PositiveSmallIntegerField(validators=[MinValueValidator(2000), MaxValueValidator(2100)])

    present_days = models.PositiveIntegerField(default=0)
    leave_days = models.PositiveIntegerField(default=0)
    total_minutes = models.PositiveIntegerField(default=0)

    basic_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    allowances = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    gross_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    net_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    # Statutory figures, informational unless the statutory deduction mode is on
    pf_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    esic_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tds_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)
    payment_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'payroll_records'
        ordering = ['-year', '-month', 'employee__name']
        constraints = [
            models.UniqueConstraint(
                fields=['employee', 'month', 'year'],
                condition=models.Q(is_deleted=False),
                name='uniq_payroll_employee_month'
            ),
        ]
        indexes = [
            models.Index(fields=['organization', 'year', 'month'], name='payroll_org_period_idx'),
        ]

    def __str__(self):
        return f"{self.employee} - {self.month}/{self.year}"

    @property
    def total_hours(self):
        return (Decimal(self.total_minutes) / Decimal(60)).quantize(Decimal('0.01'))

    def clean(self):
        super().clean()
        _assert_employee_org(self)


# =====================================================
# SALARY COMPONENT (recurring allowance / deduction)
# =====================================================

class SalaryComponent(OrganizationEntity):
    """
    Recurring allowance or deduction folded into every payroll run while
    ``is_active``. Either a fixed ``amount`` or ``percentage_value`` of the
    period's basic pay.
    """

    TYPE_ALLOWANCE = 'allowance'
    TYPE_DEDUCTION = 'deduction'

    TYPE_CHOICES = [
        (TYPE_ALLOWANCE, 'Allowance'),
        (TYPE_DEDUCTION, 'Deduction'),
    ]

    employee = models.ForeignKey(
        'employees.Employee',
        on_delete=models.CASCADE,
        related_name='salary_components'
    )
    name = models.CharField(max_length=100)
    component_type = models.CharField(max_length=20, choices=TYPE_CHOICES, db_index=True)
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))]
    )
    is_percentage = models.BooleanField(default=False)
    percentage_value = models.DecimalField(
        max_digits=5, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )

    class Meta:
        db_table = 'salary_components'
        ordering = ['name']
        indexes = [
            models.Index(fields=['employee', 'is_active'], name='salary_comp_active_idx'),
        ]

    def __str__(self):
        return f"{self.employee} - {self.name}"

    def value_for(self, basic):
        if self.is_percentage:
            value = Decimal(str(basic)) * Decimal(str(self.percentage_value or 0)) / Decimal('100')
        else:
            value = Decimal(str(self.amount))
        return value.quantize(Decimal('0.01'))

    def clean(self):
        super().clean()
        _assert_employee_org(self)
