from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from apps.core.models import OrganizationEntity


class Expense(OrganizationEntity):
    """
    One reimbursable expense filed by an employee.

    Approval and reimbursement are tracked separately: an expense is
    first approved or rejected, and only an approved one can be paid out.
    """

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    REIMBURSEMENT_PENDING = 'pending'
    REIMBURSEMENT_PAID = 'paid'

    REIMBURSEMENT_CHOICES = [
        (REIMBURSEMENT_PENDING, 'Pending'),
        (REIMBURSEMENT_PAID, 'Paid'),
    ]

    employee = models.ForeignKey(
        'employees.Employee',
        on_delete=models.CASCADE,
        related_name='expenses'
    )
    category = models.CharField(max_length=100, db_index=True)
    description = models.TextField()
    amount = models.DecimalField(
        max_digits=12, decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    expense_date = models.DateField(db_index=True)
    receipt_url = models.URLField(max_length=500, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_expenses'
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    reimbursement_status = models.CharField(
        max_length=20, choices=REIMBURSEMENT_CHOICES, default=REIMBURSEMENT_PENDING, db_index=True
    )
    reimbursed_at = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'expenses'
        ordering = ['-expense_date', '-created_at']
        indexes = [
            models.Index(fields=['organization', 'expense_date'], name='expense_org_date_idx'),
        ]

    def __str__(self):
        return f"{self.employee} - {self.category} {self.amount}"

    @property
    def is_reimbursed(self):
        return self.reimbursement_status == self.REIMBURSEMENT_PAID

    def clean(self):
        super().clean()
        if self.organization_id and self.employee_id and self.employee.organization_id != self.organization_id:
            raise ValidationError({'employee': "Employee must belong to the same organization."})
