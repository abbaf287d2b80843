"""
Expense Services - approval, reimbursement and spend analytics
"""

import logging

from django.db.models import Count, Sum
from django.utils import timezone

from apps.core.exceptions import ConflictException, ValidationException
from apps.core.utils import local_today, quantize_money

from .models import Expense

logger = logging.getLogger(__name__)

PERIOD_MONTHLY = 'monthly'
PERIOD_YEARLY = 'yearly'


def _grouped(queryset, *fields):
    rows = queryset.order_by().values(*fields).annotate(total=Sum('amount'), count=Count('id'))
    result = [{**row, 'total': quantize_money(row['total'])} for row in rows]
    result.sort(key=lambda row: row['total'], reverse=True)
    return result


class ExpenseService:

    @staticmethod
    def decide(expense, new_status, user=None):
        """Approve or reject an expense. Paid expenses are final."""
        if new_status not in (Expense.STATUS_APPROVED, Expense.STATUS_REJECTED):
            raise ValidationException(
                "Status must be 'approved' or 'rejected'", code='INVALID_STATUS', field='status'
            )
        if expense.is_reimbursed:
            raise ConflictException('Expense has already been reimbursed', code='ALREADY_REIMBURSED')

        expense.status = new_status
        expense.approved_by = user
        expense.approved_at = timezone.now()
        expense.updated_by = user
        expense.save(update_fields=['status', 'approved_by', 'approved_at', 'updated_by', 'updated_at'])
        logger.info("Expense %s %s by %s", expense.id, new_status, getattr(user, 'id', None))
        return expense

    @staticmethod
    def reimburse(expense, reimbursed_at=None, user=None):
        if expense.status != Expense.STATUS_APPROVED:
            raise ValidationException(
                'Only approved expenses can be reimbursed', code='EXPENSE_NOT_APPROVED'
            )
        if expense.is_reimbursed:
            raise ConflictException('Expense has already been reimbursed', code='ALREADY_REIMBURSED')

        expense.reimbursement_status = Expense.REIMBURSEMENT_PAID
        expense.reimbursed_at = reimbursed_at or local_today(expense.organization)
        expense.updated_by = user
        expense.save(update_fields=['reimbursement_status', 'reimbursed_at', 'updated_by', 'updated_at'])
        logger.info("Expense %s reimbursed on %s", expense.id, expense.reimbursed_at)
        return expense

    @staticmethod
    def validate_analytics_period(period, year, month):
        if period not in (PERIOD_MONTHLY, PERIOD_YEARLY):
            raise ValidationException(
                "Period must be 'monthly' or 'yearly'", code='INVALID_PERIOD', field='period'
            )
        if year in (None, ''):
            raise ValidationException('Year is required', code='MISSING_YEAR', field='year')
        try:
            year = int(year)
        except (TypeError, ValueError):
            year = 0
        if not 2000 <= year <= 2100:
            raise ValidationException('Year must be between 2000 and 2100', code='INVALID_YEAR', field='year')

        if period == PERIOD_YEARLY:
            return period, year, None
        if month in (None, ''):
            raise ValidationException('Month is required for monthly analytics', code='MISSING_MONTH', field='month')
        try:
            month = int(month)
        except (TypeError, ValueError):
            month = 0
        if not 1 <= month <= 12:
            raise ValidationException('Month must be between 1 and 12', code='INVALID_MONTH', field='month')
        return period, year, month

    @classmethod
    def analytics(cls, queryset, period, year, month=None):
        """Spend totals for a month or year, broken down and sorted by total."""
        period, year, month = cls.validate_analytics_period(period, year, month)
        queryset = queryset.filter(expense_date__year=year)
        if month is not None:
            queryset = queryset.filter(expense_date__month=month)

        by_employee = [
            {
                'employee_id': row['employee_id'],
                'employee_name': row['employee__name'],
                'total': row['total'],
                'count': row['count'],
            }
            for row in _grouped(queryset, 'employee_id', 'employee__name')
        ]
        return {
            'period': period,
            'year': year,
            'month': month,
            'total_expenses': quantize_money(queryset.aggregate(total=Sum('amount'))['total']),
            'count': queryset.count(),
            'by_category': _grouped(queryset, 'category'),
            'by_status': _grouped(queryset, 'status'),
            'by_reimbursement_status': _grouped(queryset, 'reimbursement_status'),
            'by_employee': by_employee,
        }
