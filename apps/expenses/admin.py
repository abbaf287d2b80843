"""
Expense Admin
"""

from django.contrib import admin

from apps.core.admin import OrganizationScopedAdmin

from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(OrganizationScopedAdmin):
    list_display = ['employee', 'category', 'amount', 'expense_date', 'status', 'reimbursement_status']
    list_filter = ['status', 'reimbursement_status', 'category']
    search_fields = ['employee__name', 'description']
    raw_id_fields = ['employee', 'approved_by']
    date_hierarchy = 'expense_date'
