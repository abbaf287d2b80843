"""
Payroll Admin
"""

from django.contrib import admin

from apps.core.admin import OrganizationScopedAdmin

from .models import PayrollRecord, SalaryComponent


@admin.register(PayrollRecord)
class PayrollRecordAdmin(OrganizationScopedAdmin):
    list_display = ['employee', 'month', 'year', 'present_days', 'gross_salary', 'net_salary', 'status', 'payment_date']
    list_filter = ['status', 'year', 'month']
    search_fields = ['employee__name', 'employee__email']
    raw_id_fields = ['employee']
    ordering = ['-year', '-month']
    fieldsets = (
        ('Period', {
            'fields': ('employee', 'month', 'year', 'status', 'payment_date')
        }),
        ('Attendance', {
            'fields': ('present_days', 'leave_days', 'total_minutes')
        }),
        ('Amounts', {
            'fields': ('basic_salary', 'allowances', 'gross_salary', 'deductions', 'net_salary')
        }),
        ('Statutory', {
            'fields': ('pf_amount', 'esic_amount', 'tds_amount')
        }),
        ('Notes', {
            'fields': ('notes',)
        }),
    )


@admin.register(SalaryComponent)
class SalaryComponentAdmin(OrganizationScopedAdmin):
    list_display = ['employee', 'name', 'component_type', 'amount', 'is_percentage', 'percentage_value', 'is_active']
    list_filter = ['component_type', 'is_percentage', 'is_active']
    search_fields = ['name', 'employee__name']
    raw_id_fields = ['employee']
