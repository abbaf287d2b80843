"""
Employee Admin
"""

from django.contrib import admin

from apps.core.admin import OrganizationScopedAdmin

from .models import Employee


@admin.register(Employee)
class EmployeeAdmin(OrganizationScopedAdmin):
    list_display = ['name', 'email', 'department', 'status', 'nfc_card_id', 'salary', 'hourly_rate', 'is_deleted']
    list_filter = ['status', 'department', 'is_deleted']
    search_fields = ['name', 'email', 'nfc_card_id']
    raw_id_fields = ['user']
    readonly_fields = ['id', 'created_at', 'updated_at', 'created_by', 'updated_by']
