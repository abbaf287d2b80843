"""
Attendance Admin
"""

from django.contrib import admin

from apps.core.admin import OrganizationScopedAdmin

from .models import AttendanceRecord, NFCTag, ReaderDevice


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(OrganizationScopedAdmin):
    list_display = ['employee', 'date', 'time_in', 'time_out', 'duration', 'status', 'check_in_method']
    list_filter = ['status', 'check_in_method', 'date']
    search_fields = ['employee__name', 'employee__email', 'tag_uid']
    raw_id_fields = ['employee']
    date_hierarchy = 'date'
    ordering = ['-date']


@admin.register(NFCTag)
class NFCTagAdmin(OrganizationScopedAdmin):
    list_display = ['tag_uid', 'employee', 'status', 'enrolled_at', 'last_used_at', 'reader_id']
    list_filter = ['status']
    search_fields = ['tag_uid', 'employee__name']
    raw_id_fields = ['employee', 'enrolled_by']


@admin.register(ReaderDevice)
class ReaderDeviceAdmin(OrganizationScopedAdmin):
    list_display = ['reader_id', 'name', 'location', 'reader_type', 'status', 'last_heartbeat']
    list_filter = ['status', 'reader_type']
    search_fields = ['reader_id', 'name', 'location']
