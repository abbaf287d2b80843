"""Attendance app filters."""
import django_filters

from .models import AttendanceRecord, NFCTag, ReaderDevice


class AttendanceRecordFilter(django_filters.FilterSet):
    employee = django_filters.UUIDFilter()
    status = django_filters.ChoiceFilter(choices=AttendanceRecord.STATUS_CHOICES)
    check_in_method = django_filters.ChoiceFilter(choices=AttendanceRecord.METHOD_CHOICES)
    reader_id = django_filters.CharFilter()
    date = django_filters.DateFilter()
    start_date = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    end_date = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    is_open = django_filters.BooleanFilter(field_name='time_out', lookup_expr='isnull')

    class Meta:
        model = AttendanceRecord
        fields = ['employee', 'status', 'check_in_method', 'reader_id', 'date']


class NFCTagFilter(django_filters.FilterSet):
    employee = django_filters.UUIDFilter()
    status = django_filters.ChoiceFilter(choices=NFCTag.STATUS_CHOICES)
    unassigned = django_filters.BooleanFilter(field_name='employee', lookup_expr='isnull')

    class Meta:
        model = NFCTag
        fields = ['employee', 'status']


class ReaderDeviceFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=ReaderDevice.STATUS_CHOICES)
    type = django_filters.ChoiceFilter(field_name='reader_type', choices=ReaderDevice.TYPE_CHOICES)
    location = django_filters.CharFilter(lookup_expr='icontains')

    class Meta:
        model = ReaderDevice
        fields = ['status', 'location']
