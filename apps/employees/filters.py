"""Employee app filters."""
import django_filters

from .models import Employee


class EmployeeFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(lookup_expr='icontains')
    email = django_filters.CharFilter(lookup_expr='icontains')
    department = django_filters.CharFilter(lookup_expr='iexact')
    status = django_filters.ChoiceFilter(choices=Employee.STATUS_CHOICES)
    has_card = django_filters.BooleanFilter(field_name='nfc_card_id', lookup_expr='isnull', exclude=True)
    enrolled_after = django_filters.DateFilter(field_name='enrollment_date', lookup_expr='gte')

    class Meta:
        model = Employee
        fields = ['department', 'status']
