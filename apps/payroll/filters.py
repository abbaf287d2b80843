import django_filters

from .models import PayrollRecord, SalaryComponent


class PayrollRecordFilter(django_filters.FilterSet):
    employee = django_filters.UUIDFilter()
    status = django_filters.ChoiceFilter(choices=PayrollRecord.STATUS_CHOICES)
    month = django_filters.NumberFilter()
    year = django_filters.NumberFilter()
    department = django_filters.CharFilter(field_name='employee__department', lookup_expr='iexact')
    paid_from = django_filters.DateFilter(field_name='payment_date', lookup_expr='gte')
    paid_to = django_filters.DateFilter(field_name='payment_date', lookup_expr='lte')

    class Meta:
        model = PayrollRecord
        fields = ['employee', 'status', 'month', 'year']


class SalaryComponentFilter(django_filters.FilterSet):
    employee = django_filters.UUIDFilter()
    component_type = django_filters.ChoiceFilter(choices=SalaryComponent.TYPE_CHOICES)
    is_active = django_filters.BooleanFilter()

    class Meta:
        model = SalaryComponent
        fields = ['employee', 'component_type', 'is_active']
