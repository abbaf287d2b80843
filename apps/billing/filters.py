"""Billing app filters."""
import django_filters

from .models import Invoice


class InvoiceFilter(django_filters.FilterSet):
    client = django_filters.UUIDFilter()
    status = django_filters.ChoiceFilter(choices=Invoice.STATUS_CHOICES)
    client_name = django_filters.CharFilter(lookup_expr='icontains')
    issue_date_from = django_filters.DateFilter(field_name='issue_date', lookup_expr='gte')
    issue_date_to = django_filters.DateFilter(field_name='issue_date', lookup_expr='lte')
    due_date_from = django_filters.DateFilter(field_name='due_date', lookup_expr='gte')
    due_date_to = django_filters.DateFilter(field_name='due_date', lookup_expr='lte')

    class Meta:
        model = Invoice
        fields = ['client', 'status']
