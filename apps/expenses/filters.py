import django_filters

from .models import Expense


class ExpenseFilter(django_filters.FilterSet):
    employee = django_filters.UUIDFilter()
    category = django_filters.CharFilter(lookup_expr='iexact')
    status = django_filters.ChoiceFilter(choices=Expense.STATUS_CHOICES)
    reimbursement_status = django_filters.ChoiceFilter(choices=Expense.REIMBURSEMENT_CHOICES)
    start_date = django_filters.DateFilter(field_name='expense_date', lookup_expr='gte')
    end_date = django_filters.DateFilter(field_name='expense_date', lookup_expr='lte')

    class Meta:
        model = Expense
        fields = ['employee', 'category', 'status', 'reimbursement_status']
