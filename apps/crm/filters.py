import django_filters

from .models import Client, Contract, Lead, Proposal, Quotation


class LeadFilter(django_filters.FilterSet):
    stage = django_filters.ChoiceFilter(choices=Lead.STAGE_CHOICES)
    priority = django_filters.ChoiceFilter(choices=Lead.PRIORITY_CHOICES)
    assigned_to = django_filters.UUIDFilter()
    source = django_filters.CharFilter(lookup_expr='iexact')
    follow_up_before = django_filters.DateFilter(field_name='next_follow_up', lookup_expr='lte')

    class Meta:
        model = Lead
        fields = ['stage', 'priority', 'assigned_to', 'source']


class ClientFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Client.STATUS_CHOICES)
    industry = django_filters.CharFilter(lookup_expr='iexact')
    company_size = django_filters.ChoiceFilter(choices=Client.COMPANY_SIZE_CHOICES)
    account_manager = django_filters.UUIDFilter()

    class Meta:
        model = Client
        fields = ['status', 'industry', 'company_size', 'account_manager']


class ContractFilter(django_filters.FilterSet):
    client = django_filters.UUIDFilter()
    status = django_filters.ChoiceFilter(choices=Contract.STATUS_CHOICES)
    ends_before = django_filters.DateFilter(field_name='end_date', lookup_expr='lte')
    starts_after = django_filters.DateFilter(field_name='start_date', lookup_expr='gte')

    class Meta:
        model = Contract
        fields = ['client', 'status']


class ProposalFilter(django_filters.FilterSet):
    client = django_filters.UUIDFilter()
    lead = django_filters.UUIDFilter()
    status = django_filters.ChoiceFilter(choices=Proposal.STATUS_CHOICES)

    class Meta:
        model = Proposal
        fields = ['client', 'lead', 'status']


class QuotationFilter(django_filters.FilterSet):
    client = django_filters.UUIDFilter()
    lead = django_filters.UUIDFilter()
    status = django_filters.ChoiceFilter(choices=Quotation.STATUS_CHOICES)
    valid_until_before = django_filters.DateFilter(field_name='valid_until', lookup_expr='lte')

    class Meta:
        model = Quotation
        fields = ['client', 'lead', 'status']
