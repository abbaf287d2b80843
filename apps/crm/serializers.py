"""
CRM Serializers
"""

from decimal import Decimal

from rest_framework import serializers

from apps.core.serializers import TenantScopedSerializer
from apps.core.utils import local_today

from .models import Client, Contract, Lead, Proposal, Quotation, QuotationItem
from .services import ContractService


class LeadSerializer(TenantScopedSerializer):
    tenant_fields = ('assigned_to',)
    assigned_to_name = serializers.ReadOnlyField(source='assigned_to.full_name')
    is_converted = serializers.SerializerMethodField()

    class Meta:
        model = Lead
        fields = [
            'id', 'name', 'email', 'phone', 'source', 'stage', 'value',
            'assigned_to', 'assigned_to_name', 'priority', 'notes', 'next_follow_up',
            'won_at', 'lost_reason', 'is_converted', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'won_at', 'created_at', 'updated_at']

    def get_is_converted(self, obj):
        return Client.objects.filter(lead_id=obj.id).exists()

    def validate_email(self, value):
        return value.strip().lower()


class ClientSerializer(TenantScopedSerializer):
    tenant_fields = ('account_manager', 'lead')

    class Meta:
        model = Client
        fields = [
            'id', 'name', 'email', 'phone', 'address', 'industry', 'company_size',
            'annual_revenue', 'website', 'account_manager', 'status', 'lead',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_email(self, value):
        return value.strip().lower()


class ContractSerializer(TenantScopedSerializer):
    tenant_fields = ('client',)
    client_name = serializers.ReadOnlyField(source='client.name')
    contract_number = serializers.CharField(max_length=50, required=False, allow_blank=True)

    class Meta:
        model = Contract
        fields = [
            'id', 'client', 'client_name', 'contract_number', 'title', 'description',
            'value', 'start_date', 'end_date', 'status', 'document_url', 'signed_by',
            'signed_at', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate(self, attrs):
        attrs = super().validate(attrs)
        ContractService.validate_dates(
            attrs.get('start_date', getattr(self.instance, 'start_date', None)),
            attrs.get('end_date', getattr(self.instance, 'end_date', None)),
        )
        return attrs


class ExpiringContractSerializer(ContractSerializer):
    days_until_expiration = serializers.SerializerMethodField()

    class Meta(ContractSerializer.Meta):
        fields = ContractSerializer.Meta.fields + ['days_until_expiration']

    def get_days_until_expiration(self, obj):
        return (obj.end_date - local_today(obj.organization)).days


class ClientOrLeadSerializer(TenantScopedSerializer):
    tenant_fields = ('client', 'lead')

    def validate(self, attrs):
        attrs = super().validate(attrs)
        client = attrs.get('client', getattr(self.instance, 'client', None))
        lead = attrs.get('lead', getattr(self.instance, 'lead', None))
        if client is None and lead is None:
            raise serializers.ValidationError({'client': 'A client or a lead is required.'})
        return attrs


class ProposalSerializer(ClientOrLeadSerializer):
    proposal_number = serializers.CharField(max_length=50, required=False, allow_blank=True)

    class Meta:
        model = Proposal
        fields = [
            'id', 'proposal_number', 'client', 'lead', 'title', 'description',
            'scope_of_work', 'deliverables', 'timeline', 'pricing', 'status',
            'sent_at', 'accepted_at', 'rejected_at', 'rejection_reason',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'status', 'sent_at', 'accepted_at', 'rejected_at', 'rejection_reason',
            'created_at', 'updated_at',
        ]


class QuotationItemSerializer(serializers.ModelSerializer):
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), default=Decimal('1'))
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))

    class Meta:
        model = QuotationItem
        fields = ['id', 'description', 'quantity', 'unit_price', 'total']
        read_only_fields = ['id', 'total']


class QuotationSerializer(ClientOrLeadSerializer):
    quotation_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    items = QuotationItemSerializer(many=True, required=False)

    class Meta:
        model = Quotation
        fields = [
            'id', 'quotation_number', 'client', 'lead', 'title', 'description',
            'subtotal', 'tax_rate', 'tax_amount', 'total_amount', 'valid_until',
            'status', 'notes', 'terms_conditions', 'sent_at', 'accepted_at',
            'rejected_at', 'rejected_reason', 'items', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'subtotal', 'tax_amount', 'total_amount', 'status', 'sent_at',
            'accepted_at', 'rejected_at', 'rejected_reason', 'created_at', 'updated_at',
        ]


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True)
