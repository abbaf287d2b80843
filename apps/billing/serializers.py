"""Billing serializers"""
from decimal import Decimal

from rest_framework import serializers

from apps.core.serializers import TenantScopedSerializer
from apps.core.utils import local_today

from .models import Invoice, InvoiceItem, Payment


class InvoiceItemSerializer(serializers.ModelSerializer):
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), default=Decimal('1'))
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))

    class Meta:
        model = InvoiceItem
        fields = ['id', 'description', 'quantity', 'unit_price', 'amount']
        read_only_fields = ['id', 'amount']


class InvoiceListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'client', 'client_name', 'issue_date', 'due_date',
            'status', 'total_amount',
        ]


class InvoiceSerializer(TenantScopedSerializer):
    """Writable items; subtotal, tax and total are always recomputed."""

    tenant_fields = ('client',)
    items = InvoiceItemSerializer(many=True, required=False)
    amount_paid = serializers.SerializerMethodField()
    issue_date = serializers.DateField(required=False)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'client', 'client_name', 'client_email', 'client_address',
            'issue_date', 'due_date', 'status', 'subtotal', 'tax_rate', 'tax_amount',
            'total_amount', 'amount_paid', 'notes', 'paid_at', 'items', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'invoice_number', 'subtotal', 'tax_amount', 'total_amount', 'paid_at',
            'created_at', 'updated_at',
        ]

    def get_amount_paid(self, obj):
        from .services import InvoiceService
        return str(InvoiceService.amount_paid(obj))

    def validate_client_email(self, value):
        return value.strip().lower()

    def validate_status(self, value):
        if value == Invoice.STATUS_PAID:
            raise serializers.ValidationError('Invoices become paid by recording payments.')
        return value


class OverdueInvoiceSerializer(InvoiceListSerializer):
    days_overdue = serializers.SerializerMethodField()

    class Meta(InvoiceListSerializer.Meta):
        fields = InvoiceListSerializer.Meta.fields + ['client_email', 'days_overdue']

    def get_days_overdue(self, obj):
        return (local_today(obj.organization) - obj.due_date).days


class PaymentSerializer(serializers.ModelSerializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_date = serializers.DateField(required=False)

    class Meta:
        model = Payment
        fields = [
            'id', 'invoice', 'payment_date', 'amount', 'payment_method',
            'transaction_id', 'notes', 'created_at',
        ]
        read_only_fields = ['id', 'invoice', 'created_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be a positive number.')
        return value
