"""Billing Admin"""

from django.contrib import admin

from apps.core.admin import OrganizationScopedAdmin

from .models import Invoice, InvoiceItem, Payment


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ['amount']


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ['payment_date', 'amount', 'payment_method', 'transaction_id']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Invoice)
class InvoiceAdmin(OrganizationScopedAdmin):
    list_display = ['invoice_number', 'client_name', 'issue_date', 'due_date', 'total_amount', 'status']
    list_filter = ['status', 'issue_date']
    search_fields = ['invoice_number', 'client_name', 'client_email']
    readonly_fields = ['invoice_number', 'subtotal', 'tax_amount', 'total_amount', 'paid_at']
    raw_id_fields = ['client']
    inlines = [InvoiceItemInline, PaymentInline]


@admin.register(Payment)
class PaymentAdmin(OrganizationScopedAdmin):
    list_display = ['invoice', 'payment_date', 'amount', 'payment_method', 'transaction_id']
    list_filter = ['payment_method', 'payment_date']
    search_fields = ['invoice__invoice_number', 'transaction_id']
    raw_id_fields = ['invoice']
