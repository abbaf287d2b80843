"""
CRM Admin
"""

from django.contrib import admin

from apps.core.admin import OrganizationScopedAdmin

from .models import Client, Contract, Lead, Proposal, Quotation, QuotationItem


@admin.register(Lead)
class LeadAdmin(OrganizationScopedAdmin):
    list_display = ['name', 'email', 'stage', 'priority', 'value', 'assigned_to', 'next_follow_up']
    list_filter = ['stage', 'priority', 'source']
    search_fields = ['name', 'email', 'phone']
    raw_id_fields = ['assigned_to']


@admin.register(Client)
class ClientAdmin(OrganizationScopedAdmin):
    list_display = ['name', 'email', 'industry', 'company_size', 'status', 'account_manager']
    list_filter = ['status', 'company_size']
    search_fields = ['name', 'email', 'industry']
    raw_id_fields = ['account_manager', 'lead']


@admin.register(Contract)
class ContractAdmin(OrganizationScopedAdmin):
    list_display = ['contract_number', 'title', 'client', 'value', 'start_date', 'end_date', 'status']
    list_filter = ['status']
    search_fields = ['contract_number', 'title', 'client__name']
    raw_id_fields = ['client']
    date_hierarchy = 'end_date'


@admin.register(Proposal)
class ProposalAdmin(OrganizationScopedAdmin):
    list_display = ['proposal_number', 'title', 'client', 'lead', 'pricing', 'status', 'sent_at']
    list_filter = ['status']
    search_fields = ['proposal_number', 'title']
    raw_id_fields = ['client', 'lead']


class QuotationItemInline(admin.TabularInline):
    model = QuotationItem
    extra = 0
    readonly_fields = ['total']


@admin.register(Quotation)
class QuotationAdmin(OrganizationScopedAdmin):
    list_display = ['quotation_number', 'title', 'client', 'lead', 'total_amount', 'valid_until', 'status']
    list_filter = ['status']
    search_fields = ['quotation_number', 'title']
    raw_id_fields = ['client', 'lead']
    readonly_fields = ['subtotal', 'tax_amount', 'total_amount']
    inlines = [QuotationItemInline]
