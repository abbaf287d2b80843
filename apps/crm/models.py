"""
CRM Models - leads, clients, contracts, proposals and quotations
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from apps.core.models import OrganizationEntity, TimeStampedModel


def _assert_same_org(instance, related_obj, field_name):
    if related_obj is None:
        return
    if instance.organization_id and related_obj.organization_id != instance.organization_id:
        raise ValidationError({field_name: "Must belong to the same organization."})


class Lead(OrganizationEntity):
    STAGE_NEW = 'new'
    STAGE_CONTACTED = 'contacted'
    STAGE_PROPOSAL = 'proposal'
    STAGE_WON = 'won'
    STAGE_LOST = 'lost'

    STAGE_CHOICES = [
        (STAGE_NEW, 'New'),
        (STAGE_CONTACTED, 'Contacted'),
        (STAGE_PROPOSAL, 'Proposal'),
        (STAGE_WON, 'Won'),
        (STAGE_LOST, 'Lost'),
    ]

    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
    ]

    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True)
    source = models.CharField(max_length=100, blank=True)
    stage = models.CharField(max_length=20, choices=STAGE_CHOICES, default=STAGE_NEW, db_index=True)
    value = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_leads',
    )
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    notes = models.TextField(blank=True)
    next_follow_up = models.DateField(null=True, blank=True)
    won_at = models.DateTimeField(null=True, blank=True)
    lost_reason = models.TextField(blank=True)

    class Meta:
        db_table = 'crm_leads'
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if self.stage == self.STAGE_WON and not self.won_at:
            self.won_at = timezone.now()
        super().save(*args, **kwargs)


class Client(OrganizationEntity):
    COMPANY_SIZE_CHOICES = [
        ('1-10', '1-10'),
        ('11-50', '11-50'),
        ('51-200', '51-200'),
        ('201-500', '201-500'),
        ('500+', '500+'),
    ]

    STATUS_ACTIVE = 'active'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        ('inactive', 'Inactive'),
        ('on_hold', 'On Hold'),
    ]

    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True)
    address = models.TextField(blank=True)
    industry = models.CharField(max_length=100, blank=True)
    company_size = models.CharField(max_length=10, choices=COMPANY_SIZE_CHOICES, blank=True)
    annual_revenue = models.DecimalField(max_digits=16, decimal_places=2, null=True, blank=True)
    website = models.URLField(blank=True)
    account_manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='managed_clients',
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    lead = models.OneToOneField(
        Lead,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='client',
    )

    class Meta:
        db_table = 'crm_clients'
        ordering = ['name']

    def __str__(self):
        return self.name

    def clean(self):
        super().clean()
        _assert_same_org(self, self.lead, 'lead')


class Contract(OrganizationEntity):
    STATUS_DRAFT = 'draft'
    STATUS_ACTIVE = 'active'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_ACTIVE, 'Active'),
        ('expired', 'Expired'),
        ('terminated', 'Terminated'),
    ]

    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='contracts')
    contract_number = models.CharField(max_length=50, db_index=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    value = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)
    document_url = models.URLField(max_length=500, blank=True)
    signed_by = models.CharField(max_length=255, blank=True)
    signed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'crm_contracts'
        ordering = ['-start_date']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'contract_number'],
                name='uniq_contract_number_per_org',
            ),
        ]

    def __str__(self):
        return f"{self.contract_number} - {self.title}"

    def clean(self):
        super().clean()
        _assert_same_org(self, self.client, 'client')
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': 'End date cannot be before the start date.'})


class ClientOrLeadDocument(OrganizationEntity):
    """Sales document addressed to either a client or a lead."""

    STATUS_DRAFT = 'draft'
    STATUS_SENT = 'sent'
    STATUS_ACCEPTED = 'accepted'
    STATUS_REJECTED = 'rejected'

    client = models.ForeignKey(
        Client, on_delete=models.CASCADE, null=True, blank=True, related_name='%(class)ss'
    )
    lead = models.ForeignKey(
        Lead, on_delete=models.CASCADE, null=True, blank=True, related_name='%(class)ss'
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True

    def clean(self):
        super().clean()
        if not self.client_id and not self.lead_id:
            raise ValidationError('A client or a lead is required.')
        _assert_same_org(self, self.client, 'client')
        _assert_same_org(self, self.lead, 'lead')


class Proposal(ClientOrLeadDocument):
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('accepted', 'Accepted'),
        ('rejected', 'Rejected'),
    ]

    proposal_number = models.CharField(max_length=50, db_index=True)
    scope_of_work = models.TextField(blank=True)
    deliverables = models.TextField(blank=True)
    timeline = models.CharField(max_length=255, blank=True)
    pricing = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft', db_index=True)
    rejection_reason = models.TextField(blank=True)

    class Meta:
        db_table = 'crm_proposals'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'proposal_number'],
                name='uniq_proposal_number_per_org',
            ),
        ]

    def __str__(self):
        return f"{self.proposal_number} - {self.title}"


class Quotation(ClientOrLeadDocument):
    STATUS_EXPIRED = 'expired'
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('accepted', 'Accepted'),
        ('rejected', 'Rejected'),
        (STATUS_EXPIRED, 'Expired'),
    ]

    quotation_number = models.CharField(max_length=50, db_index=True)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    tax_rate = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(0)],
    )
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    valid_until = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft', db_index=True)
    notes = models.TextField(blank=True)
    terms_conditions = models.TextField(blank=True)
    rejected_reason = models.TextField(blank=True)

    class Meta:
        db_table = 'crm_quotations'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'quotation_number'],
                name='uniq_quotation_number_per_org',
            ),
        ]

    def __str__(self):
        return f"{self.quotation_number} - {self.title}"


class QuotationItem(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    quotation = models.ForeignKey(Quotation, on_delete=models.CASCADE, related_name='items')
    description = models.CharField(max_length=500)
    quantity = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('1'),
        validators=[MinValueValidator(0)],
    )
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    class Meta:
        db_table = 'crm_quotation_items'
        ordering = ['created_at']

    def __str__(self):
        return self.description
