"""
CRM services - lead conversion, document numbering and sales document workflow
"""

import logging
from datetime import timedelta
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.billing.services import InvoiceService
from apps.core.exceptions import ConflictException, ValidationException
from apps.core.utils import local_today, next_sequence_number, period_prefix, quantize_money

from .models import Client, Contract, Lead, Proposal, Quotation, QuotationItem

logger = logging.getLogger(__name__)

NUMBER_ATTEMPTS = 5

DOCUMENT_PREFIXES = {
    Contract: ('CON', 'contract_number'),
    Proposal: ('PRO', 'proposal_number'),
    Quotation: ('QUO', 'quotation_number'),
}


def next_document_number(model, organization, on_date=None):
    code, field = DOCUMENT_PREFIXES[model]
    return next_sequence_number(
        model.all_objects.filter(organization=organization),
        field,
        period_prefix(code, on_date or local_today(organization)),
    )


def create_numbered(model, organization, data, created_by=None, save_items=None):
    """
    Create a document, allocating its number unless one was supplied.
    Allocation retries when a concurrent insert takes the same number.
    """
    _, field = DOCUMENT_PREFIXES[model]
    explicit = bool(data.get(field))
    if explicit and model.all_objects.filter(organization=organization, **{field: data[field]}).exists():
        raise ConflictException(f"{data[field]} already exists", code='DUPLICATE_NUMBER')

    for _ in range(NUMBER_ATTEMPTS):
        values = dict(data)
        if not explicit:
            values[field] = next_document_number(model, organization)
        try:
            with transaction.atomic():
                instance = model.objects.create(organization=organization, created_by=created_by, **values)
                if save_items is not None:
                    save_items(instance)
            return instance
        except IntegrityError:
            if explicit:
                raise ConflictException(f"{values[field]} already exists", code='DUPLICATE_NUMBER')
            logger.warning("%s number collision org=%s, retrying", model.__name__, organization.id)
    raise ConflictException('Could not allocate a document number', code='CONCURRENT_UPDATE')


class LeadService:

    @staticmethod
    @transaction.atomic
    def convert(lead, user=None):
        """Won lead -> active client linked back to the lead."""
        lead = Lead.objects.select_for_update().get(pk=lead.pk)
        if lead.stage != Lead.STAGE_WON:
            raise ValidationException(
                f'Only leads in "won" stage can be converted (current stage: {lead.stage})',
                code='LEAD_NOT_WON',
            )
        if Client.objects.filter(lead=lead).exists():
            raise ConflictException('Lead has already been converted', code='LEAD_ALREADY_CONVERTED')

        client = Client.objects.create(
            organization=lead.organization,
            name=lead.name,
            email=lead.email,
            phone=lead.phone,
            account_manager=lead.assigned_to,
            status=Client.STATUS_ACTIVE,
            lead=lead,
            created_by=user,
        )
        if not lead.won_at:
            lead.won_at = timezone.now()
            lead.save(update_fields=['won_at', 'updated_at'])
        logger.info("Lead %s converted to client %s", lead.id, client.id)
        return client

    @staticmethod
    def overdue_follow_ups(organization, today=None):
        today = today or local_today(organization)
        return Lead.objects.filter(
            organization=organization,
            next_follow_up__lt=today,
        ).exclude(stage__in=[Lead.STAGE_WON, Lead.STAGE_LOST]).order_by('next_follow_up')


class ContractService:

    @staticmethod
    def validate_dates(start_date, end_date):
        if start_date and end_date and end_date < start_date:
            raise ValidationException(
                'End date cannot be before the start date', code='INVALID_DATE_RANGE', field='end_date'
            )

    @staticmethod
    def expiring(organization, days=30, today=None):
        today = today or local_today(organization)
        return Contract.objects.filter(
            organization=organization,
            status=Contract.STATUS_ACTIVE,
            end_date__gte=today,
            end_date__lte=today + timedelta(days=days),
        ).select_related('client').order_by('end_date')


class SalesDocumentService:
    """send / accept / reject for proposals and quotations."""

    TRANSITIONS = {
        'send': ({'draft'}, 'sent', 'sent_at'),
        'accept': ({'draft', 'sent'}, 'accepted', 'accepted_at'),
        'reject': ({'draft', 'sent'}, 'rejected', 'rejected_at'),
    }

    @classmethod
    @transaction.atomic
    def transition(cls, document, action, reason=''):
        model = type(document)
        document = model.objects.select_for_update().get(pk=document.pk)
        allowed, target, timestamp_field = cls.TRANSITIONS[action]

        if isinstance(document, Quotation) and action == 'accept' and cls._is_expired(document):
            raise ConflictException('Quotation has expired', code='QUOTATION_EXPIRED')

        if document.status not in allowed:
            raise ConflictException(
                f"Cannot {action} a {model.__name__.lower()} in status {document.status}",
                code='INVALID_STATUS_TRANSITION',
            )

        document.status = target
        setattr(document, timestamp_field, timezone.now())
        update_fields = ['status', timestamp_field, 'updated_at']
        if action == 'reject':
            reason_field = 'rejection_reason' if isinstance(document, Proposal) else 'rejected_reason'
            setattr(document, reason_field, reason or '')
            update_fields.append(reason_field)
        document.save(update_fields=update_fields)
        logger.info("%s %s -> %s", model.__name__, document.id, target)
        return document

    @staticmethod
    def _is_expired(quotation):
        return bool(quotation.valid_until and quotation.valid_until < local_today(quotation.organization))


class QuotationService:

    @staticmethod
    def _replace_items(quotation, items):
        quotation.items.all().delete()
        QuotationItem.objects.bulk_create([
            QuotationItem(
                quotation=quotation,
                description=item['description'],
                quantity=item.get('quantity', Decimal('1')),
                unit_price=item['unit_price'],
                total=quantize_money(Decimal(str(item.get('quantity', 1))) * Decimal(str(item['unit_price']))),
            )
            for item in items
        ])

    @staticmethod
    def recalculate(quotation):
        totals = InvoiceService.compute_totals(
            list(quotation.items.values('quantity', 'unit_price')), quotation.tax_rate
        )
        for field, value in totals.items():
            setattr(quotation, field, value)
        quotation.save(update_fields=['subtotal', 'tax_amount', 'total_amount', 'updated_at'])
        return quotation

    @classmethod
    def create(cls, organization, data, items, created_by=None):
        def save_items(quotation):
            cls._replace_items(quotation, items)
            cls.recalculate(quotation)

        return create_numbered(Quotation, organization, data, created_by, save_items=save_items)

    @classmethod
    @transaction.atomic
    def update(cls, quotation, data, items=None, updated_by=None):
        for field, value in data.items():
            setattr(quotation, field, value)
        quotation.updated_by = updated_by
        quotation.save()
        if items is not None:
            cls._replace_items(quotation, items)
        return cls.recalculate(quotation)
