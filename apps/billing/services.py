"""Invoice numbering, totals, payments and overdue handling"""
import logging
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from apps.core.exceptions import ConflictException, ValidationException
from apps.core.utils import local_today, next_sequence_number, period_prefix, quantize_money

from .models import Invoice, InvoiceItem, Payment

logger = logging.getLogger(__name__)

INVOICE_NUMBER_ATTEMPTS = 5


class InvoiceService:
    """Invoice lifecycle. Totals are always derived from the line items."""

    @staticmethod
    def next_invoice_number(organization, issue_date):
        """``INV-YYYYMM-NNNN``, sequential per organization and month."""
        return next_sequence_number(
            Invoice.all_objects.filter(organization=organization),
            'invoice_number',
            period_prefix('INV', issue_date),
        )

    @staticmethod
    def compute_totals(items, tax_rate):
        subtotal = sum(
            (quantize_money(Decimal(str(i['quantity'])) * Decimal(str(i['unit_price']))) for i in items),
            Decimal('0.00'),
        )
        tax_amount = quantize_money(subtotal * Decimal(str(tax_rate or 0)) / Decimal('100'))
        return {
            'subtotal': quantize_money(subtotal),
            'tax_amount': tax_amount,
            'total_amount': quantize_money(subtotal + tax_amount),
        }

    @classmethod
    def recalculate(cls, invoice):
        items = list(invoice.items.values('quantity', 'unit_price'))
        totals = cls.compute_totals(items, invoice.tax_rate)
        for field, value in totals.items():
            setattr(invoice, field, value)
        invoice.save(update_fields=['subtotal', 'tax_amount', 'total_amount', 'updated_at'])
        return invoice

    @staticmethod
    def _replace_items(invoice, items):
        invoice.items.all().delete()
        InvoiceItem.objects.bulk_create([
            InvoiceItem(
                invoice=invoice,
                description=item['description'],
                quantity=item.get('quantity', Decimal('1')),
                unit_price=item['unit_price'],
                amount=quantize_money(Decimal(str(item.get('quantity', 1))) * Decimal(str(item['unit_price']))),
            )
            for item in items
        ])

    @classmethod
    def create_invoice(cls, organization, data, items, created_by=None):
        issue_date = data.get('issue_date') or local_today(organization)
        if data['due_date'] < issue_date:
            raise ValidationException('Due date cannot be before the issue date', code='INVALID_DUE_DATE', field='due_date')

        for _ in range(INVOICE_NUMBER_ATTEMPTS):
            try:
                with transaction.atomic():
                    invoice = Invoice.objects.create(
                        organization=organization,
                        invoice_number=cls.next_invoice_number(organization, issue_date),
                        created_by=created_by,
                        **{**data, 'issue_date': issue_date},
                    )
                    cls._replace_items(invoice, items)
                    cls.recalculate(invoice)
            except IntegrityError:
                logger.warning("Invoice number collision org=%s, retrying", organization.id)
                continue
            logger.info("Invoice %s created total=%s", invoice.invoice_number, invoice.total_amount)
            return invoice
        raise ConflictException('Could not allocate an invoice number', code='CONCURRENT_UPDATE')

    @classmethod
    @transaction.atomic
    def update_invoice(cls, invoice, data, items=None, updated_by=None):
        for field, value in data.items():
            setattr(invoice, field, value)
        if invoice.due_date < invoice.issue_date:
            raise ValidationException('Due date cannot be before the issue date', code='INVALID_DUE_DATE', field='due_date')
        invoice.updated_by = updated_by
        invoice.save()
        if items is not None:
            cls._replace_items(invoice, items)
        return cls.recalculate(invoice)

    @staticmethod
    def amount_paid(invoice):
        return quantize_money(invoice.payments.aggregate(total=Sum('amount'))['total'])

    @classmethod
    def record_payment(cls, invoice, data, created_by=None):
        """Add a payment; the invoice flips to paid once payments cover the total."""
        with transaction.atomic():
            invoice = Invoice.objects.select_for_update().get(pk=invoice.pk)
            if invoice.status == Invoice.STATUS_PAID:
                raise ConflictException(
                    f"Invoice {invoice.invoice_number} is already paid", code='INVOICE_ALREADY_PAID'
                )
            payment = Payment.objects.create(
                organization=invoice.organization,
                invoice=invoice,
                created_by=created_by,
                **data,
            )
            if cls.amount_paid(invoice) >= invoice.total_amount:
                invoice.status = Invoice.STATUS_PAID
                invoice.paid_at = timezone.now()
                invoice.save(update_fields=['status', 'paid_at', 'updated_at'])
                logger.info("Invoice %s fully paid", invoice.invoice_number)
        return payment, invoice

    @staticmethod
    def overdue(organization, today=None):
        today = today or local_today(organization)
        return Invoice.objects.filter(
            organization=organization,
            due_date__lt=today,
        ).exclude(status=Invoice.STATUS_PAID).order_by('due_date')

    @classmethod
    def mark_overdue(cls, organization, today=None):
        count = cls.overdue(organization, today).exclude(
            status=Invoice.STATUS_OVERDUE
        ).update(status=Invoice.STATUS_OVERDUE, updated_at=timezone.now())
        if count:
            logger.info("Marked %s invoices overdue org=%s", count, organization.id)
        return count
