"""Billing periodic tasks"""
import logging

from celery import shared_task

from apps.core.celery_tasks import TenantAwareTask

from .services import InvoiceService

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def mark_overdue_invoices(self, organization_id: str):
    organization = TenantAwareTask.get_organization(organization_id)
    return InvoiceService.mark_overdue(organization)


@shared_task
def mark_overdue_invoices_all():
    """Daily sweep: unpaid invoices past their due date become overdue."""
    total = 0
    for organization_id in TenantAwareTask.active_organization_ids():
        total += mark_overdue_invoices(organization_id)
    logger.info("Overdue invoice sweep done, %s updated", total)
    return total
