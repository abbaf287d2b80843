"""
Payroll Background Tasks
SECURITY: Tenant-isolated Celery tasks
"""

import logging

from celery import shared_task

from apps.core.celery_tasks import TenantAwareTask, TenantTaskError
from apps.core.exceptions import ValidationException
from apps.core.utils import local_today

logger = logging.getLogger(__name__)


def previous_period(today):
    if today.month == 1:
        return 12, today.year - 1
    return today.month - 1, today.year


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_kwargs={'max_retries': 3},
    retry_backoff=True
)
def generate_monthly_payroll(self, organization_id: str, month=None, year=None):
    """
    Generate payroll for one organization. Defaults to the month before
    the organization's current local date.
    """
    from .services import PayrollAggregationService

    try:
        organization = TenantAwareTask.get_organization(organization_id)
    except TenantTaskError as exc:
        # Unknown or inactive organization; retrying will not help
        logger.warning("Payroll skipped: %s", exc)
        return {'organization_id': organization_id, 'month': month, 'year': year, 'created': 0, 'skipped': 0}

    if month is None or year is None:
        month, year = previous_period(local_today(organization))

    try:
        result = PayrollAggregationService.generate(organization, month, year)
    except ValidationException as exc:
        # Nothing to pay (e.g. NO_EMPLOYEES); retrying will not help
        logger.info("Payroll skipped org=%s code=%s", organization_id, exc.code)
        return {'organization_id': organization_id, 'month': month, 'year': year, 'created': 0, 'skipped': 0}
    return {
        'organization_id': organization_id,
        'month': month,
        'year': year,
        'created': len(result['created']),
        'skipped': len(result['skipped']),
    }


@shared_task
def generate_monthly_payroll_all():
    """Beat entry point, runs on the 1st of each month."""
    organization_ids = TenantAwareTask.active_organization_ids()
    for organization_id in organization_ids:
        generate_monthly_payroll.delay(organization_id)
    logger.info("Queued monthly payroll for %s organizations", len(organization_ids))
    return len(organization_ids)
