"""Attendance Celery tasks."""

import logging

from celery import shared_task

from apps.core.celery_tasks import TenantAwareTask

from .services import AttendanceService, DeviceService

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def mark_open_attendance_as_leave(self, organization_id: str):
    """Open records from previous days become leave."""
    organization = TenantAwareTask.get_organization(organization_id)
    result = AttendanceService.mark_leave(organization)
    return {'organization_id': organization_id, 'count': result['count']}


@shared_task
def mark_open_attendance_as_leave_all():
    for organization_id in TenantAwareTask.active_organization_ids():
        mark_open_attendance_as_leave.delay(organization_id)


@shared_task(bind=True)
def mark_offline_readers(self, organization_id: str):
    organization = TenantAwareTask.get_organization(organization_id)
    return DeviceService.mark_stale_readers_offline(organization)


@shared_task
def mark_offline_readers_all():
    total = 0
    for organization_id in TenantAwareTask.active_organization_ids():
        total += mark_offline_readers(organization_id)
    logger.debug("Reader liveness sweep done, %s marked offline", total)
    return total
