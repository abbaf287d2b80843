"""
NFC tag enrollment and reader device services
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from apps.core.exceptions import ConflictException, ResourceNotFoundException, ValidationException

logger = logging.getLogger(__name__)


class DeviceService:

    @staticmethod
    def ensure_tag_available(organization, tag_uid, exclude_id=None):
        from apps.attendance.models import NFCTag

        queryset = NFCTag.objects.filter(organization=organization, tag_uid=tag_uid)
        if exclude_id:
            queryset = queryset.exclude(id=exclude_id)
        if queryset.exists():
            raise ValidationException(f'Tag {tag_uid} is already enrolled', code='TAG_ALREADY_ENROLLED')

    @staticmethod
    def ensure_reader_available(organization, reader_id, exclude_id=None):
        from apps.attendance.models import ReaderDevice

        queryset = ReaderDevice.objects.filter(organization=organization, reader_id=reader_id)
        if exclude_id:
            queryset = queryset.exclude(id=exclude_id)
        if queryset.exists():
            raise ConflictException(f'Reader {reader_id} is already registered', code='DUPLICATE_READER')

    @staticmethod
    def heartbeat(organization, pk, ip_address=None, config=None):
        """
        Record a reader heartbeat. Offline readers come back online;
        readers under maintenance stay in maintenance.
        """
        from apps.attendance.models import ReaderDevice

        try:
            reader = ReaderDevice.objects.get(organization=organization, id=pk)
        except (ReaderDevice.DoesNotExist, ValueError, DjangoValidationError):
            raise ResourceNotFoundException('Reader device', pk, code='READER_NOT_FOUND')

        reader.last_heartbeat = timezone.now()
        if reader.status == ReaderDevice.STATUS_OFFLINE:
            reader.status = ReaderDevice.STATUS_ONLINE
            logger.info("Reader %s back online", reader.reader_id)
        update_fields = ['last_heartbeat', 'status', 'updated_at']
        if ip_address:
            reader.ip_address = ip_address
            update_fields.append('ip_address')
        if config is not None:
            reader.config = config
            update_fields.append('config')
        reader.save(update_fields=update_fields)
        return reader

    @staticmethod
    def mark_stale_readers_offline(organization, now=None):
        """Readers whose last heartbeat is older than the liveness window go offline."""
        from apps.attendance.models import ReaderDevice

        now = now or timezone.now()
        window = timedelta(minutes=getattr(settings, 'READER_OFFLINE_AFTER_MINUTES', 5))
        stale = ReaderDevice.objects.filter(
            organization=organization,
            status=ReaderDevice.STATUS_ONLINE,
            last_heartbeat__lt=now - window,
        )
        count = stale.update(status=ReaderDevice.STATUS_OFFLINE, updated_at=now)
        if count:
            logger.warning("Marked %s readers offline org=%s", count, organization.id)
        return count
