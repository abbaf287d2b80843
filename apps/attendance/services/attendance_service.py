"""
Attendance Services - NFC toggle, check-in / check-out, manual entry, leave marking
"""

import logging
from datetime import datetime, time
from typing import Dict, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from apps.core.exceptions import (
    APIException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from apps.core.utils import local_today, localize

from .toggle import (
    ACTION_CHECKIN,
    ACTION_CHECKOUT,
    ACTION_NOOP,
    compute_duration_minutes,
    resolve_toggle_action,
)

logger = logging.getLogger(__name__)

DEFAULT_LATE_AFTER = time(9, 15)


def late_threshold() -> time:
    """Local time after which a check-in counts as late."""
    value = getattr(settings, 'ATTENDANCE_LATE_AFTER', None)
    if isinstance(value, time):
        return value
    try:
        return datetime.strptime(str(value), '%H:%M').time()
    except (TypeError, ValueError):
        return DEFAULT_LATE_AFTER


class AttendanceService:
    """
    Core attendance service.

    Every write runs inside ``transaction.atomic()`` with the employee row
    locked, so reading today's record and acting on it cannot interleave
    with another tap for the same employee. The (employee, date) unique
    constraint backs this up; a violation surfaces as 409 CONCURRENT_UPDATE.
    """

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @staticmethod
    def _get_employee(organization, employee_id, lock=False):
        from apps.employees.models import Employee

        queryset = Employee.objects.filter(organization=organization)
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(id=employee_id)
        except (Employee.DoesNotExist, ValueError, DjangoValidationError):
            raise ValidationException('Employee not found', code='EMPLOYEE_NOT_FOUND')

    @staticmethod
    def _resolve_tag(organization, tag_uid, reader_id, now):
        from apps.attendance.models import NFCTag

        tag = NFCTag.objects.filter(organization=organization, tag_uid=tag_uid).first()
        if tag is None:
            raise ValidationException('NFC tag not found', code='TAG_NOT_FOUND')
        if tag.status != NFCTag.STATUS_ACTIVE:
            raise ValidationException('NFC tag is not active', code='TAG_INACTIVE')
        if not tag.employee_id:
            raise ValidationException('NFC tag is not assigned to any employee', code='TAG_NOT_ASSIGNED')

        tag.last_used_at = now
        tag.reader_id = reader_id or tag.reader_id
        tag.save(update_fields=['last_used_at', 'reader_id', 'updated_at'])
        return tag

    @classmethod
    def _resolve_identity(cls, organization, tag_uid, employee_id, reader_id, now):
        """
        Returns ``(employee, check_in_method)`` with the employee row locked.
        Must be called inside a transaction.
        """
        from apps.attendance.models import AttendanceRecord

        if not tag_uid and not employee_id:
            raise ValidationException(
                'Either tag_uid or employee_id must be provided',
                code='MISSING_IDENTIFIER',
            )

        method = AttendanceRecord.METHOD_MANUAL
        if tag_uid:
            tag = cls._resolve_tag(organization, tag_uid, reader_id, now)
            employee_id = tag.employee_id
            method = AttendanceRecord.METHOD_NFC

        return cls._get_employee(organization, employee_id, lock=True), method

    @staticmethod
    def _today_record(employee, today):
        from apps.attendance.models import AttendanceRecord

        return AttendanceRecord.objects.filter(employee=employee, date=today).first()

    @staticmethod
    def _find_by_idempotency_key(organization, idempotency_key):
        if not idempotency_key:
            return None
        from apps.attendance.models import AttendanceRecord

        return (
            AttendanceRecord.objects.filter(organization=organization, idempotency_key=idempotency_key)
            .select_related('employee')
            .first()
        )

    @staticmethod
    def _open_record(organization, employee, method, now, today, punch_data: Dict):
        from apps.attendance.models import AttendanceRecord

        return AttendanceRecord.objects.create(
            organization=organization,
            employee=employee,
            date=today,
            time_in=now,
            status=AttendanceRecord.STATUS_PRESENT,
            check_in_method=method,
            reader_id=punch_data.get('reader_id') or '',
            location=punch_data.get('location') or '',
            latitude=punch_data.get('latitude'),
            longitude=punch_data.get('longitude'),
            tag_uid=punch_data.get('tag_uid') or '',
            idempotency_key=punch_data.get('idempotency_key') or None,
            metadata=punch_data.get('metadata') or {},
        )

    @staticmethod
    def _close_record(record, now):
        record.time_out = now
        record.duration = compute_duration_minutes(record.time_in, now)
        record.save(update_fields=['time_out', 'duration', 'updated_at'])
        return record

    @staticmethod
    def _result(action, record, employee, message, created=False) -> Dict:
        return {
            'action': action,
            'attendance': record,
            'employee': employee,
            'message': message,
            'created': created,
        }

    # ------------------------------------------------------------------
    # Tap / punch operations
    # ------------------------------------------------------------------

    @classmethod
    def toggle(cls, organization, punch_data: Dict) -> Dict:
        """
        Single-reader tap: check in, check out or do nothing depending on
        today's record for the employee behind the tag.

        Args:
            punch_data: {
                'tag_uid': str, 'employee_id': str, 'reader_id': str,
                'location': str, 'latitude': Decimal, 'longitude': Decimal,
                'idempotency_key': str, 'metadata': dict,
            }
        """
        now = timezone.now()
        today = local_today(organization)

        try:
            with transaction.atomic():
                employee, method = cls._resolve_identity(
                    organization,
                    punch_data.get('tag_uid'),
                    punch_data.get('employee_id'),
                    punch_data.get('reader_id'),
                    now,
                )
                # A retried check-in must not turn into a check-out
                existing = cls._find_by_idempotency_key(organization, punch_data.get('idempotency_key'))
                if existing is not None:
                    return cls._result(
                        ACTION_CHECKIN, existing, existing.employee,
                        'Check-in already processed (idempotency)',
                    )

                record = cls._today_record(employee, today)
                action = resolve_toggle_action(record)

                if action == ACTION_CHECKIN:
                    record = cls._open_record(organization, employee, method, now, today, punch_data)
                    logger.info("Attendance check-in employee=%s method=%s", employee.id, method)
                    return cls._result(
                        ACTION_CHECKIN, record, employee,
                        'Time In recorded successfully', created=True,
                    )

                if action == ACTION_CHECKOUT:
                    cls._close_record(record, now)
                    logger.info("Attendance check-out employee=%s duration=%s", employee.id, record.duration)
                    return cls._result(
                        ACTION_CHECKOUT, record, employee,
                        f'Time Out recorded successfully. Duration: {record.duration} minutes',
                    )
        except IntegrityError:
            logger.warning("Concurrent attendance write rejected org=%s", organization.id)
            raise ConflictException(
                'Attendance was updated by another request. Please retry.',
                code='CONCURRENT_UPDATE',
            )

        return cls._result(
            ACTION_NOOP, record, employee,
            'Attendance already completed for today',
        )

    @classmethod
    def check_in(cls, organization, punch_data: Dict) -> Dict:
        """Explicit check-in. Completed days are rejected instead of ignored."""
        now = timezone.now()
        today = local_today(organization)

        try:
            with transaction.atomic():
                employee, method = cls._resolve_identity(
                    organization,
                    punch_data.get('tag_uid'),
                    punch_data.get('employee_id'),
                    punch_data.get('reader_id'),
                    now,
                )

                existing = cls._find_by_idempotency_key(organization, punch_data.get('idempotency_key'))
                if existing is not None:
                    return cls._result(
                        ACTION_CHECKIN, existing, existing.employee,
                        'Check-in already processed (idempotency)',
                    )

                record = cls._today_record(employee, today)
                if record is not None and record.is_open:
                    return cls._result(ACTION_NOOP, record, employee, 'Already checked in today')
                if record is not None:
                    raise ConflictException('Already checked out today', code='ALREADY_CHECKED_OUT')

                record = cls._open_record(organization, employee, method, now, today, punch_data)
        except IntegrityError:
            raise ConflictException(
                'Attendance was updated by another request. Please retry.',
                code='CONCURRENT_UPDATE',
            )

        logger.info("Attendance check-in employee=%s method=%s", employee.id, method)
        return cls._result(ACTION_CHECKIN, record, employee, 'Check-in successful', created=True)

    @classmethod
    def check_out(cls, organization, punch_data: Dict) -> Dict:
        now = timezone.now()
        today = local_today(organization)

        with transaction.atomic():
            employee, _ = cls._resolve_identity(
                organization,
                punch_data.get('tag_uid'),
                punch_data.get('employee_id'),
                punch_data.get('reader_id'),
                now,
            )
            record = cls._today_record(employee, today)
            if record is None or not record.is_open:
                raise APIException(
                    'No active check-in found for today',
                    code='NO_ACTIVE_CHECKIN',
                    status_code=404,
                )
            cls._close_record(record, now)

        logger.info("Attendance check-out employee=%s duration=%s", employee.id, record.duration)
        return cls._result(
            ACTION_CHECKOUT, record, employee,
            f'Check-out successful. Duration: {record.duration} minutes',
        )

    # ------------------------------------------------------------------
    # HR operations
    # ------------------------------------------------------------------

    @classmethod
    def manual_entry(cls, organization, employee_id, check_in: Optional[datetime],
                     check_out: Optional[datetime] = None, notes: str = '', entered_by=None):
        """Back-fill a day for an employee. Status is derived from the local check-in time."""
        from apps.attendance.models import AttendanceRecord

        if not employee_id or not check_in:
            raise ValidationException('employee_id and check_in are required', code='MISSING_FIELDS')
        if check_out is not None and check_out < check_in:
            raise ValidationException('Check-out cannot be before check-in', code='INVALID_TIME_RANGE')

        local_check_in = localize(check_in, organization)
        status = AttendanceRecord.STATUS_PRESENT
        if local_check_in.time() > late_threshold():
            status = AttendanceRecord.STATUS_LATE

        try:
            with transaction.atomic():
                employee = cls._get_employee(organization, employee_id, lock=True)
                if cls._today_record(employee, local_check_in.date()) is not None:
                    raise ValidationException(
                        'Attendance record already exists for this employee on this date',
                        code='DUPLICATE_ENTRY',
                    )
                record = AttendanceRecord.objects.create(
                    organization=organization,
                    employee=employee,
                    date=local_check_in.date(),
                    time_in=check_in,
                    time_out=check_out,
                    duration=compute_duration_minutes(check_in, check_out) if check_out else None,
                    status=status,
                    check_in_method=AttendanceRecord.METHOD_MANUAL,
                    notes=notes or '',
                    metadata={
                        'manual_entry': True,
                        'entered_by': str(entered_by.id) if entered_by else None,
                    },
                    created_by=entered_by,
                )
        except IntegrityError:
            raise ConflictException(
                'Attendance was updated by another request. Please retry.',
                code='CONCURRENT_UPDATE',
            )

        logger.info("Manual attendance entry employee=%s date=%s by=%s", employee.id, record.date,
                    getattr(entered_by, 'id', None))
        return record

    @staticmethod
    def mark_leave(organization, cutoff_date=None) -> Dict:
        """Flag every still-open record from before ``cutoff_date`` as leave."""
        from apps.attendance.models import AttendanceRecord

        cutoff_date = cutoff_date or local_today(organization)
        with transaction.atomic():
            ids = list(
                AttendanceRecord.objects.select_for_update()
                .filter(organization=organization, time_out__isnull=True, date__lt=cutoff_date)
                .exclude(status=AttendanceRecord.STATUS_LEAVE)
                .values_list('id', flat=True)
            )
            AttendanceRecord.objects.filter(id__in=ids).update(
                status=AttendanceRecord.STATUS_LEAVE,
                updated_at=timezone.now(),
            )

        records = list(AttendanceRecord.objects.filter(id__in=ids).select_related('employee'))
        logger.info("Marked %s open records as leave org=%s cutoff=%s", len(ids), organization.id, cutoff_date)
        return {
            'count': len(ids),
            'updated_records': records,
            'cutoff_date': cutoff_date,
        }

    @staticmethod
    def today_summary(organization) -> Dict:
        from apps.attendance.models import AttendanceRecord
        from apps.employees.models import Employee

        today = local_today(organization)
        active_employees = Employee.objects.filter(organization=organization, status=Employee.STATUS_ACTIVE)
        records = AttendanceRecord.objects.filter(organization=organization, date=today)

        counts = records.aggregate(
            present=Count('id', filter=Q(status=AttendanceRecord.STATUS_PRESENT)),
            late=Count('id', filter=Q(status=AttendanceRecord.STATUS_LATE)),
            marked_absent=Count('id', filter=Q(status=AttendanceRecord.STATUS_ABSENT)),
            on_leave=Count('id', filter=Q(status=AttendanceRecord.STATUS_LEAVE)),
            checked_out=Count('id', filter=Q(time_out__isnull=False)),
            still_working=Count(
                'id',
                filter=Q(time_out__isnull=True) & ~Q(status=AttendanceRecord.STATUS_LEAVE),
            ),
        )
        without_record = active_employees.exclude(id__in=records.values('employee_id')).count()

        return {
            'date': today,
            'total_employees': active_employees.count(),
            'present': counts['present'],
            'late': counts['late'],
            'absent': without_record + counts['marked_absent'],
            'on_leave': counts['on_leave'],
            'checked_out': counts['checked_out'],
            'still_working': counts['still_working'],
        }

    @staticmethod
    def employee_today(organization, employee_id):
        from apps.attendance.models import AttendanceRecord
        from apps.employees.models import Employee

        try:
            employee = Employee.objects.get(organization=organization, id=employee_id)
        except (Employee.DoesNotExist, ValueError, DjangoValidationError):
            raise ResourceNotFoundException('Employee', employee_id, code='EMPLOYEE_NOT_FOUND')
        return AttendanceRecord.objects.filter(employee=employee, date=local_today(organization)).first()
