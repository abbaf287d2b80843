"""
Attendance Models - NFC tags, readers and daily attendance records
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from apps.core.models import MetadataModel, OrganizationEntity


def _ensure_same_org(instance, related_obj, field_name):
    """Ensure related_obj belongs to the same organization as instance."""
    if related_obj is None:
        return

    related_org_id = getattr(related_obj, 'organization_id', None)

    if instance.organization_id and related_org_id:
        if related_org_id != instance.organization_id:
            raise ValidationError({field_name: 'Must belong to the same organization.'})

    if not instance.organization_id and related_org_id:
        instance.organization_id = related_org_id


class NFCTag(OrganizationEntity):
    """Physical badge enrolled to an employee"""

    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_LOST = 'lost'
    STATUS_DAMAGED = 'damaged'

    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
        (STATUS_LOST, 'Lost'),
        (STATUS_DAMAGED, 'Damaged'),
    ]

    tag_uid = models.CharField(max_length=100, db_index=True)
    employee = models.ForeignKey(
        'employees.Employee',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='nfc_tags',
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    enrolled_at = models.DateTimeField(default=timezone.now)
    enrolled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='enrolled_tags',
    )
    last_used_at = models.DateTimeField(null=True, blank=True)
    reader_id = models.CharField(max_length=100, blank=True)

    class Meta:
        db_table = 'nfc_tags'
        ordering = ['-enrolled_at']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'tag_uid'],
                condition=models.Q(is_deleted=False),
                name='uniq_nfc_tag_uid_per_org',
            ),
        ]

    def __str__(self):
        return self.tag_uid

    def clean(self):
        super().clean()
        _ensure_same_org(self, self.employee, 'employee')


class ReaderDevice(OrganizationEntity):
    """NFC reader registered to an organization. Purely informational for attendance."""

    TYPE_USB = 'usb'
    TYPE_ETHERNET = 'ethernet'
    TYPE_MOBILE = 'mobile'

    TYPE_CHOICES = [
        (TYPE_USB, 'USB'),
        (TYPE_ETHERNET, 'Ethernet'),
        (TYPE_MOBILE, 'Mobile'),
    ]

    STATUS_ONLINE = 'online'
    STATUS_OFFLINE = 'offline'
    STATUS_MAINTENANCE = 'maintenance'

    STATUS_CHOICES = [
        (STATUS_ONLINE, 'Online'),
        (STATUS_OFFLINE, 'Offline'),
        (STATUS_MAINTENANCE, 'Maintenance'),
    ]

    reader_id = models.CharField(max_length=100, db_index=True)
    name = models.CharField(max_length=200)
    location = models.CharField(max_length=255, blank=True)
    reader_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_USB)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_OFFLINE, db_index=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    last_heartbeat = models.DateTimeField(null=True, blank=True)
    config = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'reader_devices'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'reader_id'],
                condition=models.Q(is_deleted=False),
                name='uniq_reader_id_per_org',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.reader_id})"


class AttendanceRecord(OrganizationEntity, MetadataModel):
    """
    One row per employee per local calendar day.

    ``time_out`` is null while the employee is still checked in (an
    "open" record). ``duration`` is whole minutes, set on check-out.
    """

    STATUS_PRESENT = 'present'
    STATUS_LATE = 'late'
    STATUS_ABSENT = 'absent'
    STATUS_LEAVE = 'leave'

    STATUS_CHOICES = [
        (STATUS_PRESENT, 'Present'),
        (STATUS_LATE, 'Late'),
        (STATUS_ABSENT, 'Absent'),
        (STATUS_LEAVE, 'Leave'),
    ]

    METHOD_NFC = 'nfc'
    METHOD_MANUAL = 'manual'
    METHOD_GEOLOCATION = 'geolocation'

    METHOD_CHOICES = [
        (METHOD_NFC, 'NFC'),
        (METHOD_MANUAL, 'Manual'),
        (METHOD_GEOLOCATION, 'Geolocation'),
    ]

    employee = models.ForeignKey(
        'employees.Employee',
        on_delete=models.CASCADE,
        related_name='attendance_records'
    )
    date = models.DateField(db_index=True)

    time_in = models.DateTimeField()
    time_out = models.DateTimeField(null=True, blank=True)
    duration = models.PositiveIntegerField(null=True, blank=True, help_text="Worked minutes")

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PRESENT, db_index=True)
    check_in_method = models.CharField(max_length=20, choices=METHOD_CHOICES, default=METHOD_NFC)

    reader_id = models.CharField(max_length=100, blank=True, db_index=True)
    location = models.CharField(max_length=255, blank=True)
    latitude = models.DecimalField(max_digits=10, decimal_places=8, null=True, blank=True)
    longitude = models.DecimalField(max_digits=11, decimal_places=8, null=True, blank=True)
    tag_uid = models.CharField(max_length=100, blank=True)
    idempotency_key = models.CharField(max_length=255, null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'attendance_records'
        ordering = ['-date', '-time_in']
        constraints = [
            models.UniqueConstraint(
                fields=['employee', 'date'],
                condition=models.Q(is_deleted=False),
                name='uniq_attendance_employee_date',
            ),
            models.UniqueConstraint(
                fields=['organization', 'idempotency_key'],
                condition=models.Q(idempotency_key__isnull=False, is_deleted=False),
                name='uniq_attendance_idempotency_key',
            ),
        ]
        indexes = [
            models.Index(fields=['organization', 'date'], name='att_org_date_idx'),
            models.Index(fields=['organization', 'employee', 'date'], name='att_org_emp_date_idx'),
        ]

    def __str__(self):
        return f"{self.employee_id} - {self.date}"

    @property
    def is_open(self):
        return self.time_out is None

    def clean(self):
        super().clean()
        _ensure_same_org(self, self.employee, 'employee')
        if self.time_in and self.time_out and self.time_out < self.time_in:
            raise ValidationError({'time_out': 'Check-out cannot be before check-in.'})

    def save(self, *args, **kwargs):
        if self.employee_id and not self.organization_id:
            self.organization_id = self.employee.organization_id
        if not self.idempotency_key:
            self.idempotency_key = None
        return super().save(*args, **kwargs)
