"""
Employee Models
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from apps.core.models import OrganizationEntity


class Employee(OrganizationEntity):
    """
    Person whose attendance is tracked and who gets paid.

    Compensation is either a monthly ``salary`` or an ``hourly_rate``;
    when both are set the salary wins.
    """

    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='employee',
    )
    name = models.CharField(max_length=200)
    email = models.EmailField(db_index=True)
    department = models.CharField(max_length=100, blank=True, db_index=True)
    photo_url = models.URLField(max_length=500, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    enrollment_date = models.DateField(null=True, blank=True)
    nfc_card_id = models.CharField(max_length=100, null=True, blank=True, db_index=True)

    salary = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)],
        help_text="Monthly salary",
    )
    hourly_rate = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)],
    )

    class Meta:
        db_table = 'employees'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'email'],
                condition=models.Q(is_deleted=False),
                name='uniq_employee_email_per_org',
            ),
            models.UniqueConstraint(
                fields=['organization', 'nfc_card_id'],
                condition=models.Q(is_deleted=False, nfc_card_id__isnull=False),
                name='uniq_employee_card_per_org',
            ),
        ]
        indexes = [
            models.Index(fields=['organization', 'status']),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        if not self.nfc_card_id:
            self.nfc_card_id = None
        super().save(*args, **kwargs)

    @property
    def is_salaried(self):
        return self.salary is not None and self.salary > 0
