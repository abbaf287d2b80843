"""
Employee services
"""

import logging

from apps.core.exceptions import ConflictException

from .models import Employee

logger = logging.getLogger(__name__)


class EmployeeService:
    """Uniqueness rules that must answer 409 before the database is touched."""

    @staticmethod
    def ensure_unique(organization, email=None, nfc_card_id=None, exclude_id=None):
        qs = Employee.objects.filter(organization=organization)
        if exclude_id:
            qs = qs.exclude(id=exclude_id)

        if email and qs.filter(email__iexact=email).exists():
            logger.info("Duplicate employee email rejected org=%s", organization.id)
            raise ConflictException(
                f"An employee with email {email} already exists",
                code='DUPLICATE_EMAIL',
            )

        if nfc_card_id and qs.filter(nfc_card_id=nfc_card_id).exists():
            raise ConflictException(
                f"NFC card {nfc_card_id} is already assigned to another employee",
                code='DUPLICATE_CARD',
            )

    @staticmethod
    def get_by_card(organization, nfc_card_id):
        return (
            Employee.objects.filter(organization=organization, nfc_card_id=nfc_card_id)
            .select_related('user')
            .first()
        )
