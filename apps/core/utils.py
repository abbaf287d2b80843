"""
Core Utilities
"""

import logging
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import pytz
from django.utils import timezone

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


def quantize_money(value) -> Decimal:
    """Round a monetary amount half-up to two decimal places"""
    return Decimal(str(value or 0)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def get_organization_timezone(organization=None):
    """
    Timezone for an organization.
    Falls back to the server timezone when unset or unknown.
    """
    tz_name = getattr(organization, 'timezone', None)
    if tz_name:
        try:
            return pytz.timezone(tz_name)
        except pytz.UnknownTimeZoneError:
            logger.warning("Unknown organization timezone %s, using server timezone", tz_name)
    return timezone.get_current_timezone()


def local_today(organization=None) -> date:
    """Current calendar date in the organization's timezone"""
    return timezone.now().astimezone(get_organization_timezone(organization)).date()


def localize(value: datetime, organization=None) -> datetime:
    """Convert an aware datetime into the organization's timezone"""
    return value.astimezone(get_organization_timezone(organization))


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse YYYY-MM-DD, returning None for malformed input"""
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        return None


def next_sequence_number(queryset, field: str, prefix: str, width: int = 4) -> str:
    """
    Next ``<prefix><NNNN>`` value for ``field`` within ``queryset``.
    Pass an unfiltered manager (``all_objects``) so soft-deleted rows keep their numbers.
    """
    numbers = queryset.filter(**{f'{field}__startswith': prefix}).values_list(field, flat=True)
    highest = 0
    for number in numbers:
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:0{width}d}"


def period_prefix(code: str, on_date: date) -> str:
    """``INV-202405-`` style prefix for monthly document numbering"""
    return f"{code}-{on_date.strftime('%Y%m')}-"
