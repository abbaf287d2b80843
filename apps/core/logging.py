from contextvars import ContextVar
from typing import Optional

from apps.core.context import get_current_organization, get_current_user

# Async-safe storage for correlation ID
_correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def set_correlation_id(correlation_id: Optional[str]) -> None:
    _correlation_id_var.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return _correlation_id_var.get()


class CorrelationIdFilter:
    """Stamps request id, tenant and user onto every record."""

    def filter(self, record):
        record.correlation_id = get_correlation_id() or 'unknown'
        organization = get_current_organization()
        user = get_current_user()
        record.organization_id = str(organization.id) if organization is not None else '-'
        record.user_id = str(user.pk) if user is not None else '-'
        return True
