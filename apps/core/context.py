"""
Organization Context Management (Async-Safe)
Uses contextvars instead of threading.local for async compatibility
"""

from contextvars import ContextVar
import logging

logger = logging.getLogger(__name__)

# Context variables (async-safe)
current_organization_var: ContextVar = ContextVar('current_organization', default=None)
current_user_var: ContextVar = ContextVar('current_user', default=None)


def get_current_organization():
    """Get current organization from context."""
    return current_organization_var.get()


def set_current_organization(organization) -> None:
    """Set current organization in context."""
    current_organization_var.set(organization)


def get_current_user():
    """Get current user from context."""
    return current_user_var.get()


def set_current_user(user) -> None:
    """Set current user in context."""
    current_user_var.set(user)


def clear_context() -> None:
    """
    Clear all context variables.
    Called at the end of each request.
    """
    set_current_organization(None)
    set_current_user(None)
