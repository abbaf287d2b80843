"""
Role-based permission classes

Roles live on the user (``admin``, ``hr``, ``employee``). Superusers pass
every check.
"""

from rest_framework.permissions import BasePermission

ROLE_ADMIN = 'admin'
ROLE_HR = 'hr'
ROLE_EMPLOYEE = 'employee'

MANAGER_ROLES = (ROLE_ADMIN, ROLE_HR)


def user_has_role(user, *roles):
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser:
        return True
    return getattr(user, 'role', None) in roles


class HasRole(BasePermission):
    """
    DRF permission class for checking roles per action.

    Usage in ViewSet:
        permission_classes = [IsAuthenticated, HasRole]
        role_map = {
            'create': ['admin', 'hr'],
            'destroy': ['admin'],
        }

    Actions missing from ``role_map`` fall back to ``required_roles``;
    when neither is set the action is open to any authenticated user.
    """

    message = 'Your role does not allow this action.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        if request.user.is_superuser:
            return True

        action = getattr(view, 'action', None)
        role_map = getattr(view, 'role_map', {}) or {}
        if action in role_map:
            required_roles = role_map[action]
        else:
            required_roles = getattr(view, 'required_roles', [])

        if not required_roles:
            return True
        return user_has_role(request.user, *required_roles)


class TenantObjectPermission(BasePermission):
    """Ensures objects belong to the caller's organization."""

    message = 'Organization context missing or mismatched.'

    def has_object_permission(self, request, view, obj):
        from .tenant_guards import resolve_request_organization

        organization = resolve_request_organization(request)
        if organization is None:
            return bool(request.user and request.user.is_superuser)
        obj_org_id = getattr(obj, 'organization_id', None)
        return obj_org_id is None or obj_org_id == organization.id
