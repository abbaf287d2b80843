"""
Custom JWT Authentication with Tenant Validation
SECURITY: Validates organization_id claim in JWT matches the user's organization
"""

import logging
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework.exceptions import AuthenticationFailed
from django.utils.translation import gettext_lazy as _

from apps.core.context import set_current_organization, set_current_user

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security.audit")


class OrganizationAwareJWTAuthentication(JWTAuthentication):
    """
    - JWT must be tenant-bound
    - Token org must match the user's org
    - The resolved org becomes the request's tenant context
    """

    def authenticate(self, request):
        result = super().authenticate(request)

        if result is None:
            return None

        user, token = result

        organization = self._validate_org_binding(user, token)
        request.organization = organization
        set_current_user(user)
        set_current_organization(organization)

        return user, token

    def _validate_org_binding(self, user, token):
        token_org_id = token.get('organization_id')

        if not token_org_id:
            if user.is_superuser:
                return None
            security_logger.warning("JWT rejected: missing organization_id claim user_id=%s", user.id)
            raise AuthenticationFailed(_('Organization binding missing in token'))

        organization = user.organization
        if organization is None or str(organization.id) != str(token_org_id):
            security_logger.warning(
                "Cross-tenant token usage user_id=%s token_org=%s",
                user.id,
                token_org_id,
            )
            raise AuthenticationFailed(_('Your credentials do not belong to this organization'))

        if not organization.is_active:
            raise AuthenticationFailed(_('Organization is inactive'))

        return organization
