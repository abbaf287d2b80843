"""
Request middleware

CorrelationIdMiddleware tags every log line of a request with the
X-Request-ID header (or a fresh UUID). OrganizationMiddleware resets the
tenant context and resolves it for session-authenticated users; JWT
requests get their organization from the authentication class.
"""

import logging
import uuid

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from apps.core.context import clear_context, set_current_organization, set_current_user
from apps.core.logging import set_correlation_id

logger = logging.getLogger(__name__)

PUBLIC_PATHS = (
    "/api/schema",
    "/api/docs",
    "/api/redoc",
    "/api/v1/health",
    "/api/v1/readiness",
    "/admin",
    "/static",
)


def is_public_path(path: str) -> bool:
    return any(path == p or path.startswith(p + "/") for p in PUBLIC_PATHS)


class CorrelationIdMiddleware(MiddlewareMixin):
    header = "HTTP_X_REQUEST_ID"

    def process_request(self, request):
        correlation_id = request.META.get(self.header) or uuid.uuid4().hex
        request.correlation_id = correlation_id
        set_correlation_id(correlation_id)

    def process_response(self, request, response):
        correlation_id = getattr(request, "correlation_id", None)
        if correlation_id:
            response["X-Request-ID"] = correlation_id
        set_correlation_id(None)
        return response


class OrganizationMiddleware(MiddlewareMixin):
    """
    Resolves organization context for the request.

    MUST run AFTER AuthenticationMiddleware.
    """

    def process_request(self, request):
        # Always start clean
        clear_context()
        request.organization = None

        if is_public_path(request.path):
            return None

        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        set_current_user(user)
        org = getattr(user, "organization", None)
        if org is None:
            return None

        if not org.is_active:
            logger.warning(
                "inactive_organization_access user_id=%s organization_id=%s",
                user.id,
                org.id,
            )
            return JsonResponse(
                {
                    "success": False,
                    "error": {
                        "code": "ORG_INACTIVE",
                        "status": 403,
                        "message": "Organization is inactive",
                        "details": {},
                    },
                },
                status=403,
            )

        set_current_organization(org)
        request.organization = org
        return None

    def process_response(self, request, response):
        clear_context()
        return response
