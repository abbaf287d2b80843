"""
Organization resolution for requests
"""

from .context import get_current_organization, set_current_organization


def resolve_request_organization(request):
    """
    Organization for a request.

    Order: request.organization (set by middleware / JWT auth), the
    contextvar, then the authenticated user's own organization.
    """
    org = getattr(request, 'organization', None) or get_current_organization()
    if org is None:
        user = getattr(request, 'user', None)
        if user is not None and getattr(user, 'is_authenticated', False):
            org = getattr(user, 'organization', None)
            if org is not None:
                set_current_organization(org)
    return org
