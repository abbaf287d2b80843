"""
Standardized JSON response helpers.

All API responses follow the envelope:

    Success:  {"success": true,  "data": ..., "message": "..."}
    Error:    {"success": false, "error": {"code": "...", "status": 400, "message": "...", "details": {...}}}

Paginated responses (handled by ``StandardResultsPagination``) follow:

    {"success": true, "data": [...], "pagination": {...}}
"""

from rest_framework.response import Response
from rest_framework import status


def success_response(data=None, message='OK', http_status=status.HTTP_200_OK, **extra):
    """Return a successful JSON envelope."""
    payload = {'success': True, 'data': data, 'message': message}
    payload.update(extra)
    return Response(payload, status=http_status)
