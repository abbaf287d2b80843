"""
Custom Exception Handler for DRF

Every error leaves the API as:

    {"success": false, "error": {"code": "MACHINE_CODE", "status": 400,
                                 "message": "...", "details": {...}}}
"""

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    AuthenticationFailed,
    MethodNotAllowed,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    Throttled,
    ValidationError as DRFValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler
import logging

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security.audit")


def _error_payload(code, http_status, message, details=None):
    return {
        'success': False,
        'error': {
            'code': code,
            'status': http_status,
            'message': message,
            'details': details or {},
        }
    }


def _drf_error_code(exc, status_code):
    if isinstance(exc, DRFValidationError):
        return 'VALIDATION_ERROR'
    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        return 'UNAUTHORIZED'
    if isinstance(exc, PermissionDenied):
        return 'FORBIDDEN'
    if isinstance(exc, (NotFound, Http404)):
        return 'NOT_FOUND'
    if isinstance(exc, MethodNotAllowed):
        return 'METHOD_NOT_ALLOWED'
    if isinstance(exc, Throttled):
        return 'THROTTLED'
    return {
        400: 'BAD_REQUEST',
        401: 'UNAUTHORIZED',
        403: 'FORBIDDEN',
        404: 'NOT_FOUND',
        409: 'CONFLICT',
    }.get(status_code, 'ERROR')


def custom_exception_handler(exc, context):
    """
    Custom exception handler that provides consistent error responses.
    """
    # Domain exceptions raised by services
    if isinstance(exc, APIException):
        if exc.status_code >= 500:
            logger.error("API error %s: %s", exc.code, exc.message)
        return Response(
            _error_payload(exc.code, exc.status_code, exc.message, exc.details),
            status=exc.status_code,
        )

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        _log_security_event(exc, context, response.status_code)
        response.data = _error_payload(
            _drf_error_code(exc, response.status_code),
            response.status_code,
            get_error_message(response.data),
            response.data if isinstance(response.data, dict) else {'detail': response.data},
        )
        return response

    # Handle Django ValidationError
    if isinstance(exc, DjangoValidationError):
        logger.warning("Validation error: %s", exc)
        details = exc.message_dict if hasattr(exc, 'error_dict') else {'validation_errors': exc.messages}
        return Response(
            _error_payload('VALIDATION_ERROR', 400, 'Validation Error', details),
            status=status.HTTP_400_BAD_REQUEST
        )

    # Unique / FK violations that slipped past serializer validation
    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error: %s", exc)
        return Response(
            _error_payload('CONFLICT', 409, 'Resource conflicts with an existing record'),
            status=status.HTTP_409_CONFLICT
        )

    # Log unexpected exceptions
    logger.exception("Unexpected error: %s", exc)

    message = 'Internal server error'
    if settings.DEBUG:
        message = f'Internal server error: {exc}'
    return Response(
        _error_payload('INTERNAL_ERROR', 500, message),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def _log_security_event(exc, context, status_code):
    if status_code not in (401, 403, 429):
        return

    request = context.get("request")
    if request is None:
        return

    user = getattr(request, "user", None)
    user_id = getattr(user, "id", None) if user and getattr(user, "is_authenticated", False) else None
    exc_name = exc.__class__.__name__
    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        event_type = "auth_failed"
    elif isinstance(exc, PermissionDenied):
        event_type = "permission_denied"
    elif isinstance(exc, Throttled):
        event_type = "throttled"
    else:
        event_type = "security_event"

    security_logger.warning(
        "api_security_event type=%s status=%s method=%s path=%s user_id=%s ip=%s error=%s",
        event_type,
        status_code,
        request.method,
        request.path,
        user_id,
        request.META.get("REMOTE_ADDR"),
        exc_name,
    )


def get_error_message(data):
    """Extract a user-friendly error message from response data"""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        if 'non_field_errors' in data:
            return str(data['non_field_errors'][0])
        # Get first error message
        for key, value in data.items():
            if isinstance(value, list) and value:
                return f"{key}: {value[0]}"
            elif isinstance(value, str):
                return f"{key}: {value}"
    elif isinstance(data, list) and data:
        return str(data[0])
    return str(data)


class APIException(Exception):
    """Base exception for API errors"""

    def __init__(self, message, code=None, status_code=status.HTTP_400_BAD_REQUEST, details=None):
        self.message = message
        self.code = code or 'ERROR'
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationException(APIException):
    """Validation error exception"""

    def __init__(self, message, code='VALIDATION_ERROR', field=None):
        details = {field: [message]} if field else None
        super().__init__(message, code=code, status_code=status.HTTP_400_BAD_REQUEST, details=details)
        self.field = field


class PermissionDeniedException(APIException):
    """Permission denied exception"""

    def __init__(self, message="You do not have permission to perform this action", code='FORBIDDEN'):
        super().__init__(message, code=code, status_code=status.HTTP_403_FORBIDDEN)


class ResourceNotFoundException(APIException):
    """Resource not found exception"""

    def __init__(self, resource_type, resource_id=None, code='NOT_FOUND'):
        message = f"{resource_type} not found"
        if resource_id:
            message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message, code=code, status_code=status.HTTP_404_NOT_FOUND)


class ConflictException(APIException):
    """Conflict exception (e.g., duplicate resource)"""

    def __init__(self, message, code='CONFLICT'):
        super().__init__(message, code=code, status_code=status.HTTP_409_CONFLICT)
