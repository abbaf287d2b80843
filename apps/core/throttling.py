"""
Central DRF throttle classes.

Rates are controlled from `REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]`.
"""

from __future__ import annotations

import hashlib
from typing import Optional

from rest_framework.request import Request
from rest_framework.throttling import SimpleRateThrottle


def _ident(request: Request) -> str:
    return request.META.get("HTTP_X_FORWARDED_FOR", "").split(",")[0].strip() or request.META.get("REMOTE_ADDR", "unknown")


def _safe_hash(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:16]


class OrganizationUserRateThrottle(SimpleRateThrottle):
    scope = "org_user"

    def get_cache_key(self, request: Request, view=None) -> Optional[str]:
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None
        org = getattr(request, "organization", None)
        org_id = getattr(org, "id", getattr(user, "organization_id", "global"))
        return f"throttle:org:{org_id}:user:{user.id}"


class LoginRateThrottle(SimpleRateThrottle):
    scope = "login"

    def get_cache_key(self, request: Request, view=None) -> str:
        email = str(request.data.get("email", "")).strip().lower()
        email_key = _safe_hash(email) if email else "no-email"
        return f"throttle:login:{_ident(request)}:{email_key}"


class AttendancePunchThrottle(SimpleRateThrottle):
    """Limits tap / punch traffic per user (or per IP for reader kiosks)."""

    scope = "attendance_punch"

    def get_cache_key(self, request: Request, view=None) -> str:
        user = getattr(request, "user", None)
        if user and user.is_authenticated:
            return f"throttle:attendance_punch:user:{user.id}"
        return f"throttle:attendance_punch:ip:{_ident(request)}"


class BurstRateThrottle(SimpleRateThrottle):
    scope = "burst"

    def get_cache_key(self, request: Request, view=None) -> str:
        user = getattr(request, "user", None)
        if user and user.is_authenticated:
            return f"throttle:burst:user:{user.id}"
        return f"throttle:burst:ip:{_ident(request)}"
