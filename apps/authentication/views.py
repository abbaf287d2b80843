"""
Authentication Views
"""

import logging

from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from drf_spectacular.utils import extend_schema

from apps.core.throttling import BurstRateThrottle, LoginRateThrottle

from .serializers import CustomTokenObtainPairSerializer, UserSerializer

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security.audit")


# =====================================================
# LOGIN
# =====================================================

class CustomTokenObtainPairView(TokenObtainPairView):
    """Email / password login returning an organization-bound token pair."""

    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [LoginRateThrottle, BurstRateThrottle]
    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        if response.status_code == 200:
            security_logger.info(
                "login_success email=%s ip=%s",
                str(request.data.get("email", "")).lower(),
                request.META.get("REMOTE_ADDR"),
            )
        return response


class CustomTokenRefreshView(TokenRefreshView):
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [BurstRateThrottle]


# =====================================================
# PROFILE
# =====================================================

class ProfileView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = UserSerializer

    @extend_schema(responses=UserSerializer)
    def get(self, request):
        return Response(UserSerializer(request.user).data)
