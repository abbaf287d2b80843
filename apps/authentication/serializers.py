"""
Authentication Serializers
"""

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from django.contrib.auth import authenticate
from rest_framework.exceptions import AuthenticationFailed

from apps.core.serializers import OrganizationSerializer

from .models import User


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT token serializer with tenant binding.
    SECURITY: Includes organization_id claim to prevent cross-tenant token reuse.
    """

    username_field = 'email'

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        organization = user.organization

        # Non-superusers MUST belong to an organization
        if not user.is_superuser and not organization:
            raise AuthenticationFailed('User is not assigned to any organization')

        token['organization_id'] = str(organization.id) if organization else None
        token['email'] = user.email
        token['full_name'] = user.full_name
        token['role'] = user.role
        return token

    def validate(self, attrs):
        email = (attrs.get('email') or '').strip().lower()
        password = attrs.get('password')

        if not email or not password:
            raise serializers.ValidationError({'detail': 'Must include "email" and "password".'})

        user = authenticate(request=self.context.get('request'), email=email, password=password)
        if not user:
            raise AuthenticationFailed('Invalid email or password.')

        if user.organization and not user.organization.is_active:
            raise AuthenticationFailed('Organization is inactive')

        self.user = user
        refresh = self.get_token(user)

        return {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
            'user': UserSerializer(user).data,
        }


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    is_manager = serializers.BooleanField(read_only=True)
    organization = OrganizationSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'full_name',
            'role', 'is_manager', 'organization', 'is_superuser', 'date_joined',
        ]
        read_only_fields = fields
