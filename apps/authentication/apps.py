"""Authentication app configuration"""
from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    name = 'apps.authentication'
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self):
        import apps.authentication.openapi  # noqa: F401
