"""
Django Settings - Testing Configuration
"""

from .base import *

DEBUG = False
TESTING = True

# Use faster password hasher
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}


class DisableMigrations:
    """Build the test schema straight from the models."""

    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None


MIGRATION_MODULES = DisableMigrations()

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

# Throttles stay wired but with limits no test reaches
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    "burst": "5000/minute",
    "org_user": "200000/hour",
    "login": "300/minute",
    "attendance_punch": "600/minute",
}

# Use sync Celery
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

# Fast deterministic in-process cache for tests.
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "attendance-tests-cache",
    }
}

PAYROLL_DEDUCTION_RATE = "0.15"
PAYROLL_DEDUCTION_MODE = "flat"
ATTENDANCE_LATE_AFTER = "09:15"
ENABLE_API_DOCS = True

# Disable logging during tests
LOGGING = {}

# Email - In-memory backend
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
