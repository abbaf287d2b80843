"""
Django Settings - Development Configuration
"""

from .base import *

DEBUG = True

# ALLOWED_HOSTS is set in base.py based on DEBUG flag (accepts all hosts in dev)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'filters': {
        'correlation_id': {
            '()': 'apps.core.logging.CorrelationIdFilter',
        },
    },
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s [%(correlation_id)s org=%(organization_id)s] %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
            'filters': ['correlation_id'],
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'django.db.backends': {
            'handlers': ['console'],
            'level': config('DB_LOG_LEVEL', default='INFO'),
            'propagate': False,
        },
        'apps': {
            'handlers': ['console'],
            'level': 'DEBUG',
            'propagate': False,
        },
        'security.audit': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}

# Development throttle profile: permissive but still active.
DEV_DISABLE_THROTTLING = config("DEV_DISABLE_THROTTLING", default=False, cast=bool)

if DEV_DISABLE_THROTTLING:
    REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
else:
    REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
        "burst": "600/minute",
        "org_user": "50000/hour",
        "login": "30/minute",
        "attendance_punch": "120/minute",
    }

# Run tasks inline unless a broker is configured
CELERY_TASK_ALWAYS_EAGER = config("CELERY_TASK_ALWAYS_EAGER", default=True, cast=bool)

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'
