"""
Testing settings for PIREP Service.
"""

from .base import *

# Testing mode
DEBUG = True
TESTING = True

# Use in-memory SQLite for tests
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# Faster password hashing for tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# Disable migrations for faster tests
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None

MIGRATION_MODULES = DisableMigrations()

# Celery
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = None
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

# No outbound webhooks, no backoff sleeps
PIREP_SETTINGS = {
    **PIREP_SETTINGS,
    'PIREPS_WEBHOOK_URL': None,
    'RANKUP_WEBHOOK_URL': None,
    'WEBHOOK_BACKOFF_SECONDS': 0,
}

# Logging - minimal for tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'CRITICAL',
    },
}
