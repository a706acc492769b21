"""
Development settings for PIREP Service
"""

from .base import *

DEBUG = True

ALLOWED_HOSTS = ['*']

# Development database
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME', 'pirep_db'),
        'USER': os.environ.get('DB_USER', 'pireps'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'pireps_password'),
        'HOST': os.environ.get('DB_HOST', 'localhost'),
        'PORT': os.environ.get('DB_PORT', '5432'),
    }
}

# Logging
LOGGING['loggers']['apps']['level'] = 'DEBUG'
