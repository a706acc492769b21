"""Base settings for PIREP Service."""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
DEBUG = os.environ.get('DEBUG', 'False').lower() == 'true'
ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', '*').split(',')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'django_filters',
    'apps.core',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'apps.core.middleware.RequestIDMiddleware',
    'apps.core.middleware.LoggingMiddleware',
]

ROOT_URLCONF = 'config.urls'
TEMPLATES = [{'BACKEND': 'django.template.backends.django.DjangoTemplates', 'DIRS': [], 'APP_DIRS': True, 'OPTIONS': {'context_processors': ['django.template.context_processors.debug', 'django.template.context_processors.request', 'django.contrib.auth.context_processors.auth', 'django.contrib.messages.context_processors.messages']}}]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME', 'pirep_service_db'),
        'USER': os.environ.get('DB_USER', 'pirep_service_user'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'pirep_service_password'),
        'HOST': os.environ.get('DB_HOST', 'pgbouncer'),
        'PORT': os.environ.get('DB_PORT', '6432'),
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('TIME_ZONE', 'UTC')
USE_I18N = True
USE_TZ = True
STATIC_URL = 'static/'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Identity arrives in gateway headers (X-User-ID, X-User-Roles)
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_FILTER_BACKENDS': ['django_filters.rest_framework.DjangoFilterBackend'],
}

REDIS_URL = os.environ.get('REDIS_URL', 'redis://redis:6379/9')
CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', REDIS_URL)
CELERY_RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND', REDIS_URL)
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_TRACK_STARTED = True
CELERY_TASK_TIME_LIMIT = 60

SERVICE_NAME = 'pirep-service'
SERVICE_PORT = 8014

PIREP_SETTINGS = {
    'MAX_CARGO_KG': int(os.environ.get('PIREP_MAX_CARGO_KG', 200000)),
    'MAX_FUEL_KG': int(os.environ.get('PIREP_MAX_FUEL_KG', 300000)),
    'MAX_COMMENT_LENGTH': 200,
    'PIREPS_WEBHOOK_URL': os.environ.get('PIREPS_WEBHOOK_URL') or None,
    'RANKUP_WEBHOOK_URL': os.environ.get('RANKUP_WEBHOOK_URL') or None,
    'AIRLINE_NAME': os.environ.get('AIRLINE_NAME', 'Virtual Airline'),
    'AIRLINE_CALLSIGN': os.environ.get('AIRLINE_CALLSIGN', 'VA'),
    'WEBHOOK_TIMEOUT': float(os.environ.get('WEBHOOK_TIMEOUT', 10)),
    'WEBHOOK_RETRY_COUNT': int(os.environ.get('WEBHOOK_RETRY_COUNT', 3)),
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {'standard': {'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'}},
    'handlers': {'console': {'class': 'logging.StreamHandler', 'formatter': 'standard'}},
    'root': {'handlers': ['console'], 'level': 'INFO'},
    'loggers': {
        'django': {'handlers': ['console'], 'level': os.environ.get('DJANGO_LOG_LEVEL', 'INFO'), 'propagate': False},
        'apps': {'handlers': ['console'], 'level': os.environ.get('APP_LOG_LEVEL', 'INFO'), 'propagate': False},
    },
}
