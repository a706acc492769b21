# services/pirep-service/src/apps/api/views/__init__.py
"""
PIREP Service API Views

REST API views for PIREP management.
"""

from .pirep_views import PirepViewSet, LedgerViewSet

__all__ = [
    'PirepViewSet',
    'LedgerViewSet',
]
