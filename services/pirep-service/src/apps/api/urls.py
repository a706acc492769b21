# services/pirep-service/src/apps/api/urls.py
"""
PIREP Service API URL Configuration

Defines URL patterns for all PIREP service endpoints.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.api.views import PirepViewSet, LedgerViewSet

app_name = 'api'

router = DefaultRouter()
router.register(r'pireps', PirepViewSet, basename='pirep')
router.register(r'ledger', LedgerViewSet, basename='ledger')

urlpatterns = [
    path('', include(router.urls)),
]

# =============================================================================
# API Endpoint Summary
# =============================================================================
#
# PIREPs:
#   GET    /api/v1/pireps/                           - List PIREPs
#   POST   /api/v1/pireps/                           - Submit PIREP
#   GET    /api/v1/pireps/{id}/                      - Get PIREP
#   PATCH  /api/v1/pireps/{id}/                      - Edit PIREP
#   DELETE /api/v1/pireps/{id}/                      - Delete PIREP
#   POST   /api/v1/pireps/{id}/approve/              - Approve
#   POST   /api/v1/pireps/{id}/deny/                 - Deny (reason)
#   GET    /api/v1/pireps/{id}/events/               - Audit trail
#   POST   /api/v1/pireps/bulk_approve/              - Bulk approve
#   POST   /api/v1/pireps/transfer_flight_time/      - Flight time transfer
#
# Ledger:
#   GET    /api/v1/ledger/{pilot_id}/                - Total time and rank
#
# =============================================================================
