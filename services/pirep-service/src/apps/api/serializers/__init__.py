# services/pirep-service/src/apps/api/serializers/__init__.py
"""
PIREP Service API Serializers

REST API serializers for PIREP management.
"""

from .pirep_serializers import (
    PirepSerializer,
    PirepCreateSerializer,
    PirepUpdateSerializer,
    PirepDenySerializer,
    PirepBulkApproveSerializer,
    FlightTimeTransferSerializer,
    PirepEventSerializer,
    LedgerSummarySerializer,
)

__all__ = [
    'PirepSerializer',
    'PirepCreateSerializer',
    'PirepUpdateSerializer',
    'PirepDenySerializer',
    'PirepBulkApproveSerializer',
    'FlightTimeTransferSerializer',
    'PirepEventSerializer',
    'LedgerSummarySerializer',
]
