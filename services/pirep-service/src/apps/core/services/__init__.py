# services/pirep-service/src/apps/core/services/__init__.py
"""
PIREP Service - Service Layer

Business logic layer for PIREP lifecycle and flight-time operations.
"""

from .exceptions import (
    PirepServiceError,
    PirepNotFound,
    PirepValidationError,
    PirepPermissionError,
    RankLimitExceeded,
    AircraftNotAllowed,
    PirepPersistenceError,
    NotificationError,
)

from .audit_service import AuditService, AuditDiff, TrackedField
from .ledger_service import LedgerService
from .notification_service import PirepNotifier, RankupNotifier
from .pirep_service import PirepService, CreatePirepResult
from .rankup_service import RankupService
from .roles import Role, parse_roles, has_required_role
from .status_service import StatusService
from .validation_service import ValidationService

__all__ = [
    # Exceptions
    'PirepServiceError',
    'PirepNotFound',
    'PirepValidationError',
    'PirepPermissionError',
    'RankLimitExceeded',
    'AircraftNotAllowed',
    'PirepPersistenceError',
    'NotificationError',
    # Services
    'AuditService',
    'LedgerService',
    'PirepService',
    'RankupService',
    'StatusService',
    'ValidationService',
    'PirepNotifier',
    'RankupNotifier',
    # Types
    'AuditDiff',
    'TrackedField',
    'CreatePirepResult',
    'Role',
    'parse_roles',
    'has_required_role',
]
