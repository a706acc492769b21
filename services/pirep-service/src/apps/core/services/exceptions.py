# services/pirep-service/src/apps/core/services/exceptions.py
"""
PIREP Service Exceptions

Custom exceptions for PIREP service operations.
"""

from typing import Optional, Dict, Any


class PirepServiceError(Exception):
    """Base exception for PIREP service errors."""

    def __init__(
        self,
        message: str,
        code: str = "PIREP_SERVICE_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class PirepNotFound(PirepServiceError):
    """Raised when a PIREP is not found."""

    def __init__(
        self,
        pirep_id: str = None,
        message: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        msg = message or f"PIREP not found: {pirep_id}"
        super().__init__(
            message=msg,
            code="PIREP_NOT_FOUND",
            details=details or {"pirep_id": pirep_id}
        )


class PirepValidationError(PirepServiceError):
    """Raised when PIREP data validation fails."""

    def __init__(
        self,
        message: str,
        field: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        self.field = field
        super().__init__(
            message=message,
            code="PIREP_VALIDATION_ERROR",
            details=error_details
        )


class PirepPermissionError(PirepServiceError):
    """Raised when the actor lacks ownership or role for an operation."""

    def __init__(
        self,
        operation: str,
        user_id: str = None,
        message: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        msg = message or f"Permission denied for operation: {operation}"
        error_details = details or {}
        error_details["operation"] = operation
        if user_id:
            error_details["user_id"] = user_id
        super().__init__(
            message=msg,
            code="PIREP_PERMISSION_ERROR",
            details=error_details
        )


class RankLimitExceeded(PirepServiceError):
    """Raised when raw flight time exceeds the pilot's rank cap."""

    def __init__(
        self,
        entered: str,
        rank_name: str,
        limit: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.entered = entered
        self.rank_name = rank_name
        self.limit = limit
        error_details = details or {}
        error_details.update({
            "entered": entered,
            "rank": rank_name,
            "limit": limit,
        })
        super().__init__(
            message=(
                f"The flight time you entered ({entered}) exceeds the maximum "
                f"allowed for your rank ({rank_name}): {limit}."
            ),
            code="RANK_LIMIT_EXCEEDED",
            details=error_details
        )


class AircraftNotAllowed(PirepServiceError):
    """Raised when the chosen aircraft is not unlocked by the pilot's rank."""

    def __init__(
        self,
        aircraft_label: str,
        rank_name: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.aircraft_label = aircraft_label
        self.rank_name = rank_name
        error_details = details or {}
        error_details.update({
            "aircraft": aircraft_label,
            "rank": rank_name,
        })
        super().__init__(
            message=(
                f"You are not authorized to fly {aircraft_label} with your "
                f"current rank ({rank_name})."
            ),
            code="AIRCRAFT_NOT_ALLOWED",
            details=error_details
        )


class PirepPersistenceError(PirepServiceError):
    """Raised when the backing store rejects a write."""

    def __init__(
        self,
        message: str,
        operation: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message=message,
            code="PIREP_PERSISTENCE_ERROR",
            details=error_details
        )


class NotificationError(PirepServiceError):
    """Raised when an outbound webhook cannot be delivered."""

    def __init__(
        self,
        message: str,
        status_code: int = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        error_details = details or {}
        if status_code:
            error_details["status_code"] = status_code
        super().__init__(
            message=message,
            code="NOTIFICATION_ERROR",
            details=error_details
        )
