# services/pirep-service/src/apps/api/views/base.py
"""
Base Views and Mixins

Common functionality for PIREP Service API views.
"""

import logging
from typing import FrozenSet, Optional
from uuid import UUID

from rest_framework import status
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from apps.core.services.exceptions import (
    PirepServiceError,
    PirepNotFound,
    PirepValidationError,
    PirepPermissionError,
    RankLimitExceeded,
    AircraftNotAllowed,
    PirepPersistenceError,
    NotificationError,
)
from apps.core.services.roles import Role, parse_roles

logger = logging.getLogger(__name__)


class UserContextMixin:
    """
    Mixin for extracting user context from request.

    Expects identity to be provided via:
    - Request headers: X-User-ID, X-User-Roles, X-User-Name, X-User-Callsign
    - JWT token claims (if using auth)
    """

    def get_user_id(self) -> UUID:
        """
        Extract user ID from request.

        Returns:
            User UUID

        Raises:
            PirepValidationError: If user ID not provided
        """
        # Try header first
        user_id = self.request.headers.get('X-User-ID')

        # Then try JWT claims
        if not user_id and self.request.auth is not None:
            user_id = getattr(self.request.auth, 'user_id', None)

        if not user_id:
            raise PirepValidationError(
                message="User ID is required",
                field="user_id"
            )

        try:
            return UUID(str(user_id))
        except ValueError:
            raise PirepValidationError(
                message="Invalid user ID format",
                field="user_id"
            )

    def get_user_roles(self) -> FrozenSet[Role]:
        """Roles from the X-User-Roles header or the roles claim."""
        raw = self.request.headers.get('X-User-Roles')
        if not raw and self.request.auth is not None:
            raw = getattr(self.request.auth, 'roles', None)
        return parse_roles(raw)

    def get_user_name(self) -> Optional[str]:
        return self.request.headers.get('X-User-Name') or None

    def get_user_callsign(self) -> Optional[str]:
        return self.request.headers.get('X-User-Callsign') or None


class ExceptionHandlerMixin:
    """Mixin for handling service layer exceptions."""

    status_map = (
        (PirepNotFound, status.HTTP_404_NOT_FOUND),
        (PirepValidationError, status.HTTP_400_BAD_REQUEST),
        (PirepPermissionError, status.HTTP_403_FORBIDDEN),
        (RankLimitExceeded, status.HTTP_422_UNPROCESSABLE_ENTITY),
        (AircraftNotAllowed, status.HTTP_422_UNPROCESSABLE_ENTITY),
        (PirepPersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
        (NotificationError, status.HTTP_502_BAD_GATEWAY),
    )

    def handle_exception(self, exc):
        """Convert service exceptions to appropriate HTTP responses."""
        if isinstance(exc, PirepServiceError):
            for exc_class, http_status in self.status_map:
                if isinstance(exc, exc_class):
                    return Response(exc.to_dict(), status=http_status)
            return Response(exc.to_dict(), status=status.HTTP_400_BAD_REQUEST)

        # DRF exceptions keep their default handling
        return super().handle_exception(exc)


class BasePirepViewSet(
    UserContextMixin,
    ExceptionHandlerMixin,
    ViewSet
):
    """
    Base ViewSet for PIREP Service.

    Provides user context extraction plus exception handling.
    """


class PaginationMixin:
    """Mixin for pagination support."""

    default_page_size = 20
    max_page_size = 100

    def get_pagination_params(self):
        """Extract pagination parameters from request."""
        try:
            page = int(self.request.query_params.get('page', 1))
            page = max(1, page)
        except (TypeError, ValueError):
            page = 1

        try:
            page_size = int(self.request.query_params.get('page_size', self.default_page_size))
            page_size = min(max(1, page_size), self.max_page_size)
        except (TypeError, ValueError):
            page_size = self.default_page_size

        return page, page_size


def parse_uuid(value, field: str = 'id') -> UUID:
    """Path parameter as UUID; malformed values are a 400."""
    try:
        return UUID(str(value))
    except ValueError:
        raise PirepValidationError(
            message=f"Invalid {field} format",
            field=field
        )
