# services/pirep-service/src/apps/core/services/validation_service.py
"""
Validation Service

Structural and rank-derived checks run before any PIREP row is written.
"""

import re
import uuid
import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, Any, Iterable, Optional

from django.utils import timezone

from ..conf import pirep_settings
from ..models import Aircraft, Multiplier, Pirep, Rank
from .exceptions import (
    PirepValidationError,
    PirepPermissionError,
    RankLimitExceeded,
    AircraftNotAllowed,
)
from .flight_time import format_hours_minutes
from .ledger_service import LedgerService
from .roles import Role, is_pirep_staff

logger = logging.getLogger(__name__)

ICAO_REGEX = re.compile(r'^[A-Z]{4}$')


class ValidationService:
    """
    Service class for PIREP validation.

    Every check raises before the caller touches the database; nothing here
    writes.
    """

    # ==========================================================================
    # Field Checks
    # ==========================================================================

    @classmethod
    def validate_icao(cls, code: Any, field: str) -> str:
        """Route codes are exactly four uppercase letters."""
        if not isinstance(code, str) or len(code) != 4:
            raise PirepValidationError(
                message=f"{cls._label(field)} ICAO must be exactly 4 characters",
                field=field
            )
        if not ICAO_REGEX.match(code):
            raise PirepValidationError(
                message="ICAO must contain exactly 4 uppercase letters (A-Z)",
                field=field
            )
        return code

    @classmethod
    def validate_flight_date(cls, value: Any, now: datetime = None) -> datetime:
        """
        Reject dates after the end of tomorrow.

        Plain dates are read as midnight in the current timezone.
        """
        if isinstance(value, datetime):
            flight_date = value
        elif isinstance(value, date):
            flight_date = datetime.combine(value, time.min)
        else:
            raise PirepValidationError(message="Flight date is required", field="date")

        if timezone.is_naive(flight_date):
            flight_date = timezone.make_aware(flight_date)

        if flight_date > cls.latest_allowed_date(now):
            raise PirepValidationError(
                message="Flight date cannot be more than one day in the future",
                field="date"
            )
        return flight_date

    @classmethod
    def latest_allowed_date(cls, now: datetime = None) -> datetime:
        """End of tomorrow in the current timezone."""
        local_now = timezone.localtime(now or timezone.now())
        tomorrow = local_now + timedelta(days=1)
        return tomorrow.replace(hour=23, minute=59, second=59, microsecond=999999)

    @classmethod
    def validate_flight_number(cls, value: Any) -> str:
        max_length = pirep_settings()['MAX_FLIGHT_NUMBER_LENGTH']
        if not value or not isinstance(value, str):
            raise PirepValidationError(
                message="Flight number is required",
                field="flight_number"
            )
        if len(value) > max_length:
            raise PirepValidationError(
                message=f"Flight number must be less than {max_length} characters",
                field="flight_number"
            )
        return value

    @classmethod
    def validate_flight_time(cls, value: Any, allow_zero: bool = True) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise PirepValidationError(
                message="Flight time must be a whole number of minutes",
                field="flight_time"
            )
        if value < 0 or (value == 0 and not allow_zero):
            raise PirepValidationError(
                message="Flight time must be positive" if not allow_zero
                else "Flight time must be non-negative",
                field="flight_time"
            )
        return value

    @classmethod
    def validate_bounded(cls, value: Any, field: str) -> int:
        """Cargo and fuel lie within [0, configured maximum]."""
        limits = pirep_settings()
        maximum = limits['MAX_CARGO_KG'] if field == 'cargo' else limits['MAX_FUEL_KG']
        label = 'Cargo' if field == 'cargo' else 'Fuel used'

        if isinstance(value, bool) or not isinstance(value, int):
            raise PirepValidationError(
                message=f"{label} must be a whole number of kg",
                field=field
            )
        if value < 0:
            raise PirepValidationError(message=f"{label} must be non-negative", field=field)
        if value > maximum:
            raise PirepValidationError(
                message=f"{label} must be at most {maximum:,} kg",
                field=field
            )
        return value

    @classmethod
    def validate_comments(cls, value: Optional[str]) -> Optional[str]:
        max_length = pirep_settings()['MAX_COMMENT_LENGTH']
        if value and len(value) > max_length:
            raise PirepValidationError(
                message=f"Comments must be at most {max_length} characters",
                field="comments"
            )
        return value or None

    @classmethod
    def validate_create_data(cls, data: Dict[str, Any], now: datetime = None) -> Dict[str, Any]:
        """
        Validate a new PIREP submission.

        Args:
            data: Submitted fields (flight_number, date, departure_icao,
                arrival_icao, flight_time, cargo, fuel_burned, aircraft_id,
                multiplier_id, comments)

        Returns:
            Cleaned copy of the data

        Raises:
            PirepValidationError: On the first failing field
        """
        cleaned = dict(data)
        cleaned['flight_number'] = cls.validate_flight_number(data.get('flight_number'))
        cleaned['date'] = cls.validate_flight_date(data.get('date'), now=now)
        cleaned['departure_icao'] = cls.validate_icao(data.get('departure_icao'), 'departure_icao')
        cleaned['arrival_icao'] = cls.validate_icao(data.get('arrival_icao'), 'arrival_icao')
        cleaned['flight_time'] = cls.validate_flight_time(data.get('flight_time'))
        cleaned['cargo'] = cls.validate_bounded(data.get('cargo'), 'cargo')
        cleaned['fuel_burned'] = cls.validate_bounded(data.get('fuel_burned'), 'fuel_burned')
        cleaned['comments'] = cls.validate_comments(data.get('comments'))
        cleaned['multiplier_id'] = cls.validate_uuid(data.get('multiplier_id'), 'multiplier_id')

        if not data.get('aircraft_id'):
            raise PirepValidationError(message="Aircraft is required", field="aircraft_id")
        cleaned['aircraft_id'] = cls.validate_uuid(data['aircraft_id'], 'aircraft_id')

        return cleaned

    @classmethod
    def validate_edit_updates(
        cls,
        updates: Dict[str, Any],
        pirep: Optional[Pirep] = None,
    ) -> Dict[str, Any]:
        """Validate the subset of fields supplied in an edit to pirep."""
        cleaned = dict(updates)

        if 'flight_number' in updates:
            cleaned['flight_number'] = cls.validate_flight_number(updates['flight_number'])
        for field in ('departure_icao', 'arrival_icao'):
            if field in updates:
                cleaned[field] = cls.validate_icao(updates[field], field)
        if 'flight_time' in updates:
            cleaned['flight_time'] = cls.validate_flight_time(
                updates['flight_time'], allow_zero=False
            )
        for field in ('cargo', 'fuel_burned'):
            if field in updates:
                cleaned[field] = cls.validate_bounded(updates[field], field)
        for field in ('multiplier_id', 'aircraft_id'):
            if field in updates:
                cleaned[field] = cls.validate_uuid(updates[field], field)
        if (
            'denied_reason' in updates
            and pirep is not None
            and pirep.status == Pirep.Status.DENIED
            and not (updates['denied_reason'] or '').strip()
        ):
            raise PirepValidationError(
                message="A denied PIREP must keep a denial reason",
                field="denied_reason"
            )

        return cleaned

    @classmethod
    def validate_uuid(cls, value: Any, field: str) -> Optional[uuid.UUID]:
        """Empty values become None; anything else must parse as a UUID."""
        if not value:
            return None
        if isinstance(value, uuid.UUID):
            return value
        try:
            return uuid.UUID(str(value))
        except ValueError:
            raise PirepValidationError(message=f"Invalid {field} format", field=field)

    @classmethod
    def validate_references(
        cls,
        aircraft_id: Optional[uuid.UUID] = None,
        multiplier_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Referenced aircraft and multiplier rows must exist."""
        if aircraft_id and not Aircraft.objects.filter(id=aircraft_id).exists():
            raise PirepValidationError(message="Aircraft not found", field="aircraft_id")
        if multiplier_id and not Multiplier.objects.filter(id=multiplier_id).exists():
            raise PirepValidationError(message="Multiplier not found", field="multiplier_id")

    @classmethod
    def validate_raw_time(cls, hours: Any, minutes: Any, max_hours: int = None) -> int:
        """
        Hours + minutes entry as total minutes.

        Minutes lie in 0..59; hours are non-negative and, when max_hours is
        given, at most max_hours.
        """
        for value, name in ((hours, 'hours'), (minutes, 'minutes')):
            if isinstance(value, bool) or not isinstance(value, int):
                raise PirepValidationError(
                    message=f"{name.capitalize()} must be a whole number",
                    field=name
                )
            if value < 0:
                raise PirepValidationError(
                    message=f"{name.capitalize()} must be non-negative",
                    field=name
                )
        if max_hours is not None and hours > max_hours:
            raise PirepValidationError(
                message=f"Hours must be at most {max_hours}",
                field="hours"
            )
        if minutes > 59:
            raise PirepValidationError(message="Minutes must be at most 59", field="minutes")
        return hours * 60 + minutes

    # ==========================================================================
    # Rank Checks
    # ==========================================================================

    @classmethod
    def validate_rank_constraints(
        cls,
        pilot_id: uuid.UUID,
        raw_flight_time: int,
        aircraft_id: Optional[uuid.UUID],
    ) -> Optional[Rank]:
        """
        Check time cap and aircraft eligibility for the pilot's current rank.

        Returns:
            The resolved rank, or None when no rank applies

        Raises:
            RankLimitExceeded: Raw time above the rank's per-report cap
            AircraftNotAllowed: Aircraft outside the rank's allow-list
        """
        total_minutes = LedgerService.ledger_total(pilot_id)
        rank = LedgerService.resolve_rank(total_minutes)

        if rank is None:
            return None

        cls.validate_flight_time_limit(rank, raw_flight_time)
        cls.validate_aircraft_permission(rank, aircraft_id)
        return rank

    @classmethod
    def validate_flight_time_limit(cls, rank: Rank, raw_flight_time: int) -> None:
        limit_minutes = rank.maximum_flight_minutes
        if limit_minutes and raw_flight_time > limit_minutes:
            logger.warning(
                f"Flight time {raw_flight_time}m exceeds rank {rank.name} cap {limit_minutes}m"
            )
            raise RankLimitExceeded(
                entered=format_hours_minutes(raw_flight_time),
                rank_name=rank.name,
                limit=format_hours_minutes(limit_minutes),
            )

    @classmethod
    def validate_aircraft_permission(cls, rank: Rank, aircraft_id: Optional[uuid.UUID]) -> None:
        allowed = {str(a) for a in LedgerService.resolve_allowed_aircraft(rank.id)}
        if str(aircraft_id) not in allowed:
            label = LedgerService.aircraft_label(aircraft_id)
            logger.warning(f"Aircraft {label} not allowed for rank {rank.name}")
            raise AircraftNotAllowed(aircraft_label=label, rank_name=rank.name)

    # ==========================================================================
    # Permission Checks
    # ==========================================================================

    @classmethod
    def can_edit(cls, pirep: Pirep, actor_id: uuid.UUID, actor_roles: Iterable[Role]) -> bool:
        """Pending: owner or staff. Otherwise: staff only."""
        if is_pirep_staff(actor_roles):
            return True
        return pirep.is_pending and str(pirep.pilot_id) == str(actor_id)

    @classmethod
    def check_edit_permission(
        cls,
        pirep: Pirep,
        actor_id: uuid.UUID,
        actor_roles: Iterable[Role],
        operation: str = 'edit',
    ) -> None:
        roles = frozenset(actor_roles)
        if cls.can_edit(pirep, actor_id, roles):
            return

        if pirep.is_pending:
            message = (
                f"Access denied. You can only {operation} your own pending PIREPs "
                f"or need the pireps role"
            )
        else:
            message = (
                f"Access denied. Only users with the pireps role can {operation} "
                f"non-pending PIREPs"
            )
        logger.warning(f"User {actor_id} denied {operation} on PIREP {pirep.id}")
        raise PirepPermissionError(
            operation=operation,
            user_id=str(actor_id),
            message=message
        )

    @classmethod
    def check_staff_permission(
        cls,
        actor_id: uuid.UUID,
        actor_roles: Iterable[Role],
        operation: str,
    ) -> None:
        if not is_pirep_staff(actor_roles):
            logger.warning(f"User {actor_id} denied {operation}: pireps role required")
            raise PirepPermissionError(
                operation=operation,
                user_id=str(actor_id),
                message=f"Access denied. The pireps role is required to {operation} PIREPs"
            )

    @staticmethod
    def _label(field: str) -> str:
        return 'Departure' if field == 'departure_icao' else 'Arrival'
