# services/pirep-service/src/apps/core/services/pirep_service.py
"""
PIREP Service

Core business logic for submitting, editing, deleting and transferring
PIREPs.
"""

import uuid
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Dict, Any, Iterable, Optional, Tuple

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from ..events import event_publisher
from ..models import Pirep
from .audit_service import AuditService
from .db_errors import wrap_db_errors
from .exceptions import PirepNotFound, PirepValidationError
from .flight_time import (
    compute_adjusted,
    format_hours_minutes,
    is_credited_value,
    recompute_on_direct_time_change,
    recompute_on_multiplier_change,
)
from .ledger_service import LedgerService
from .notification_service import PirepCreatedPayload, PirepNotifier
from .rankup_service import RankupService
from .roles import Role
from .validation_service import ValidationService

logger = logging.getLogger(__name__)

TRANSFER_FLIGHT_NUMBER = 'TRANSFER'
TRANSFER_ROUTE = 'N/A'
MAX_TRANSFER_HOURS = 10000

# Fields an edit may write directly; multiplier_id/aircraft_id map to FKs.
EDITABLE_FIELDS = (
    'flight_number',
    'departure_icao',
    'arrival_icao',
    'flight_time',
    'cargo',
    'fuel_burned',
    'multiplier_id',
    'aircraft_id',
    'comments',
    'denied_reason',
)


@dataclass
class CreatePirepResult:
    """Created PIREP and the credited minutes stored on it."""

    pirep: Pirep
    adjusted_flight_time: int


class PirepService:
    """
    Service class for PIREP lifecycle operations.

    Validation and permission checks always run before the first write.
    Row and audit event for one operation are written in one transaction.
    """

    # ==========================================================================
    # Create
    # ==========================================================================

    @classmethod
    def create_pirep(
        cls,
        data: Dict[str, Any],
        pilot_id: uuid.UUID,
        pilot_name: str = None,
        pilot_callsign: str = None,
        now: datetime = None,
        notifier: PirepNotifier = None,
    ) -> CreatePirepResult:
        """
        Submit a new PIREP.

        Args:
            data: Submitted fields; flight_time is the raw (base) minutes
            pilot_id: Owner UUID
            pilot_name: Display name stored on the report and used in the webhook
            pilot_callsign: Pilot part of the callsign used in the webhook

        Returns:
            CreatePirepResult with the pending PIREP

        Raises:
            PirepValidationError: If a field is invalid
            RankLimitExceeded: If the raw time exceeds the rank cap
            AircraftNotAllowed: If the rank does not unlock the aircraft
            PirepPersistenceError: If the row or event cannot be written
            NotificationError: If the webhook fails (row and event stay)
        """
        logger.info(f"Creating PIREP for pilot {pilot_id}")

        cleaned = ValidationService.validate_create_data(data, now=now)
        ValidationService.validate_rank_constraints(
            pilot_id, cleaned['flight_time'], cleaned['aircraft_id']
        )
        ValidationService.validate_references(
            aircraft_id=cleaned['aircraft_id'],
            multiplier_id=cleaned['multiplier_id'],
        )

        multiplier_value = None
        if cleaned['multiplier_id']:
            multiplier_value = LedgerService.resolve_multiplier_value(cleaned['multiplier_id'])
        adjusted = compute_adjusted(cleaned['flight_time'], multiplier_value)

        with transaction.atomic():
            with wrap_db_errors("create PIREP"):
                pirep = Pirep.objects.create(
                    pilot_id=pilot_id,
                    pilot_name=pilot_name or '',
                    pilot_callsign='' if pilot_callsign is None else str(pilot_callsign),
                    flight_number=cleaned['flight_number'],
                    date=cleaned['date'],
                    departure_icao=cleaned['departure_icao'],
                    arrival_icao=cleaned['arrival_icao'],
                    flight_time=adjusted,
                    cargo=cleaned['cargo'],
                    fuel_burned=cleaned['fuel_burned'],
                    aircraft_id=cleaned['aircraft_id'],
                    multiplier_id=cleaned['multiplier_id'],
                    comments=cleaned['comments'],
                    denied_reason='',
                    status=Pirep.Status.PENDING,
                )
            AuditService.record_created(pirep, pilot_id)

        logger.info(f"PIREP {pirep.id} created ({adjusted}m credited)")
        event_publisher.publish_pirep_created(pirep)

        # Outside the transaction: a failed webhook leaves the PIREP in place.
        (notifier or PirepNotifier()).notify_pirep_created(PirepCreatedPayload(
            pirep_id=str(pirep.id),
            pilot_name=pilot_name or str(pilot_id),
            pilot_callsign=pilot_callsign,
            flight_number=pirep.flight_number,
            departure_icao=pirep.departure_icao,
            arrival_icao=pirep.arrival_icao,
            aircraft=LedgerService.aircraft_label(pirep.aircraft_id),
            flight_time=adjusted,
            fuel_burned=pirep.fuel_burned,
            cargo=pirep.cargo,
            remarks=pirep.comments,
        ))

        return CreatePirepResult(pirep=pirep, adjusted_flight_time=adjusted)

    # ==========================================================================
    # Read
    # ==========================================================================

    @classmethod
    def get_pirep(cls, pirep_id: uuid.UUID) -> Pirep:
        """
        Get a PIREP by ID.

        Raises:
            PirepNotFound: If the PIREP does not exist
        """
        try:
            return Pirep.objects.select_related('aircraft', 'multiplier').get(id=pirep_id)
        except Pirep.DoesNotExist:
            raise PirepNotFound(pirep_id=str(pirep_id))

    @classmethod
    def list_pireps(cls, pilot_id: uuid.UUID = None, status: str = None) -> QuerySet:
        """PIREPs newest first, optionally for one pilot and status."""
        queryset = Pirep.objects.select_related('aircraft', 'multiplier')
        if pilot_id:
            queryset = queryset.filter(pilot_id=pilot_id)
        if status:
            queryset = queryset.filter(status=status)
        return queryset.order_by('-date', '-created_at')

    @classmethod
    def get_pirep_events(cls, pirep_id: uuid.UUID) -> List[Dict[str, Any]]:
        return AuditService.get_events(pirep_id)

    # ==========================================================================
    # Edit
    # ==========================================================================

    @classmethod
    @transaction.atomic
    def edit_pirep(
        cls,
        pirep_id: uuid.UUID,
        updates: Dict[str, Any],
        actor_id: uuid.UUID,
        actor_roles: Iterable[Role],
    ) -> Pirep:
        """
        Apply a partial update to a PIREP.

        flight_time in updates is the credited value and must come from a
        whole base under the effective multiplier. hours/minutes, when
        given, are a raw entry re-multiplied by that multiplier and replace
        any flight_time sent alongside.
        Changing multiplier_id alone re-derives flight_time through the
        base time.

        Raises:
            PirepNotFound: If the PIREP does not exist
            PirepPermissionError: If the actor may not edit it
            PirepValidationError: If a field is invalid
        """
        try:
            pirep = Pirep.objects.get(id=pirep_id)
        except Pirep.DoesNotExist:
            raise PirepNotFound(pirep_id=str(pirep_id))

        ValidationService.check_edit_permission(pirep, actor_id, actor_roles)

        raw_time = None
        if 'hours' in updates or 'minutes' in updates:
            hours, minutes = updates.get('hours', 0), updates.get('minutes', 0)
            ValidationService.validate_raw_time(hours, minutes)
            raw_time = (hours, minutes)

        cleaned = ValidationService.validate_edit_updates(
            {k: v for k, v in updates.items() if k in EDITABLE_FIELDS}, pirep
        )
        ValidationService.validate_references(
            aircraft_id=cleaned.get('aircraft_id'),
            multiplier_id=cleaned.get('multiplier_id'),
        )

        old_flight_time = pirep.flight_time
        cls._apply_time_recompute(pirep, cleaned, raw_time)

        diff = AuditService.compute_edit_diff(AuditService.snapshot(pirep), cleaned)

        for name in diff.changed_fields:
            value = cleaned[name]
            if name in ('comments', 'denied_reason'):
                value = value or ('' if name == 'denied_reason' else None)
            setattr(pirep, name, value)

        with wrap_db_errors("edit PIREP"):
            pirep.save()

        AuditService.record_edit(pirep, actor_id, diff)
        event_publisher.publish_pirep_edited(pirep, actor_id, diff.changed_fields)
        logger.info(
            f"PIREP {pirep.id} edited by {actor_id}: {diff.details or 'no changes'}"
        )

        if pirep.flight_time != old_flight_time:
            after = LedgerService.ledger_total(pirep.pilot_id)
            # Only approved reports count toward the ledger.
            before = after - (pirep.flight_time - old_flight_time) if pirep.is_approved else after
            RankupService.schedule_rank_evaluation(pirep.pilot_id, before, after)

        return pirep

    @classmethod
    def _apply_time_recompute(
        cls,
        pirep: Pirep,
        cleaned: Dict[str, Any],
        raw_time: Optional[Tuple[int, int]],
    ) -> None:
        """
        Settle the credited time for an edit.

        A raw hours/minutes entry always wins over a flight_time in the same
        request. A direct flight_time must be reachable from a whole base
        under the effective multiplier. A bare multiplier change re-derives
        the time through the base.
        """
        multiplier_changed = 'multiplier_id' in cleaned
        new_multiplier_id = cleaned['multiplier_id'] if multiplier_changed else pirep.multiplier_id

        values = LedgerService.resolve_multiplier_values([pirep.multiplier_id, new_multiplier_id])
        old_value = values.get(pirep.multiplier_id) if pirep.multiplier_id else None
        new_value = values.get(new_multiplier_id) if new_multiplier_id else None

        if raw_time is not None:
            hours, minutes = raw_time
            cleaned['flight_time'] = recompute_on_direct_time_change(hours, minutes, new_value)
        elif 'flight_time' in cleaned:
            if not is_credited_value(cleaned['flight_time'], new_value):
                raise PirepValidationError(
                    message=(
                        f"Flight time {cleaned['flight_time']} is not a whole "
                        f"duration under multiplier {new_value}"
                    ),
                    field="flight_time"
                )
        elif multiplier_changed:
            cleaned['flight_time'] = recompute_on_multiplier_change(
                pirep.flight_time, old_value, new_value
            )

    # ==========================================================================
    # Delete
    # ==========================================================================

    @classmethod
    @transaction.atomic
    def delete_pirep(
        cls,
        pirep_id: uuid.UUID,
        actor_id: uuid.UUID,
        actor_roles: Iterable[Role],
    ) -> bool:
        """
        Delete a PIREP and its audit trail.

        Same ownership rule as editing.

        Raises:
            PirepNotFound: If the PIREP does not exist
            PirepPermissionError: If the actor may not delete it
        """
        try:
            pirep = Pirep.objects.get(id=pirep_id)
        except Pirep.DoesNotExist:
            raise PirepNotFound(pirep_id=str(pirep_id))

        ValidationService.check_edit_permission(pirep, actor_id, actor_roles, operation='delete')

        pilot_id = pirep.pilot_id
        was_approved = pirep.is_approved
        with wrap_db_errors("delete PIREP", overrides={
            'reference': 'Failed to delete PIREP - it is still referenced',
        }):
            pirep.delete()

        event_publisher.publish_pirep_deleted(pirep_id, pilot_id, actor_id)
        logger.info(
            f"PIREP {pirep_id} deleted by {actor_id}",
            extra={'was_approved': was_approved}
        )
        return True

    # ==========================================================================
    # Flight Time Transfer
    # ==========================================================================

    @classmethod
    @transaction.atomic
    def transfer_flight_time(
        cls,
        target_pilot_id: uuid.UUID,
        hours: int,
        minutes: int,
        performed_by: uuid.UUID,
        actor_roles: Iterable[Role],
        performer_name: str = None,
    ) -> CreatePirepResult:
        """
        Credit flight time flown elsewhere as an approved PIREP.

        Raises:
            PirepPermissionError: If the actor lacks the pireps role
            PirepValidationError: If the time is out of range or zero
        """
        ValidationService.check_staff_permission(performed_by, actor_roles, 'transfer flight time for')
        total_minutes = ValidationService.validate_raw_time(
            hours, minutes, max_hours=MAX_TRANSFER_HOURS
        )
        if total_minutes == 0:
            raise PirepValidationError(
                message="Flight time must be greater than 0",
                field="flight_time"
            )

        with wrap_db_errors("transfer flight time"):
            pirep = Pirep.objects.create(
                pilot_id=target_pilot_id,
                flight_number=TRANSFER_FLIGHT_NUMBER,
                date=timezone.now(),
                departure_icao=TRANSFER_ROUTE,
                arrival_icao=TRANSFER_ROUTE,
                flight_time=total_minutes,
                cargo=0,
                fuel_burned=0,
                comments=f"Transfer done by {performer_name or performed_by}",
                denied_reason='',
                status=Pirep.Status.APPROVED,
            )

        AuditService.record_created(
            pirep,
            performed_by,
            details=f"Flight time transfer of {format_hours_minutes(total_minutes)}",
        )
        event_publisher.publish_flight_time_transferred(pirep, performed_by)

        total = LedgerService.ledger_total(target_pilot_id)
        RankupService.schedule_rank_evaluation(target_pilot_id, total - total_minutes, total)

        logger.info(
            f"Transferred {total_minutes}m to pilot {target_pilot_id} by {performed_by}"
        )
        return CreatePirepResult(pirep=pirep, adjusted_flight_time=total_minutes)
