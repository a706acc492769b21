# services/pirep-service/src/apps/core/events.py
"""
PIREP Service Events

Event definitions for PIREP lifecycle and rank progression.
These events are published to the message broker for other services to consume.
"""

import uuid
import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field, asdict
from enum import Enum

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """PIREP service event types."""

    # PIREP lifecycle
    PIREP_CREATED = 'pirep.created'
    PIREP_EDITED = 'pirep.edited'
    PIREP_APPROVED = 'pirep.approved'
    PIREP_DENIED = 'pirep.denied'
    PIREP_DELETED = 'pirep.deleted'

    # Ledger
    FLIGHT_TIME_TRANSFERRED = 'ledger.flight_time.transferred'
    RANK_ACHIEVED = 'ledger.rank.achieved'


@dataclass
class BaseEvent:
    """Base class for all events."""

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: str = ''
    event_version: str = '1.0'
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    source: str = 'pirep-service'
    correlation_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        return asdict(self)

    def to_json(self) -> str:
        """Convert event to JSON string."""
        return json.dumps(self.to_dict(), default=str)


@dataclass
class PirepCreatedEvent(BaseEvent):
    """Event published when a PIREP is submitted."""

    event_type: str = EventType.PIREP_CREATED.value

    pirep_id: str = ''
    pilot_id: str = ''
    flight_number: str = ''
    departure_icao: str = ''
    arrival_icao: str = ''
    flight_time: int = 0
    aircraft_id: Optional[str] = None
    multiplier_id: Optional[str] = None


@dataclass
class PirepEditedEvent(BaseEvent):
    """Event published when a PIREP is edited."""

    event_type: str = EventType.PIREP_EDITED.value

    pirep_id: str = ''
    edited_by: str = ''
    changed_fields: List[str] = field(default_factory=list)


@dataclass
class PirepApprovedEvent(BaseEvent):
    """Event published when a PIREP is approved."""

    event_type: str = EventType.PIREP_APPROVED.value

    pirep_id: str = ''
    pilot_id: str = ''
    approved_by: str = ''
    flight_time: int = 0
    previous_status: str = ''


@dataclass
class PirepDeniedEvent(BaseEvent):
    """Event published when a PIREP is denied."""

    event_type: str = EventType.PIREP_DENIED.value

    pirep_id: str = ''
    pilot_id: str = ''
    denied_by: str = ''
    reason: str = ''


@dataclass
class PirepDeletedEvent(BaseEvent):
    event_type: str = EventType.PIREP_DELETED.value

    pirep_id: str = ''
    pilot_id: str = ''
    deleted_by: str = ''


@dataclass
class FlightTimeTransferredEvent(BaseEvent):
    event_type: str = EventType.FLIGHT_TIME_TRANSFERRED.value

    pirep_id: str = ''
    pilot_id: str = ''
    performed_by: str = ''
    minutes: int = 0


@dataclass
class RankAchievedEvent(BaseEvent):
    """Event published when approved flight time lifts a pilot into a new rank."""

    event_type: str = EventType.RANK_ACHIEVED.value

    pilot_id: str = ''
    rank_id: str = ''
    rank_name: str = ''
    previous_rank_name: Optional[str] = None
    total_minutes: int = 0


class EventPublisher:
    """
    Event publisher for PIREP service.

    Events are logged with their routing key; no broker is wired.
    """

    def publish(self, event: BaseEvent, routing_key: str = None) -> bool:
        """
        Publish an event.

        Args:
            event: Event to publish
            routing_key: Optional routing key (defaults to event_type)
        """
        if routing_key is None:
            routing_key = event.event_type

        logger.info(
            f"Publishing event: {event.event_type}",
            extra={
                'event_id': event.event_id,
                'event_type': event.event_type,
                'routing_key': routing_key,
                'payload': event.to_json(),
            }
        )
        return True

    def publish_pirep_created(self, pirep) -> bool:
        """Publish PIREP created event."""
        event = PirepCreatedEvent(
            pirep_id=str(pirep.id),
            pilot_id=str(pirep.pilot_id),
            flight_number=pirep.flight_number,
            departure_icao=pirep.departure_icao,
            arrival_icao=pirep.arrival_icao,
            flight_time=pirep.flight_time,
            aircraft_id=str(pirep.aircraft_id) if pirep.aircraft_id else None,
            multiplier_id=str(pirep.multiplier_id) if pirep.multiplier_id else None,
        )
        return self.publish(event)

    def publish_pirep_edited(self, pirep, edited_by, changed_fields: List[str]) -> bool:
        event = PirepEditedEvent(
            pirep_id=str(pirep.id),
            edited_by=str(edited_by),
            changed_fields=list(changed_fields),
        )
        return self.publish(event)

    def publish_pirep_approved(self, pirep, approved_by, previous_status: str) -> bool:
        event = PirepApprovedEvent(
            pirep_id=str(pirep.id),
            pilot_id=str(pirep.pilot_id),
            approved_by=str(approved_by),
            flight_time=pirep.flight_time,
            previous_status=previous_status,
        )
        return self.publish(event)

    def publish_pirep_denied(self, pirep, denied_by) -> bool:
        event = PirepDeniedEvent(
            pirep_id=str(pirep.id),
            pilot_id=str(pirep.pilot_id),
            denied_by=str(denied_by),
            reason=pirep.denied_reason,
        )
        return self.publish(event)

    def publish_pirep_deleted(self, pirep_id, pilot_id, deleted_by) -> bool:
        event = PirepDeletedEvent(
            pirep_id=str(pirep_id),
            pilot_id=str(pilot_id),
            deleted_by=str(deleted_by),
        )
        return self.publish(event)

    def publish_flight_time_transferred(self, pirep, performed_by) -> bool:
        event = FlightTimeTransferredEvent(
            pirep_id=str(pirep.id),
            pilot_id=str(pirep.pilot_id),
            performed_by=str(performed_by),
            minutes=pirep.flight_time,
        )
        return self.publish(event)

    def publish_rank_achieved(self, pilot_id, rank, previous_rank, total_minutes: int) -> bool:
        """Publish rank achieved event."""
        event = RankAchievedEvent(
            pilot_id=str(pilot_id),
            rank_id=str(rank.id),
            rank_name=rank.name,
            previous_rank_name=previous_rank.name if previous_rank else None,
            total_minutes=total_minutes,
        )
        return self.publish(event)


# Global event publisher instance
event_publisher = EventPublisher()
