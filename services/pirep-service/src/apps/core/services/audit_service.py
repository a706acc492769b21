# services/pirep-service/src/apps/core/services/audit_service.py
"""
Audit Service

Computes field-level diffs for PIREP mutations and appends them to the
PirepEvent trail.
"""

import uuid
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional, Tuple

from ..models import Pirep, PirepEvent
from .db_errors import wrap_db_errors
from .exceptions import PirepNotFound
from .flight_time import format_decimal_hours

logger = logging.getLogger(__name__)

AUDIT_DIFF_VERSION = 1


class TrackedField(str, Enum):
    """Fields that may appear in an audit diff, in display order."""

    FLIGHT_NUMBER = 'flight_number'
    DEPARTURE_ICAO = 'departure_icao'
    ARRIVAL_ICAO = 'arrival_icao'
    FLIGHT_TIME = 'flight_time'
    CARGO = 'cargo'
    FUEL_BURNED = 'fuel_burned'
    MULTIPLIER_ID = 'multiplier_id'
    AIRCRAFT_ID = 'aircraft_id'
    COMMENTS = 'comments'
    DENIED_REASON = 'denied_reason'
    STATUS = 'status'


# Fields compared on edit. Status only changes through approve/deny.
EDIT_TRACKED_FIELDS: Tuple[TrackedField, ...] = tuple(
    f for f in TrackedField if f is not TrackedField.STATUS
)

_OPTIONAL_TEXT_FIELDS = {TrackedField.COMMENTS, TrackedField.DENIED_REASON}
_ID_FIELDS = {TrackedField.MULTIPLIER_ID, TrackedField.AIRCRAFT_ID}


class AuditDiffError(ValueError):
    """Raised when a stored diff cannot be decoded."""


def _encode_value(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


@dataclass(frozen=True)
class AuditDiff:
    """
    Typed key-value map of changed fields.

    Encoded as {"v": 1, "fields": {...}} with keys in TrackedField order.
    """

    fields: Dict[TrackedField, Any] = field(default_factory=dict)
    version: int = AUDIT_DIFF_VERSION

    def __bool__(self) -> bool:
        return bool(self.fields)

    def keys(self) -> List[str]:
        return [f.value for f in TrackedField if f in self.fields]

    def encode(self) -> Dict[str, Any]:
        return {
            'v': self.version,
            'fields': {
                f.value: _encode_value(self.fields[f])
                for f in TrackedField
                if f in self.fields
            },
        }

    @classmethod
    def decode(cls, raw: Optional[Dict[str, Any]]) -> Optional['AuditDiff']:
        if raw is None:
            return None
        if not isinstance(raw, dict) or raw.get('v') != AUDIT_DIFF_VERSION:
            raise AuditDiffError(f"Unsupported audit diff: {raw!r}")

        decoded = {}
        for key, value in (raw.get('fields') or {}).items():
            try:
                decoded[TrackedField(key)] = value
            except ValueError:
                raise AuditDiffError(f"Unknown audit field: {key}")
        return cls(fields=decoded, version=raw['v'])

    def as_dict(self) -> Dict[str, Any]:
        return self.encode()['fields']


@dataclass
class EditDiff:
    """Result of comparing a PIREP against proposed updates."""

    previous: AuditDiff
    new: AuditDiff
    clauses: List[str]

    @property
    def changed_fields(self) -> List[str]:
        return self.new.keys()

    @property
    def details(self) -> Optional[str]:
        return ', '.join(self.clauses) if self.clauses else None


def _normalize(tracked: TrackedField, value: Any) -> Any:
    if tracked in _OPTIONAL_TEXT_FIELDS:
        return value or None
    if tracked in _ID_FIELDS:
        return str(value) if value else None
    return value


def describe_change(tracked: TrackedField, value: Any) -> str:
    """Human-readable clause for one changed field."""
    if tracked is TrackedField.FLIGHT_NUMBER:
        return f'Flight number to "{value}"'
    if tracked is TrackedField.DEPARTURE_ICAO:
        return f"Departure to {value}"
    if tracked is TrackedField.ARRIVAL_ICAO:
        return f"Arrival to {value}"
    if tracked is TrackedField.FLIGHT_TIME:
        return f"Flight time to {format_decimal_hours(int(value))}"
    if tracked is TrackedField.CARGO:
        return f"Cargo to {value} kg"
    if tracked is TrackedField.FUEL_BURNED:
        return f"Fuel burned to {value} kg"
    if tracked is TrackedField.COMMENTS:
        return f'Comments to "{value}"' if value else 'Comments cleared'
    if tracked is TrackedField.DENIED_REASON:
        return f'Denial reason to "{value}"' if value else 'Denial reason cleared'
    if tracked is TrackedField.MULTIPLIER_ID:
        return 'Multiplier updated' if value else 'Multiplier removed'
    if tracked is TrackedField.AIRCRAFT_ID:
        return 'Aircraft updated' if value else 'Aircraft removed'
    return f"{tracked.value} updated"


class AuditService:
    """
    Service class for the PIREP audit trail.

    Events are only ever inserted; see PirepEvent for the append-only guard.
    """

    @classmethod
    def snapshot(cls, pirep: Pirep) -> Dict[TrackedField, Any]:
        """Current values of every edit-tracked field."""
        return {f: getattr(pirep, f.value) for f in EDIT_TRACKED_FIELDS}

    @classmethod
    def compute_edit_diff(
        cls,
        current: Dict[TrackedField, Any],
        updates: Dict[str, Any],
    ) -> EditDiff:
        """
        Compare proposed updates with stored values.

        Only fields present in updates and different from the stored value
        are included; both maps always share the same keys.
        """
        previous: Dict[TrackedField, Any] = {}
        new: Dict[TrackedField, Any] = {}
        clauses: List[str] = []

        for tracked in EDIT_TRACKED_FIELDS:
            if tracked.value not in updates:
                continue
            old_value = _normalize(tracked, current.get(tracked))
            new_value = _normalize(tracked, updates[tracked.value])
            if old_value == new_value:
                continue
            previous[tracked] = old_value
            new[tracked] = new_value
            clauses.append(describe_change(tracked, new_value))

        return EditDiff(
            previous=AuditDiff(previous),
            new=AuditDiff(new),
            clauses=clauses,
        )

    @classmethod
    def record_event(
        cls,
        pirep: Pirep,
        action: str,
        performed_by: uuid.UUID,
        details: Optional[str] = None,
        previous_values: Optional[AuditDiff] = None,
        new_values: Optional[AuditDiff] = None,
    ) -> PirepEvent:
        """Append one event to the PIREP's trail."""
        with wrap_db_errors(f"record {action} event"):
            event = PirepEvent.objects.create(
                pirep=pirep,
                action=action,
                performed_by=performed_by,
                details=details,
                previous_values=previous_values.encode() if previous_values is not None else None,
                new_values=new_values.encode() if new_values is not None else None,
            )

        logger.info(f"PIREP {pirep.id} {action} event recorded by {performed_by}")
        return event

    @classmethod
    def record_created(cls, pirep: Pirep, performed_by: uuid.UUID, details: str = None) -> PirepEvent:
        return cls.record_event(
            pirep,
            PirepEvent.Action.CREATED,
            performed_by,
            details=details or 'PIREP submitted',
        )

    @classmethod
    def record_edit(cls, pirep: Pirep, performed_by: uuid.UUID, diff: EditDiff) -> PirepEvent:
        return cls.record_event(
            pirep,
            PirepEvent.Action.EDITED,
            performed_by,
            details=diff.details,
            previous_values=diff.previous,
            new_values=diff.new,
        )

    @classmethod
    def record_status_change(
        cls,
        pirep: Pirep,
        performed_by: uuid.UUID,
        previous_status: str,
        previous_reason: Optional[str],
    ) -> PirepEvent:
        denied = pirep.status == Pirep.Status.DENIED
        return cls.record_event(
            pirep,
            str(pirep.status),
            performed_by,
            details=pirep.denied_reason if denied else None,
            previous_values=AuditDiff({
                TrackedField.STATUS: str(previous_status),
                TrackedField.DENIED_REASON: previous_reason or None,
            }),
            new_values=AuditDiff({
                TrackedField.STATUS: str(pirep.status),
                TrackedField.DENIED_REASON: pirep.denied_reason if denied else None,
            }),
        )

    @classmethod
    def get_events(cls, pirep_id: uuid.UUID) -> List[Dict[str, Any]]:
        """
        Audit trail of a PIREP, newest first, with decoded diffs.

        Raises:
            PirepNotFound: If the PIREP does not exist
        """
        if not Pirep.objects.filter(id=pirep_id).exists():
            raise PirepNotFound(pirep_id=str(pirep_id))

        events = PirepEvent.objects.filter(pirep_id=pirep_id).order_by('-created_at')
        return [
            {
                'id': event.id,
                'action': event.action,
                'performed_by': event.performed_by,
                'details': event.details,
                'previous_values': cls._decoded(event.previous_values),
                'new_values': cls._decoded(event.new_values),
                'timestamp': event.created_at,
            }
            for event in events
        ]

    @staticmethod
    def _decoded(raw: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        diff = AuditDiff.decode(raw)
        return diff.as_dict() if diff is not None else None
