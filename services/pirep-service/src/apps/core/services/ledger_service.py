# services/pirep-service/src/apps/core/services/ledger_service.py
"""
Ledger Service

Read-side collaborators of the PIREP core: a pilot's approved flight-time
ledger, the rank it resolves to, rank aircraft allow-lists, multiplier values
and aircraft labels.
"""

import uuid
import logging
from typing import List, Dict, Any, Optional

from ..models import Aircraft, Multiplier, Pirep, Rank, RankAircraft
from .flight_time import format_hours_minutes

logger = logging.getLogger(__name__)

UNKNOWN_AIRCRAFT_LABEL = 'Unknown Aircraft'


class LedgerService:
    """
    Service class for ledger and rank lookups.

    Ranks are defined on whole hours of approved flight time.
    """

    # ==========================================================================
    # Ledger
    # ==========================================================================

    @classmethod
    def ledger_total(cls, pilot_id: uuid.UUID) -> int:
        """
        Sum of credited minutes over a pilot's approved PIREPs.

        Args:
            pilot_id: Pilot UUID

        Returns:
            Total approved minutes (0 when the pilot has none)
        """
        return Pirep.approved_minutes_for_pilot(pilot_id)

    @classmethod
    def get_ledger_summary(cls, pilot_id: uuid.UUID) -> Dict[str, Any]:
        """
        Ledger total with current and next rank.

        Returns:
            Dictionary with total minutes, current rank, next rank and the
            hours still needed to reach it
        """
        total_minutes = cls.ledger_total(pilot_id)
        current_rank = cls.resolve_rank(total_minutes)
        next_rank = cls.resolve_next_rank(total_minutes)

        hours_to_next_rank = None
        if next_rank is not None:
            hours_to_next_rank = next_rank.minimum_flight_time - total_minutes / 60

        return {
            'pilot_id': pilot_id,
            'total_minutes': total_minutes,
            'total_formatted': format_hours_minutes(total_minutes),
            'current_rank': current_rank,
            'next_rank': next_rank,
            'hours_to_next_rank': hours_to_next_rank,
        }

    # ==========================================================================
    # Ranks
    # ==========================================================================

    @classmethod
    def resolve_rank(cls, total_minutes: int) -> Optional[Rank]:
        """
        Highest rank whose minimum flight time is within the ledger total.

        Returns None when no rank qualifies; callers treat that as
        "no restrictions".
        """
        whole_hours = total_minutes // 60
        return (
            Rank.objects
            .filter(minimum_flight_time__lte=whole_hours)
            .order_by('-minimum_flight_time')
            .first()
        )

    @classmethod
    def resolve_next_rank(cls, total_minutes: int) -> Optional[Rank]:
        whole_hours = total_minutes // 60
        return (
            Rank.objects
            .filter(minimum_flight_time__gt=whole_hours)
            .order_by('minimum_flight_time')
            .first()
        )

    @classmethod
    def resolve_allowed_aircraft(cls, rank_id: uuid.UUID) -> List[uuid.UUID]:
        """
        Aircraft a rank may fly.

        A rank inherits the aircraft of every rank at or below its minimum
        flight time. allow_all_aircraft unlocks the whole fleet.
        """
        rank = Rank.objects.filter(id=rank_id).first()
        if rank is None:
            return []

        if rank.allow_all_aircraft:
            return list(Aircraft.objects.values_list('id', flat=True))

        aircraft_ids = (
            RankAircraft.objects
            .filter(rank__minimum_flight_time__lte=rank.minimum_flight_time)
            .values_list('aircraft_id', flat=True)
            .distinct()
        )
        return list(aircraft_ids)

    # ==========================================================================
    # Reference Data
    # ==========================================================================

    @classmethod
    def resolve_multiplier_value(cls, multiplier_id: Optional[uuid.UUID]) -> float:
        """Multiplier scalar, 1 when the id is empty or unknown."""
        if not multiplier_id:
            return 1
        value = (
            Multiplier.objects
            .filter(id=multiplier_id)
            .values_list('value', flat=True)
            .first()
        )
        return value if value is not None else 1

    @classmethod
    def resolve_multiplier_values(
        cls,
        multiplier_ids: List[Optional[uuid.UUID]]
    ) -> Dict[uuid.UUID, float]:
        """Values for several multipliers in one query."""
        valid_ids = [m for m in multiplier_ids if m]
        if not valid_ids:
            return {}
        rows = Multiplier.objects.filter(id__in=valid_ids).values_list('id', 'value')
        return {row_id: value for row_id, value in rows}

    @classmethod
    def aircraft_label(cls, aircraft_id: Optional[uuid.UUID]) -> str:
        aircraft = Aircraft.objects.filter(id=aircraft_id).first() if aircraft_id else None
        if aircraft is None:
            return UNKNOWN_AIRCRAFT_LABEL
        return aircraft.label
