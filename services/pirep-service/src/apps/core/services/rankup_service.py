# services/pirep-service/src/apps/core/services/rankup_service.py
"""
Rank-up Service

Detects rank promotions caused by a change in a pilot's approved flight
time, and schedules that check off the request path.
"""

import uuid
import logging
from typing import Dict, Any, Optional, Tuple

from django.db import transaction

from ..events import event_publisher
from ..models import Pirep
from .ledger_service import LedgerService
from .notification_service import RankupNotifier, RankupPayload

logger = logging.getLogger(__name__)


class RankupService:
    """Service class for rank promotion checks."""

    @classmethod
    def schedule_rank_evaluation(
        cls,
        pilot_id: uuid.UUID,
        old_total: int,
        new_total: int,
    ) -> bool:
        """
        Queue a rank-up check once the surrounding transaction commits.

        Never raises; scheduling failures are logged.

        Returns:
            True if a check was queued
        """
        if old_total == new_total:
            return False

        from ..tasks import evaluate_rankup

        def _enqueue():
            try:
                evaluate_rankup.delay(str(pilot_id), old_total, new_total)
            except Exception as e:
                logger.error(
                    f"Failed to enqueue rank-up check for pilot {pilot_id}: {e}",
                    exc_info=True
                )

        try:
            transaction.on_commit(_enqueue)
        except Exception as e:
            logger.error(
                f"Failed to schedule rank-up check for pilot {pilot_id}: {e}",
                exc_info=True
            )
            return False

        logger.info(f"Rank-up check scheduled for pilot {pilot_id}: {old_total}m -> {new_total}m")
        return True

    @classmethod
    def evaluate(
        cls,
        pilot_id: uuid.UUID,
        previous_total: int,
        new_total: int,
        notifier: RankupNotifier = None,
    ) -> Dict[str, Any]:
        """
        Compare the ranks held before and after a ledger change.

        A promotion happens when the new rank's minimum exceeds the previous
        rank's minimum (0 when there was none).

        Returns:
            {'rankup_occurred': bool, 'new_rank': str, 'previous_rank': str}
        """
        try:
            previous_rank = LedgerService.resolve_rank(previous_total)
            new_rank = LedgerService.resolve_rank(new_total)

            if new_rank is None:
                return {'rankup_occurred': False}

            previous_minimum = previous_rank.minimum_flight_time if previous_rank else 0
            if new_rank.minimum_flight_time <= previous_minimum:
                return {'rankup_occurred': False}

            logger.info(
                f"Pilot {pilot_id} promoted to {new_rank.name}",
                extra={'pilot_id': str(pilot_id), 'rank': new_rank.name}
            )
            event_publisher.publish_rank_achieved(pilot_id, new_rank, previous_rank, new_total)

            pilot_name, pilot_callsign = cls._pilot_identity(pilot_id)
            (notifier or RankupNotifier()).notify_rankup(RankupPayload(
                pilot_id=str(pilot_id),
                pilot_name=pilot_name,
                pilot_callsign=pilot_callsign,
                new_rank=new_rank.name,
                previous_rank=previous_rank.name if previous_rank else None,
                total_flight_time=new_total,
            ))

            result = {'rankup_occurred': True, 'new_rank': new_rank.name}
            if previous_rank:
                result['previous_rank'] = previous_rank.name
            return result

        except Exception as e:
            logger.error(f"Rank-up check failed for pilot {pilot_id}: {e}", exc_info=True)
            return {'rankup_occurred': False}

    @classmethod
    def _pilot_identity(cls, pilot_id: uuid.UUID) -> Tuple[str, Optional[str]]:
        """Name and callsign from the pilot's latest self-submitted report."""
        latest = (
            Pirep.objects.filter(pilot_id=pilot_id)
            .exclude(pilot_name='')
            .order_by('-created_at')
            .values('pilot_name', 'pilot_callsign')
            .first()
        )
        if latest is None:
            return str(pilot_id), None
        return latest['pilot_name'], latest['pilot_callsign'] or None
