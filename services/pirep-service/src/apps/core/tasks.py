# services/pirep-service/src/apps/core/tasks.py
"""
PIREP Service Celery Tasks

Background tasks run after PIREP mutations commit.
"""

import logging
from uuid import UUID

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(name='pireps.evaluate_rankup')
def evaluate_rankup(pilot_id: str, previous_total: int, new_total: int):
    """
    Check whether a ledger change promoted a pilot.

    Args:
        pilot_id: Pilot UUID as string
        previous_total: Approved minutes before the change
        new_total: Approved minutes after the change
    """
    from .services import RankupService

    result = RankupService.evaluate(UUID(pilot_id), previous_total, new_total)
    logger.info(f"Rank-up check for pilot {pilot_id}: {result}")
    return result
