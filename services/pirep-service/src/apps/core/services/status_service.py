# services/pirep-service/src/apps/core/services/status_service.py
"""
Status Service

Approve / deny transitions for PIREPs. Every transition writes one audit
event; approvals feed the rank-up check.
"""

import uuid
import logging
from typing import Iterable, List

from django.db import transaction

from ..events import event_publisher
from ..models import Pirep
from .audit_service import AuditService
from .db_errors import wrap_db_errors
from .exceptions import PirepNotFound, PirepValidationError
from .ledger_service import LedgerService
from .rankup_service import RankupService
from .roles import Role
from .validation_service import ValidationService

logger = logging.getLogger(__name__)


class StatusService:
    """
    Service class for PIREP status transitions.

    There is no terminal state: approved and denied reports can be moved
    again by staff, and each move is audited.
    """

    @classmethod
    @transaction.atomic
    def approve(
        cls,
        pirep_id: uuid.UUID,
        actor_id: uuid.UUID,
        actor_roles: Iterable[Role],
    ) -> Pirep:
        """
        Approve a PIREP.

        Raises:
            PirepPermissionError: If the actor lacks the pireps role
            PirepNotFound: If the PIREP does not exist
        """
        ValidationService.check_staff_permission(actor_id, actor_roles, 'approve')
        pirep = cls._get(pirep_id)
        return cls._transition(pirep, Pirep.Status.APPROVED, actor_id)

    @classmethod
    @transaction.atomic
    def deny(
        cls,
        pirep_id: uuid.UUID,
        actor_id: uuid.UUID,
        reason: str,
        actor_roles: Iterable[Role],
    ) -> Pirep:
        """
        Deny a PIREP with a reason.

        Raises:
            PirepPermissionError: If the actor lacks the pireps role
            PirepValidationError: If the reason is empty
            PirepNotFound: If the PIREP does not exist
        """
        ValidationService.check_staff_permission(actor_id, actor_roles, 'deny')
        if not reason or not reason.strip():
            raise PirepValidationError(
                message="Denied reason is required when status is denied",
                field="reason"
            )
        pirep = cls._get(pirep_id)
        return cls._transition(pirep, Pirep.Status.DENIED, actor_id, reason=reason)

    @classmethod
    @transaction.atomic
    def bulk_approve(
        cls,
        pirep_ids: List[uuid.UUID],
        actor_id: uuid.UUID,
        actor_roles: Iterable[Role],
    ) -> List[Pirep]:
        """
        Approve several PIREPs at once.

        All ids must exist; nothing is written otherwise.

        Raises:
            PirepValidationError: If no ids are given
            PirepNotFound: If any id is unknown
        """
        ValidationService.check_staff_permission(actor_id, actor_roles, 'approve')
        if not pirep_ids:
            raise PirepValidationError(
                message="At least one PIREP ID is required",
                field="pirep_ids"
            )

        unique_ids = list(dict.fromkeys(str(p) for p in pirep_ids))
        pireps = list(Pirep.objects.filter(id__in=unique_ids))
        if len(pireps) != len(unique_ids):
            found = {str(p.id) for p in pireps}
            missing = [p for p in unique_ids if p not in found]
            raise PirepNotFound(
                message="Some PIREPs were not found",
                details={'missing': missing}
            )

        approved = [
            cls._transition(pirep, Pirep.Status.APPROVED, actor_id)
            for pirep in pireps
        ]
        logger.info(f"Bulk approved {len(approved)} PIREPs by {actor_id}")
        return approved

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @classmethod
    def _get(cls, pirep_id: uuid.UUID) -> Pirep:
        try:
            return Pirep.objects.get(id=pirep_id)
        except Pirep.DoesNotExist:
            raise PirepNotFound(pirep_id=str(pirep_id))

    @classmethod
    def _transition(
        cls,
        pirep: Pirep,
        new_status: str,
        actor_id: uuid.UUID,
        reason: str = None,
    ) -> Pirep:
        previous_status = pirep.status
        previous_reason = pirep.denied_reason

        pirep.status = new_status
        pirep.denied_reason = reason if new_status == Pirep.Status.DENIED else ''
        with wrap_db_errors(f"set PIREP status to {new_status}"):
            pirep.save(update_fields=['status', 'denied_reason', 'updated_at'])

        AuditService.record_status_change(pirep, actor_id, previous_status, previous_reason)

        if new_status == Pirep.Status.APPROVED:
            event_publisher.publish_pirep_approved(pirep, actor_id, previous_status)
            if previous_status != Pirep.Status.APPROVED:
                total = LedgerService.ledger_total(pirep.pilot_id)
                RankupService.schedule_rank_evaluation(
                    pirep.pilot_id, total - pirep.flight_time, total
                )
        else:
            event_publisher.publish_pirep_denied(pirep, actor_id)

        logger.info(
            f"PIREP {pirep.id} {previous_status} -> {new_status} by {actor_id}"
        )
        return pirep
