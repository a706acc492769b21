# services/pirep-service/src/apps/core/models/pirep_event.py
"""
PIREP Event Model

Append-only audit trail of every mutation applied to a PIREP.
"""

import uuid

from django.db import models


class AppendOnlyError(Exception):
    """Raised when code tries to rewrite or remove an audit record."""


class PirepEventQuerySet(models.QuerySet):
    """Queryset that refuses bulk rewrites of the audit trail."""

    def update(self, **kwargs):
        raise AppendOnlyError("PIREP events cannot be updated")

    def delete(self):
        raise AppendOnlyError("PIREP events cannot be deleted")


class PirepEvent(models.Model):
    """
    One audit record per create/edit/approve/deny action.

    previous_values / new_values hold encoded diff maps restricted to the
    fields that actually changed.
    """

    class Action(models.TextChoices):
        CREATED = 'created', 'Created'
        EDITED = 'edited', 'Edited'
        APPROVED = 'approved', 'Approved'
        DENIED = 'denied', 'Denied'

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    pirep = models.ForeignKey(
        'core.Pirep',
        on_delete=models.CASCADE,
        related_name='events'
    )
    action = models.CharField(
        max_length=20,
        choices=Action.choices,
        db_index=True
    )
    performed_by = models.UUIDField(db_index=True)
    details = models.TextField(blank=True, null=True)

    previous_values = models.JSONField(blank=True, null=True)
    new_values = models.JSONField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = PirepEventQuerySet.as_manager()

    class Meta:
        db_table = 'pirep_events'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.action} {self.pirep_id} by {self.performed_by}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AppendOnlyError("PIREP events cannot be updated")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AppendOnlyError("PIREP events cannot be deleted")
