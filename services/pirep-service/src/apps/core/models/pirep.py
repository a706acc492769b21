# services/pirep-service/src/apps/core/models/pirep.py
"""
PIREP Model

Core model for pilot flight reports.
"""

import uuid
from typing import Optional

from django.db import models
from django.db.models import Sum
from django.core.validators import MinValueValidator


class Pirep(models.Model):
    """
    Pilot report of one completed flight.

    flight_time always holds the adjusted (credited) minutes. When a
    multiplier is attached, the base duration is recoverable as
    round(flight_time / multiplier.value).
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        DENIED = 'denied', 'Denied'

    # ==========================================================================
    # Primary Keys and Relations
    # ==========================================================================
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    pilot_id = models.UUIDField(
        db_index=True,
        help_text="Owner of the report"
    )
    pilot_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Owner display name at submission"
    )
    pilot_callsign = models.CharField(max_length=20, blank=True)
    aircraft = models.ForeignKey(
        'core.Aircraft',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='pireps'
    )
    multiplier = models.ForeignKey(
        'core.Multiplier',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='pireps'
    )

    # ==========================================================================
    # Flight Details
    # ==========================================================================
    flight_number = models.CharField(max_length=20)
    date = models.DateTimeField(db_index=True)

    departure_icao = models.CharField(
        max_length=4,
        help_text="ICAO code"
    )
    arrival_icao = models.CharField(
        max_length=4,
        help_text="ICAO code"
    )

    flight_time = models.PositiveIntegerField(
        help_text="Credited flight time in minutes (multiplier applied)"
    )
    cargo = models.PositiveIntegerField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Cargo in kg"
    )
    fuel_burned = models.PositiveIntegerField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Fuel burned in kg"
    )

    comments = models.TextField(blank=True, null=True)
    denied_reason = models.TextField(blank=True, default='')

    # ==========================================================================
    # Status
    # ==========================================================================
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )

    # ==========================================================================
    # Timestamps
    # ==========================================================================
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'pireps'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'date']),
            models.Index(fields=['pilot_id', 'status']),
            models.Index(fields=['status', 'date', 'pilot_id', 'flight_time']),
        ]

    def __str__(self):
        return f"{self.flight_number} {self.departure_icao}-{self.arrival_icao}"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING

    @property
    def is_approved(self) -> bool:
        return self.status == self.Status.APPROVED

    @property
    def multiplier_value(self) -> Optional[float]:
        """Multiplier scalar, or None when no multiplier is attached."""
        if self.multiplier_id is None or self.multiplier is None:
            return None
        return self.multiplier.value

    @property
    def display_route(self) -> str:
        return f"{self.departure_icao} → {self.arrival_icao}"

    # ==========================================================================
    # Class Methods
    # ==========================================================================

    @classmethod
    def approved_minutes_for_pilot(cls, pilot_id: uuid.UUID) -> int:
        """Sum of credited minutes over a pilot's approved reports."""
        result = cls.objects.filter(
            pilot_id=pilot_id,
            status=cls.Status.APPROVED
        ).aggregate(total=Sum('flight_time'))
        return result['total'] or 0
