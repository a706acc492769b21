# services/pirep-service/src/apps/core/models/rank.py
"""
Rank Models

Pilot seniority tiers derived from accumulated approved flight time, and the
aircraft each tier may fly.
"""

import uuid

from django.db import models


class Aircraft(models.Model):
    """Fleet aircraft (type + livery)."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    name = models.CharField(max_length=100)
    livery = models.CharField(max_length=100)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'aircraft'
        ordering = ['name']
        verbose_name_plural = 'aircraft'

    def __str__(self):
        return self.label

    @property
    def label(self) -> str:
        return f"{self.name} ({self.livery})"


class Rank(models.Model):
    """
    Seniority tier.

    minimum_flight_time / maximum_flight_time are expressed in hours.
    maximum_flight_time caps a single report; null means no limit.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    name = models.CharField(max_length=100, unique=True)
    minimum_flight_time = models.PositiveIntegerField(
        unique=True,
        db_index=True,
        help_text="Hours of approved flight time needed to hold the rank"
    )
    maximum_flight_time = models.PositiveIntegerField(
        blank=True,
        null=True,
        help_text="Maximum hours loggable in one report (null = no limit)"
    )
    allow_all_aircraft = models.BooleanField(
        default=False,
        help_text="Fly any aircraft regardless of rank aircraft entries"
    )
    aircraft = models.ManyToManyField(
        Aircraft,
        through='RankAircraft',
        related_name='ranks',
        blank=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'ranks'
        ordering = ['minimum_flight_time']

    def __str__(self):
        return self.name

    @property
    def maximum_flight_minutes(self):
        if self.maximum_flight_time is None:
            return None
        return self.maximum_flight_time * 60


class RankAircraft(models.Model):
    """Aircraft unlocked by a rank."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    rank = models.ForeignKey(Rank, on_delete=models.CASCADE)
    aircraft = models.ForeignKey(Aircraft, on_delete=models.CASCADE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'rank_aircraft'
        unique_together = [['rank', 'aircraft']]
