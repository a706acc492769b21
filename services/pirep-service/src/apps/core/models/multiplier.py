# services/pirep-service/src/apps/core/models/multiplier.py
"""
Multiplier Model

Bonus/event scalars applied to a report's base flight time.
"""

import uuid

from django.db import models
from django.core.validators import MinValueValidator


class Multiplier(models.Model):
    """Named scalar (> 1.0) used to credit bonus flight time."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    name = models.CharField(max_length=100, db_index=True)
    value = models.FloatField(
        validators=[MinValueValidator(1.0)],
        db_index=True,
        help_text="Scalar applied to the base flight time"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'multipliers'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.name} (x{self.value})"
