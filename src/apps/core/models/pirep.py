# src/apps/core/models/pirep.py
"""
PIREP Models

Filed flight reports and their custom field values.
"""

import uuid
from decimal import Decimal

from django.db import models
from django.core.validators import MinValueValidator


class Pirep(models.Model):
    """
    A pilot flight report.

    The state is only changed through PirepService so that the pilot's
    aggregate statistics follow every transition.
    """

    class State(models.TextChoices):
        PENDING = 'pending', 'Pending'
        ACCEPTED = 'accepted', 'Accepted'
        REJECTED = 'rejected', 'Rejected'

    class Source(models.TextChoices):
        MANUAL = 'manual', 'Manual'
        ACARS = 'acars', 'ACARS'

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    pilot = models.ForeignKey(
        'core.Pilot',
        on_delete=models.CASCADE,
        related_name='pireps'
    )

    airline_code = models.CharField(max_length=5, blank=True, default='')
    flight_number = models.CharField(max_length=10, blank=True, default='')

    # ==========================================================================
    # Route
    # ==========================================================================
    departure_airport = models.ForeignKey(
        'core.Airport',
        on_delete=models.PROTECT,
        related_name='departing_pireps'
    )
    arrival_airport = models.ForeignKey(
        'core.Airport',
        on_delete=models.PROTECT,
        related_name='arriving_pireps'
    )
    route = models.TextField(
        blank=True,
        default='',
        help_text="Space separated flight plan route"
    )

    flight_time = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Flight time in hours"
    )

    state = models.CharField(
        max_length=20,
        choices=State.choices,
        default=State.PENDING,
        db_index=True
    )
    source = models.CharField(
        max_length=20,
        choices=Source.choices,
        default=Source.MANUAL
    )

    notes = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'pireps'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['pilot', 'state']),
        ]

    def __str__(self):
        return f"PIREP {self.id} ({self.ident})"

    @property
    def ident(self) -> str:
        return f"{self.airline_code}{self.flight_number}"

    @property
    def is_accepted(self) -> bool:
        return self.state == self.State.ACCEPTED


class PirepFieldValue(models.Model):
    """A named custom field value attached to a PIREP."""

    pirep = models.ForeignKey(
        Pirep,
        on_delete=models.CASCADE,
        related_name='field_values'
    )
    name = models.CharField(max_length=50)
    value = models.CharField(max_length=255, blank=True, default='')
    source = models.CharField(
        max_length=20,
        choices=Pirep.Source.choices,
        default=Pirep.Source.MANUAL
    )

    class Meta:
        db_table = 'pirep_field_values'
        ordering = ['id']

    def __str__(self):
        return f"{self.name}={self.value}"
