# src/apps/core/models/pilot.py
"""
Pilot Model

A pilot and the running totals derived from accepted PIREPs.
"""

from decimal import Decimal

from django.db import models


class Pilot(models.Model):
    """
    Pilot with aggregate statistics.

    flight_time, flights, rank, current_airport and last_pirep are only
    changed as a side effect of PIREP state transitions, so they always
    reduce over the pilot's accepted PIREPs.
    """

    name = models.CharField(max_length=100)
    email = models.EmailField(unique=True)

    rank = models.ForeignKey(
        'core.Rank',
        on_delete=models.PROTECT,
        related_name='pilots',
        blank=True,
        null=True
    )
    home_airport = models.ForeignKey(
        'core.Airport',
        on_delete=models.SET_NULL,
        related_name='+',
        blank=True,
        null=True
    )
    current_airport = models.ForeignKey(
        'core.Airport',
        on_delete=models.SET_NULL,
        related_name='+',
        blank=True,
        null=True
    )
    last_pirep = models.ForeignKey(
        'core.Pirep',
        on_delete=models.SET_NULL,
        related_name='+',
        blank=True,
        null=True
    )

    # ==========================================================================
    # Aggregates
    # ==========================================================================
    flight_time = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Cumulative flight hours"
    )
    flights = models.IntegerField(
        default=0,
        help_text="Cumulative accepted flights"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'pilots'
        ordering = ['name']

    def __str__(self):
        return self.name
