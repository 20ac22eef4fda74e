# src/apps/core/models/acars.py
"""
ACARS Model

Rows attached to a PIREP: tracked positions, resolved route waypoints
and free-text log lines.
"""

import uuid
from typing import Tuple

from django.db import models


class Acars(models.Model):
    """
    ACARS data row for a PIREP.

    The type decides which columns are meaningful:
    - FLIGHT_PATH: a tracked position report
    - ROUTE: one resolved waypoint of the filed route, in order
    - LOG: a text line in `log`
    """

    class Type(models.TextChoices):
        FLIGHT_PATH = 'flight_path', 'Flight Path'
        ROUTE = 'route', 'Route'
        LOG = 'log', 'Log'

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    pirep = models.ForeignKey(
        'core.Pirep',
        on_delete=models.CASCADE,
        related_name='acars'
    )
    type = models.CharField(
        max_length=20,
        choices=Type.choices,
        default=Type.FLIGHT_PATH,
        db_index=True
    )
    order = models.PositiveIntegerField(default=0)

    # Route waypoint
    name = models.CharField(max_length=20, blank=True, default='')
    nav_type = models.CharField(max_length=10, blank=True, default='')

    log = models.TextField(blank=True, default='')

    # Position
    latitude = models.FloatField(blank=True, null=True)
    longitude = models.FloatField(blank=True, null=True)
    altitude = models.IntegerField(blank=True, null=True)
    heading = models.IntegerField(blank=True, null=True)
    gs = models.FloatField(blank=True, null=True, help_text="Ground speed, knots")
    vs = models.FloatField(blank=True, null=True, help_text="Vertical speed, ft/min")
    transponder = models.IntegerField(blank=True, null=True)
    autopilot = models.CharField(max_length=20, blank=True, default='')
    fuel_flow = models.FloatField(blank=True, null=True)
    sim_time = models.CharField(max_length=30, blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'acars'
        ordering = ['order', 'created_at']
        indexes = [
            models.Index(fields=['pirep', 'type', 'order']),
        ]

    def __str__(self):
        return f"{self.type} #{self.order} for {self.pirep_id}"

    @property
    def coords(self) -> Tuple[float, float]:
        """Position as (lat, lon)."""
        return (self.latitude, self.longitude)
