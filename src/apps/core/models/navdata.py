# src/apps/core/models/navdata.py
"""
Navdata Model

Navigation fixes (VORs, NDBs, named intersections) used to resolve
filed routes into positions.
"""

from typing import Tuple

from django.db import models


class Navdata(models.Model):
    """
    A navigation fix.

    Identifiers are not unique: the same ident can exist in several
    places around the world, so lookups return every match and the
    route resolver picks the closest one.
    """

    class NavaidType(models.TextChoices):
        VOR = 'VOR', 'VOR'
        VOR_DME = 'VOR_DME', 'VOR/DME'
        LOC = 'LOC', 'Localizer'
        LOC_DME = 'LOC_DME', 'Localizer/DME'
        NDB = 'NDB', 'NDB'
        TACAN = 'TACAN', 'TACAN'
        FIX = 'FIX', 'Fix'
        UNKNOWN = 'UNKNOWN', 'Unknown'

    ident = models.CharField(
        max_length=10,
        db_index=True,
        help_text="Fix identifier, not unique"
    )
    name = models.CharField(max_length=100, blank=True, default='')
    type = models.CharField(
        max_length=10,
        choices=NavaidType.choices,
        default=NavaidType.UNKNOWN
    )

    latitude = models.FloatField()
    longitude = models.FloatField()
    frequency = models.DecimalField(
        max_digits=7,
        decimal_places=2,
        blank=True,
        null=True,
        help_text="Radio frequency, if any"
    )

    class Meta:
        db_table = 'navdata'
        ordering = ['id']

    def __str__(self):
        return f"{self.ident} ({self.type})"

    @property
    def coords(self) -> Tuple[float, float]:
        """Position as (lat, lon)."""
        return (self.latitude, self.longitude)
