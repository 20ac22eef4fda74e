# src/apps/core/models/airport.py
"""
Airport Model
"""

from typing import Tuple

from django.db import models


class Airport(models.Model):
    """Airport reference data, keyed by ICAO code."""

    icao = models.CharField(
        max_length=5,
        primary_key=True,
        help_text="ICAO code"
    )
    iata = models.CharField(max_length=5, blank=True, default='')
    name = models.CharField(max_length=150)
    location = models.CharField(max_length=150, blank=True, default='')
    country = models.CharField(max_length=64, blank=True, default='')

    latitude = models.FloatField(default=0.0)
    longitude = models.FloatField(default=0.0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'airports'
        ordering = ['icao']

    def __str__(self):
        return self.icao

    @property
    def full_name(self) -> str:
        return f"{self.icao} - {self.name}"

    @property
    def coords(self) -> Tuple[float, float]:
        """Position as (lat, lon)."""
        return (self.latitude, self.longitude)
