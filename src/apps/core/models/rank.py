# src/apps/core/models/rank.py
"""
Rank and Subfleet Models
"""

from django.db import models


class Subfleet(models.Model):
    """A group of aircraft of one type flown by an airline."""

    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=100)
    airline_code = models.CharField(max_length=5, blank=True, default='')
    aircraft_type = models.CharField(max_length=10, blank=True, default='')

    class Meta:
        db_table = 'subfleets'
        ordering = ['code']

    def __str__(self):
        return self.name

    @property
    def display_name(self) -> str:
        return f"{self.name} (airline: {self.airline_code})"


class Rank(models.Model):
    """
    Pilot progression tier.

    The rank carries the PIREP approval policy for its pilots and the
    subfleets they are allowed to fly.
    """

    name = models.CharField(max_length=50, unique=True)
    hours = models.PositiveIntegerField(
        default=0,
        help_text="Flight hours required to reach this rank"
    )
    image_url = models.URLField(blank=True, default='')

    auto_approve_acars = models.BooleanField(
        default=False,
        help_text="PIREPs filed through ACARS are accepted on filing"
    )
    auto_approve_manual = models.BooleanField(
        default=False,
        help_text="Manually filed PIREPs are accepted on filing"
    )
    auto_promote = models.BooleanField(
        default=True,
        help_text="Pilots are moved in and out of this rank by hours"
    )

    subfleets = models.ManyToManyField(
        Subfleet,
        related_name='ranks',
        blank=True
    )

    class Meta:
        db_table = 'ranks'
        ordering = ['hours', 'name']

    def __str__(self):
        return self.name
