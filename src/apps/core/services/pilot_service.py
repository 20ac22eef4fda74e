# src/apps/core/services/pilot_service.py
"""
Pilot Service

Adjustments to pilot aggregate statistics and rank calculation.
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from ..events import get_publisher
from ..models import Pilot
from .rank_service import RankService

logger = logging.getLogger(__name__)


class PilotService:
    """
    Service class for pilot aggregates.

    Counters are changed with F() expressions so concurrent adjustments
    never lose an update; callers hold the pilot row lock for the
    read-modify-write of the rank.
    """

    @classmethod
    def get_pilot_for_update(cls, pilot_id: int) -> Pilot:
        """Load a pilot and lock its row until the transaction ends."""
        return Pilot.objects.select_for_update().get(id=pilot_id)

    @classmethod
    def adjust_flight_time(cls, pilot: Pilot, hours: Decimal) -> Pilot:
        """Add (or with a negative value, remove) flight hours."""
        hours = Decimal(str(hours))
        Pilot.objects.filter(id=pilot.id).update(flight_time=F('flight_time') + hours)
        pilot.refresh_from_db(fields=['flight_time'])
        return pilot

    @classmethod
    def adjust_flight_count(cls, pilot: Pilot, count: int) -> Pilot:
        Pilot.objects.filter(id=pilot.id).update(flights=F('flights') + count)
        pilot.refresh_from_db(fields=['flights'])
        return pilot

    @classmethod
    @transaction.atomic
    def calculate_pilot_rank(cls, pilot: Pilot) -> Pilot:
        """
        Move the pilot to the highest auto-promote rank their hours reach.

        A pilot on a rank without auto_promote keeps it. Lowering the
        hours can demote the pilot. A change publishes a stats event.

        Args:
            pilot: Pilot with up to date flight_time

        Returns:
            The pilot, saved when the rank changed
        """
        if pilot.rank_id is not None and not pilot.rank.auto_promote:
            return pilot

        original_rank_id = pilot.rank_id
        new_rank_id = original_rank_id

        for rank_id, hours in RankService.get_promotion_ranks():
            if pilot.flight_time >= hours:
                new_rank_id = rank_id

        if new_rank_id == original_rank_id:
            return pilot

        pilot.rank_id = new_rank_id
        pilot.save(update_fields=['rank', 'updated_at'])

        logger.info(
            f"Pilot {pilot.id} rank changed from {original_rank_id} to {new_rank_id} "
            f"at {pilot.flight_time} hours"
        )
        get_publisher().publish_pilot_stats_changed(
            pilot, 'rank', previous_value=original_rank_id, new_value=new_rank_id
        )
        return pilot
