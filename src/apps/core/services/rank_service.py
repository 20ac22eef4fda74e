# src/apps/core/services/rank_service.py
"""
Rank Service

Rank administration and subfleet eligibility.
"""

import logging
from typing import List, Dict, Any, Tuple

from django.conf import settings
from django.core.cache import cache
from django.db import transaction

from ..models import Pilot, Rank, Subfleet
from .exceptions import RankError

logger = logging.getLogger(__name__)


class RankService:
    """
    Service class for ranks.

    Keeps the cached promotion table in step with rank changes: every
    rank mutation drops the cache entry once its transaction commits.
    """

    # ==========================================================================
    # Cache
    # ==========================================================================

    @classmethod
    def _cache_config(cls) -> Tuple[str, int]:
        conf = settings.CACHE_KEYS['RANKS_PILOT_LIST']
        return conf['key'], conf['time']

    @classmethod
    def get_promotion_ranks(cls) -> List[Tuple[int, int]]:
        """
        Auto-promote ranks as (rank_id, hours), lowest threshold first.

        Cached under the RANKS_PILOT_LIST key.
        """
        key, timeout = cls._cache_config()
        ranks = cache.get(key)
        if ranks is None:
            ranks = list(
                Rank.objects.filter(auto_promote=True)
                .order_by('hours', 'id')
                .values_list('id', 'hours')
            )
            cache.set(key, ranks, timeout)
        return ranks

    @classmethod
    def invalidate_rank_cache(cls) -> None:
        key, _ = cls._cache_config()
        cache.delete(key)
        logger.debug(f"Invalidated rank cache {key}")

    # ==========================================================================
    # Rank CRUD
    # ==========================================================================

    @classmethod
    def get_rank(cls, rank_id: int) -> Rank:
        try:
            return Rank.objects.get(id=rank_id)
        except Rank.DoesNotExist:
            raise RankError(message=f"Rank not found: {rank_id}", rank_id=str(rank_id))

    @classmethod
    @transaction.atomic
    def create_rank(cls, rank_data: Dict[str, Any]) -> Rank:
        """
        Create a rank.

        Args:
            rank_data: Rank fields; 'name' is required

        Raises:
            RankError: If the name is missing or already used
        """
        name = rank_data.get('name')
        if not name:
            raise RankError(message="Rank name is required")
        if Rank.objects.filter(name=name).exists():
            raise RankError(message=f"Rank {name} already exists")

        rank = Rank.objects.create(**rank_data)
        transaction.on_commit(cls.invalidate_rank_cache)

        logger.info(f"Rank {rank.name} created")
        return rank

    @classmethod
    @transaction.atomic
    def update_rank(cls, rank_id: int, rank_data: Dict[str, Any]) -> Rank:
        """Update rank fields and drop the cached promotion table."""
        rank = cls.get_rank(rank_id)

        for key, value in rank_data.items():
            if hasattr(rank, key) and key not in ['id', 'subfleets']:
                setattr(rank, key, value)
        rank.save()
        transaction.on_commit(cls.invalidate_rank_cache)

        logger.info(f"Rank {rank.id} updated")
        return rank

    @classmethod
    @transaction.atomic
    def delete_rank(cls, rank_id: int) -> bool:
        """
        Delete a rank.

        Raises:
            RankError: If pilots still hold the rank
        """
        rank = cls.get_rank(rank_id)

        if rank.pilots.exists():
            raise RankError(
                message="Cannot delete a rank that is assigned to pilots",
                rank_id=str(rank_id)
            )

        rank.delete()
        transaction.on_commit(cls.invalidate_rank_cache)

        logger.info(f"Rank {rank_id} deleted")
        return True

    # ==========================================================================
    # Subfleets
    # ==========================================================================

    @classmethod
    def add_subfleet_to_rank(cls, subfleet: Subfleet, rank: Rank) -> Rank:
        rank.subfleets.add(subfleet)
        logger.info(f"Subfleet {subfleet.code} added to rank {rank.name}")
        return rank

    @classmethod
    def remove_subfleet_from_rank(cls, subfleet: Subfleet, rank: Rank) -> Rank:
        rank.subfleets.remove(subfleet)
        logger.info(f"Subfleet {subfleet.code} removed from rank {rank.name}")
        return rank

    @classmethod
    def get_available_subfleets(cls, rank: Rank) -> Dict[int, str]:
        """Subfleets not yet on the rank, as id -> display name."""
        assigned = rank.subfleets.values_list('id', flat=True)
        return {
            subfleet.id: subfleet.display_name
            for subfleet in Subfleet.objects.exclude(id__in=assigned)
        }

    @classmethod
    def get_allowed_subfleets(cls, pilot: Pilot) -> List[Subfleet]:
        """Subfleets the pilot's rank allows them to fly."""
        if pilot.rank_id is None:
            return []
        return list(pilot.rank.subfleets.all())
