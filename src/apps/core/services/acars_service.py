# src/apps/core/services/acars_service.py
"""
ACARS Service

Position reports and log lines sent by the tracking client for a PIREP.
"""

import logging
from typing import List, Dict, Any

from django.db import transaction
from django.db.models import Max

from ..models import Acars, Pirep
from .exceptions import PirepValidationError

logger = logging.getLogger(__name__)

POSITION_FIELDS = (
    'latitude',
    'longitude',
    'altitude',
    'heading',
    'gs',
    'vs',
    'transponder',
    'autopilot',
    'fuel_flow',
    'sim_time',
)


class AcarsService:
    """Service class for ACARS flight-path and log rows."""

    @classmethod
    def _next_order(cls, pirep: Pirep, acars_type: str) -> int:
        last = Acars.objects.filter(pirep=pirep, type=acars_type).aggregate(
            last=Max('order')
        )['last']
        return 0 if last is None else last + 1

    @classmethod
    @transaction.atomic
    def add_positions(cls, pirep: Pirep, positions: List[Dict[str, Any]]) -> List[Acars]:
        """
        Append position reports to the PIREP's flight path.

        Args:
            pirep: PIREP being tracked
            positions: Position dicts, oldest first

        Raises:
            PirepValidationError: If a position has no latitude/longitude
        """
        for i, position in enumerate(positions):
            missing = [f for f in ('latitude', 'longitude') if position.get(f) is None]
            if missing:
                raise PirepValidationError(
                    message=f"Position {i} is missing: {', '.join(missing)}",
                    details={"missing_fields": missing, "index": i}
                )

        start = cls._next_order(pirep, Acars.Type.FLIGHT_PATH)
        rows = [
            Acars(
                pirep=pirep,
                type=Acars.Type.FLIGHT_PATH,
                order=start + i,
                **{k: v for k, v in position.items() if k in POSITION_FIELDS}
            )
            for i, position in enumerate(positions)
        ]
        Acars.objects.bulk_create(rows)

        logger.debug(f"Added {len(rows)} positions to PIREP {pirep.id}")
        return rows

    @classmethod
    @transaction.atomic
    def add_logs(cls, pirep: Pirep, lines: List[str]) -> List[Acars]:
        start = cls._next_order(pirep, Acars.Type.LOG)
        rows = [
            Acars(pirep=pirep, type=Acars.Type.LOG, order=start + i, log=line)
            for i, line in enumerate(lines)
        ]
        Acars.objects.bulk_create(rows)
        return rows

    @classmethod
    def get_flight_path(cls, pirep: Pirep) -> List[Acars]:
        return list(
            Acars.objects.filter(pirep=pirep, type=Acars.Type.FLIGHT_PATH)
            .order_by('order', 'created_at')
        )
