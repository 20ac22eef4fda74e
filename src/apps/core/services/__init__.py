# src/apps/core/services/__init__.py
"""
PIREP Service - Service Layer

Business logic for PIREP filing, review, pilot statistics and routes.
"""

from .exceptions import (
    PirepServiceError,
    PirepNotFoundError,
    PirepValidationError,
    RankError,
)

from .geo_service import GeoService, DistanceMeasure
from .rank_service import RankService
from .pilot_service import PilotService
from .acars_service import AcarsService
from .pirep_service import PirepService

__all__ = [
    # Exceptions
    'PirepServiceError',
    'PirepNotFoundError',
    'PirepValidationError',
    'RankError',
    # Services
    'GeoService',
    'DistanceMeasure',
    'RankService',
    'PilotService',
    'AcarsService',
    'PirepService',
]
