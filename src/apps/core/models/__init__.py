# src/apps/core/models/__init__.py
"""
PIREP Service Models

Database models for virtual-airline flight operations:
- Airports and navigation fixes (reference data)
- Ranks, subfleets and pilots with aggregate statistics
- Flight reports (PIREPs), their custom fields and ACARS rows
"""

from .airport import Airport
from .navdata import Navdata
from .rank import Rank, Subfleet
from .pilot import Pilot
from .pirep import Pirep, PirepFieldValue
from .acars import Acars

__all__ = [
    # Reference Data
    'Airport',
    'Navdata',

    # Pilots and Ranks
    'Rank',
    'Subfleet',
    'Pilot',

    # Flight Reports
    'Pirep',
    'PirepFieldValue',
    'Acars',
]
