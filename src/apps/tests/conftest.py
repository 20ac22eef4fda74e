# src/apps/tests/conftest.py
"""
Pytest Configuration and Fixtures

Shared fixtures for PIREP service tests.
"""

from decimal import Decimal

import pytest


# =============================================================================
# Global Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def clear_cache():
    """Start every test with an empty cache."""
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def publisher():
    """In-memory event publisher, emptied for the test."""
    from apps.core.events import get_publisher
    publisher = get_publisher()
    publisher.clear_memory_events()
    yield publisher
    publisher.clear_memory_events()


# =============================================================================
# Reference Data Fixtures
# =============================================================================

@pytest.fixture
def kjfk(db):
    from apps.core.models import Airport
    return Airport.objects.create(
        icao='KJFK',
        iata='JFK',
        name='John F Kennedy International',
        location='New York',
        country='US',
        latitude=40.6398,
        longitude=-73.7789,
    )


@pytest.fixture
def kord(db):
    from apps.core.models import Airport
    return Airport.objects.create(
        icao='KORD',
        iata='ORD',
        name="Chicago O'Hare International",
        location='Chicago',
        country='US',
        latitude=41.9786,
        longitude=-87.9048,
    )


@pytest.fixture
def egll(db):
    from apps.core.models import Airport
    return Airport.objects.create(
        icao='EGLL',
        iata='LHR',
        name='London Heathrow',
        location='London',
        country='GB',
        latitude=51.4700,
        longitude=-0.4543,
    )


@pytest.fixture
def wavey(db):
    """Fix off the New Jersey coast."""
    from apps.core.models import Navdata
    return Navdata.objects.create(
        ident='WAVEY',
        name='WAVEY',
        type=Navdata.NavaidType.FIX,
        latitude=40.2483,
        longitude=-73.4117,
    )


@pytest.fixture
def duplicate_abc(db):
    """Two navaids sharing the ident ABC, one near New York and one in Europe."""
    from apps.core.models import Navdata
    near = Navdata.objects.create(
        ident='ABC',
        name='ABC NEAR',
        type=Navdata.NavaidType.VOR,
        latitude=40.9,
        longitude=-74.2,
        frequency=Decimal('113.20'),
    )
    far = Navdata.objects.create(
        ident='ABC',
        name='ABC FAR',
        type=Navdata.NavaidType.VOR,
        latitude=50.9,
        longitude=4.5,
        frequency=Decimal('114.60'),
    )
    return near, far


# =============================================================================
# Rank and Pilot Fixtures
# =============================================================================

@pytest.fixture
def rookie(db):
    from apps.core.models import Rank
    return Rank.objects.create(name='Rookie', hours=0)


@pytest.fixture
def first_officer(db):
    from apps.core.models import Rank
    return Rank.objects.create(name='First Officer', hours=10)


@pytest.fixture
def ranks(rookie, first_officer):
    return rookie, first_officer


@pytest.fixture
def subfleet(db):
    from apps.core.models import Subfleet
    return Subfleet.objects.create(
        code='B738',
        name='Boeing 737-800',
        airline_code='VMS',
        aircraft_type='B738',
    )


@pytest.fixture
def pilot(db, rookie, first_officer, kjfk):
    """Pilot on the lowest rank with no accepted flights."""
    from apps.core.models import Pilot
    return Pilot.objects.create(
        name='Test Pilot',
        email='pilot@example.com',
        rank=rookie,
        home_airport=kjfk,
        current_airport=kjfk,
    )


# =============================================================================
# PIREP Fixtures
# =============================================================================

@pytest.fixture
def make_pirep(pilot, kjfk, kord):
    """Factory for unsaved PIREPs from KJFK to KORD."""
    from apps.core.models import Pirep

    def _make_pirep(**overrides):
        data = {
            'pilot': pilot,
            'airline_code': 'VMS',
            'flight_number': '100',
            'departure_airport': kjfk,
            'arrival_airport': kord,
            'route': '',
            'flight_time': Decimal('4.00'),
            'source': Pirep.Source.MANUAL,
            **overrides,
        }
        return Pirep(**data)

    return _make_pirep


@pytest.fixture
def pending_pirep(make_pirep):
    """A filed PIREP awaiting review."""
    from apps.core.services import PirepService
    return PirepService.create(make_pirep())


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def pirep_service():
    """Get PirepService class."""
    from apps.core.services import PirepService
    return PirepService


@pytest.fixture
def geo_service():
    """Get GeoService class."""
    from apps.core.services import GeoService
    return GeoService


@pytest.fixture
def rank_service():
    """Get RankService class."""
    from apps.core.services import RankService
    return RankService


@pytest.fixture
def pilot_service():
    """Get PilotService class."""
    from apps.core.services import PilotService
    return PilotService


@pytest.fixture
def acars_service():
    """Get AcarsService class."""
    from apps.core.services import AcarsService
    return AcarsService
