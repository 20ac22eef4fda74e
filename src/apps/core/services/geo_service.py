# src/apps/core/services/geo_service.py
"""
Geo Service

Route resolution against navdata, coordinate geometry and GeoJSON
(RFC 7946) export for planned and flown routes.
"""

import math
import logging
from enum import Enum
from typing import List, Dict, Any, Sequence, Tuple, Union

from django.conf import settings
from django.db import transaction

from ..models import Acars, Airport, Navdata, Pirep

logger = logging.getLogger(__name__)

# WGS84 semi-major axis, metres
EARTH_RADIUS_M = 6378137.0

SKIPPED_ROUTE_MARKERS = ('SID', 'STAR')

Coords = Tuple[float, float]


# =============================================================================
# Coordinate geometry
# =============================================================================

def flat_distance(coord_a: Sequence[float], coord_b: Sequence[float]) -> float:
    """Equirectangular approximation of the distance in metres."""
    lat_a, lon_a = math.radians(coord_a[0]), math.radians(coord_a[1])
    lat_b, lon_b = math.radians(coord_b[0]), math.radians(coord_b[1])

    x = (lon_b - lon_a) * math.cos((lat_a + lat_b) / 2)
    y = lat_b - lat_a
    return math.sqrt(x * x + y * y) * EARTH_RADIUS_M


def great_circle_distance(coord_a: Sequence[float], coord_b: Sequence[float]) -> float:
    """Haversine great-circle distance in metres."""
    lat_a, lon_a = math.radians(coord_a[0]), math.radians(coord_a[1])
    lat_b, lon_b = math.radians(coord_b[0]), math.radians(coord_b[1])
    dlat = lat_b - lat_a
    dlon = lon_b - lon_a

    a = math.sin(dlat / 2) ** 2 + math.cos(lat_a) * math.cos(lat_b) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


class DistanceMeasure(str, Enum):
    """Distance metric used to pick between duplicate fixes."""

    FLAT = 'flat'
    GREAT_CIRCLE = 'greatcircle'

    def distance(self, coord_a: Sequence[float], coord_b: Sequence[float]) -> float:
        if self is DistanceMeasure.GREAT_CIRCLE:
            return great_circle_distance(coord_a, coord_b)
        return flat_distance(coord_a, coord_b)


# =============================================================================
# GeoJSON builders
# =============================================================================

def _point_feature(lon: float, lat: float, properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'type': 'Feature',
        'geometry': {'type': 'Point', 'coordinates': [lon, lat]},
        'properties': properties,
    }


def _line_feature(coordinates: List[List[float]]) -> Dict[str, Any]:
    return {
        'type': 'Feature',
        'geometry': {'type': 'LineString', 'coordinates': coordinates},
        'properties': {},
    }


def _feature_collection(features: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {'type': 'FeatureCollection', 'features': features}


def _airport_feature(airport: Airport) -> Dict[str, Any]:
    return _point_feature(airport.longitude, airport.latitude, {
        'name': airport.icao,
        'popup': airport.full_name,
        'icon': 'airport',
    })


def _waypoint_feature(point: Union[Navdata, Acars]) -> Dict[str, Any]:
    # Navdata carries the fix ident separately, stored route rows keep it in name
    ident = getattr(point, 'ident', '') or point.name
    label = point.name or ident
    return _point_feature(point.longitude, point.latitude, {
        'name': ident,
        'popup': f"{ident} ({label})",
        'icon': '',
    })


class GeoService:
    """
    Service class for route and geometry operations.

    Resolves textual routes into navdata fixes and builds the GeoJSON
    consumed by the map views.
    """

    # ==========================================================================
    # Nearest neighbour
    # ==========================================================================

    @classmethod
    def get_distance_measure(cls, measure: Union[str, DistanceMeasure, None] = None) -> DistanceMeasure:
        """Resolve a measure argument, falling back to ROUTE_DISTANCE_MEASURE."""
        if measure is None:
            measure = getattr(settings, 'ROUTE_DISTANCE_MEASURE', DistanceMeasure.FLAT.value)
        return DistanceMeasure(measure)

    @classmethod
    def get_closest_coords(
        cls,
        coord_start: Sequence[float],
        all_coords: Sequence[Sequence[float]],
        measure: Union[str, DistanceMeasure, None] = None
    ) -> int:
        """
        Find the coordinate closest to a starting point.

        Args:
            coord_start: (lat, lon) to measure from
            all_coords: Candidate (lat, lon) pairs
            measure: Distance metric, flat by default

        Returns:
            Index of the closest candidate; the first one wins a tie
        """
        if not all_coords:
            raise ValueError("No coordinates to choose from")

        measure = cls.get_distance_measure(measure)
        distances = [measure.distance(coord_start, coords) for coords in all_coords]
        return min(range(len(distances)), key=distances.__getitem__)

    # ==========================================================================
    # Route resolution
    # ==========================================================================

    @classmethod
    def _find_nav_points(cls, ident: str) -> List[Navdata]:
        """All fixes sharing an ident, in a stable order."""
        # Savepoint so a failed lookup leaves an enclosing transaction usable
        with transaction.atomic():
            return list(Navdata.objects.filter(ident=ident).order_by('id'))

    @classmethod
    def get_coords_from_route(
        cls,
        dep_icao: str,
        arr_icao: str,
        start_coords: Sequence[float],
        route: str,
        measure: Union[str, DistanceMeasure, None] = None
    ) -> List[Navdata]:
        """
        Resolve a textual route into an ordered list of fixes.

        Args:
            dep_icao: Departure ICAO, skipped in the route
            arr_icao: Arrival ICAO, skipped in the route
            start_coords: (lat, lon) used to disambiguate the first fix
            route: Space separated route text
            measure: Distance metric for duplicate idents

        Returns:
            Resolved Navdata in route order. Unknown tokens are left out.
        """
        measure = cls.get_distance_measure(measure)
        skip = {dep_icao, arr_icao, *SKIPPED_ROUTE_MARKERS}
        coords: List[Navdata] = []

        for route_point in (route or '').split():
            route_point = route_point.strip()
            if route_point in skip:
                continue

            try:
                logger.debug(f"Looking for {route_point}")
                points = cls._find_nav_points(route_point)
            except Exception:
                logger.exception(f"Navdata lookup failed for {route_point}, skipping")
                continue

            if not points:
                continue

            if len(points) == 1:
                point = points[0]
                logger.debug(f"name: {point.ident} - {point.latitude}x{point.longitude}")
                coords.append(point)
                continue

            logger.info(f"found {len(points)} for {route_point}")

            # The first fix of the route is measured from the start position
            anchor = coords[-1].coords if coords else tuple(start_coords)
            closest = cls.get_closest_coords(anchor, [p.coords for p in points], measure)
            coords.append(points[closest])

        return coords

    @classmethod
    def route_to_nav_points(
        cls,
        route: str,
        dep_airport: Airport,
        arr_airport: Airport,
        measure: Union[str, DistanceMeasure, None] = None
    ) -> List[Navdata]:
        """Resolve a route anchored on the departure airport."""
        return cls.get_coords_from_route(
            dep_airport.icao,
            arr_airport.icao,
            dep_airport.coords,
            route,
            measure=measure,
        )

    @classmethod
    def get_center(cls, lat_a: float, lon_a: float, lat_b: float, lon_b: float) -> Coords:
        """Great-circle midpoint between two coordinates, as (lat, lon)."""
        phi_a, lambda_a = math.radians(lat_a), math.radians(lon_a)
        phi_b = math.radians(lat_b)
        dlon = math.radians(lon_b - lon_a)

        bx = math.cos(phi_b) * math.cos(dlon)
        by = math.cos(phi_b) * math.sin(dlon)

        lat_mid = math.atan2(
            math.sin(phi_a) + math.sin(phi_b),
            math.sqrt((math.cos(phi_a) + bx) ** 2 + by ** 2)
        )
        lon_mid = lambda_a + math.atan2(by, math.cos(phi_a) + bx)

        # Normalise to [-180, 180)
        lon_deg = (math.degrees(lon_mid) + 540) % 360 - 180
        return (math.degrees(lat_mid), lon_deg)

    # ==========================================================================
    # GeoJSON
    # ==========================================================================

    @classmethod
    def route_geojson(
        cls,
        dep_airport: Airport,
        arr_airport: Airport,
        points: Sequence[Union[Navdata, Acars]]
    ) -> Dict[str, Any]:
        """
        Build the GeoJSON for an already resolved route.

        Returns:
            Dictionary with 'route_points' (a Point per airport and
            waypoint) and 'planned_route_line' (one LineString from
            departure through the waypoints to arrival)
        """
        line_coords = [[dep_airport.longitude, dep_airport.latitude]]
        features = [_airport_feature(dep_airport)]

        for point in points:
            line_coords.append([point.longitude, point.latitude])
            features.append(_waypoint_feature(point))

        line_coords.append([arr_airport.longitude, arr_airport.latitude])
        features.append(_airport_feature(arr_airport))

        return {
            'route_points': _feature_collection(features),
            'planned_route_line': _feature_collection([_line_feature(line_coords)]),
        }

    @classmethod
    def planned_route_geojson(
        cls,
        dep_airport: Airport,
        arr_airport: Airport,
        route: str
    ) -> Dict[str, Any]:
        """GeoJSON for a route that has not been stored yet."""
        points = cls.route_to_nav_points(route, dep_airport, arr_airport) if route else []
        return cls.route_geojson(dep_airport, arr_airport, points)

    @classmethod
    def pirep_geojson(cls, pirep: Pirep) -> Dict[str, Any]:
        """
        GeoJSON for a PIREP.

        Uses the stored route rows, resolving the route text only when
        none were stored. 'actual_route' holds the tracked flight path,
        or False when no positions were reported.
        """
        points: List[Union[Navdata, Acars]] = list(
            pirep.acars.filter(type=Acars.Type.ROUTE).order_by('order')
        )
        if not points and pirep.route:
            points = cls.route_to_nav_points(
                pirep.route,
                pirep.departure_airport,
                pirep.arrival_airport
            )

        geojson = cls.route_geojson(pirep.departure_airport, pirep.arrival_airport, points)
        geojson['actual_route'] = cls._actual_route(pirep)
        return geojson

    @classmethod
    def _actual_route(cls, pirep: Pirep) -> Union[Dict[str, Any], bool]:
        positions = pirep.acars.filter(
            type=Acars.Type.FLIGHT_PATH,
            latitude__isnull=False,
            longitude__isnull=False,
        ).order_by('order', 'created_at')

        line_coords = [[p.longitude, p.latitude] for p in positions]
        if not line_coords:
            return False

        return _feature_collection([_line_feature(line_coords)])
