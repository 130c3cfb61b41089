"""Centralized geographic calculations on a spherical Earth.

Distances use the Haversine formula, headings the forward-azimuth formula,
and projection the direct geodesic problem on a sphere of radius
``EARTH_RADIUS_M``. Used by the fleet simulator for dead-reckoning driver
movement and by the fare model and booking orchestrator for trip distances.
"""

import random
from math import asin, atan2, cos, degrees, radians, sin, sqrt

from ridehail.geo.coordinate import Coordinate

EARTH_RADIUS_M = 6_371_000  # Earth radius in meters


def haversine_distance_m(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate the great-circle distance between two points in meters.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees

    Returns:
        Distance between the two points in meters
    """
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_M * c


def haversine_distance_km(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Great-circle distance in kilometers; wrapper around haversine_distance_m."""
    return haversine_distance_m(lat1, lon1, lat2, lon2) / 1000.0


def distance_m(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters between two coordinates."""
    return haversine_distance_m(a[0], a[1], b[0], b[1])


def bearing_deg(origin: Coordinate, target: Coordinate) -> float:
    """Initial bearing from ``origin`` to ``target``.

    Returns:
        Compass heading in degrees clockwise from north, in [0, 360).
    """
    lat1, lon1 = radians(origin[0]), radians(origin[1])
    lat2, lon2 = radians(target[0]), radians(target[1])

    dlon = lon2 - lon1

    y = sin(dlon) * cos(lat2)
    x = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlon)

    return (degrees(atan2(y, x)) + 360) % 360


def destination(origin: Coordinate, distance: float, bearing: float) -> Coordinate:
    """Project ``origin`` by ``distance`` meters along ``bearing`` degrees.

    Solves the direct geodesic problem on a sphere. The resulting longitude
    is normalised into [-180, 180).
    """
    lat1, lon1 = radians(origin[0]), radians(origin[1])
    theta = radians(bearing)
    delta = distance / EARTH_RADIUS_M

    lat2 = asin(sin(lat1) * cos(delta) + cos(lat1) * sin(delta) * cos(theta))
    lon2 = lon1 + atan2(
        sin(theta) * sin(delta) * cos(lat1),
        cos(delta) - sin(lat1) * sin(lat2),
    )

    longitude = (degrees(lon2) + 540.0) % 360.0 - 180.0
    return Coordinate(degrees(lat2), longitude)


def random_point(
    center: Coordinate,
    radius_m: float,
    rng: random.Random | None = None,
) -> Coordinate:
    """Sample a point at most ``radius_m`` meters from ``center``.

    Distance and bearing are drawn independently and uniformly, so samples
    cluster towards the center (uniform in distance, not in area).
    """
    rng = rng or random
    sampled_distance = rng.uniform(0.0, radius_m)
    sampled_bearing = rng.uniform(0.0, 360.0)
    return destination(center, sampled_distance, sampled_bearing)

