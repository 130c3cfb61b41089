"""Geodesy primitives: distance, bearing, projection and validity checks."""

from ridehail.geo.coordinate import Coordinate, is_valid_coordinate
from ridehail.geo.distance import (
    EARTH_RADIUS_M,
    bearing_deg,
    destination,
    distance_m,
    haversine_distance_km,
    haversine_distance_m,
    random_point,
)

__all__ = [
    "Coordinate",
    "EARTH_RADIUS_M",
    "bearing_deg",
    "destination",
    "distance_m",
    "haversine_distance_km",
    "haversine_distance_m",
    "is_valid_coordinate",
    "random_point",
]
