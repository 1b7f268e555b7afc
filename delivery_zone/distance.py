"""Great-circle distance between coordinates."""

from math import atan2, cos, radians, sin, sqrt

from delivery_zone.geometry.shapes import Coordinate

# Mean radius of Earth in metres.
EARTH_RADIUS_M = 6371000.0


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the haversine distance in metres between two lat/lon points."""
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push a a hair past 1 for antipodal points
    a = min(1.0, a)
    return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))


def distance_between(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance in metres between two Coordinates."""
    return calculate_distance(a.latitude, a.longitude, b.latitude, b.longitude)
