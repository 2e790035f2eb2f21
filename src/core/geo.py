"""Great-circle distance between coordinates."""

from math import atan2, cos, radians, sin, sqrt

from src.core.config import Constants
from src.domain.coordinate import Coordinate


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance in meters using the mean Earth radius."""
    lat1 = radians(a.latitude)
    lat2 = radians(b.latitude)
    dlat = lat2 - lat1
    dlon = radians(b.longitude - a.longitude)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    h = min(1.0, h)  # rounding can push antipodal points past 1
    return Constants.EARTH_RADIUS_METERS * 2 * atan2(sqrt(h), sqrt(1 - h))
