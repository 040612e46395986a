"""Geofence math.

Great-circle distance on a spherical earth (haversine). Accurate to well
under a meter for the tens-to-hundreds of meters a classroom geofence spans.
Coordinates are range checked by request validation before they get here.
"""
import math

from rollcall.core.constants import EARTH_RADIUS_METERS


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two GPS points in meters."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(delta_lon / 2) ** 2)
    # Rounding can push a slightly above 1 for antipodal points
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def within_radius(distance: float, radius: float) -> bool:
    """Inclusive radius test: a point exactly on the boundary is inside."""
    return distance <= radius
