"""Great-circle helpers shared by clustering, zones and routing."""

import math

from calmwalk.core.constants import EARTH_RADIUS_M

# Compass sectors of 45 degrees, clockwise from north
_DIRECTIONS = (
    "north",
    "northeast",
    "east",
    "southeast",
    "south",
    "southwest",
    "west",
    "northwest",
)


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return great-circle distance in meters between two WGS84 points.

    Uses the standard haversine formula. The intermediate term is clamped to
    [0, 1] so rounding error on antipodal points cannot yield NaN.
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance_m(a, b) -> float:
    """Distance in meters between two objects exposing latitude/longitude."""
    return haversine_m(a.latitude, a.longitude, b.latitude, b.longitude)


def within_radius(center, point, radius_m: float) -> bool:
    """True when `point` is inside or on the boundary of the circle."""
    return distance_m(center, point) <= radius_m


def bearing_direction(start, end) -> str:
    """Compass direction (8 sectors) from `start` to `end`.

    The angle is atan2(dlon, dlat) on raw degrees, which is good enough for
    the short hops of a walking route.
    """
    angle = math.degrees(math.atan2(end.longitude - start.longitude, end.latitude - start.latitude))
    sector = int(math.floor((angle + 22.5) / 45.0)) % 8
    return _DIRECTIONS[sector]
