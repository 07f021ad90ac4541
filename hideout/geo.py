"""
Geospatial helpers for the game.

Distances are great-circle miles on a spherical Earth; bearings are radians
clockwise from true north.
"""

import math

from hideout.models import Coordinate

EARTH_RADIUS_MILES = 3959.0
MILES_PER_DEGREE_LAT = 69.0


def distance_miles(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in miles between two coordinates (haversine)."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(min(1.0, h)))


def initial_bearing(origin: Coordinate, target: Coordinate) -> float:
    """
    Calculate the initial bearing from one coordinate toward another.

    Returns:
        Bearing in radians, normalized to [0, 2*pi)
    """
    lat1 = math.radians(origin.lat)
    lat2 = math.radians(target.lat)
    dlon = math.radians(target.lon - origin.lon)

    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    return math.atan2(y, x) % (2 * math.pi)


def destination(origin: Coordinate, bearing: float, miles: float) -> Coordinate:
    """
    Travel a great-circle arc from a coordinate.

    Args:
        origin: Starting coordinate
        bearing: Direction of travel in radians clockwise from north
        miles: Distance to travel

    Returns:
        The coordinate reached
    """
    angular = miles / EARTH_RADIUS_MILES
    lat1 = math.radians(origin.lat)
    lon1 = math.radians(origin.lon)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular)
        + math.cos(lat1) * math.sin(angular) * math.cos(bearing)
    )
    lon2 = lon1 + math.atan2(
        math.sin(bearing) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )
    return Coordinate(
        lat=math.degrees(lat2),
        lon=_normalize_lon(math.degrees(lon2)),
    )


def offset_flat(center: Coordinate, bearing: float, miles: float) -> Coordinate:
    """
    Project a short offset using the miles/69 degrees-of-latitude approximation.

    Longitude degrees shrink with latitude, so the east-west component is
    scaled by cos(lat). Good enough for the sub-mile hops the seeker makes.
    """
    degrees = miles / MILES_PER_DEGREE_LAT
    lat = center.lat + degrees * math.cos(bearing)
    lon_scale = max(math.cos(math.radians(center.lat)), 1e-6)
    lon = center.lon + degrees * math.sin(bearing) / lon_scale
    return Coordinate(lat=max(-90.0, min(90.0, lat)), lon=_normalize_lon(lon))


def is_valid_coordinate(coordinate: Coordinate) -> bool:
    """Check that a coordinate is finite and within lat/lon bounds."""
    return (
        math.isfinite(coordinate.lat)
        and math.isfinite(coordinate.lon)
        and -90.0 <= coordinate.lat <= 90.0
        and -180.0 <= coordinate.lon <= 180.0
    )


def format_coordinate(coordinate: Coordinate) -> str:
    """Format a coordinate for display."""
    return f"({coordinate.lat:.4f}, {coordinate.lon:.4f})"


def format_miles(miles: float) -> str:
    """Format a distance for display (switches to feet under a tenth of a mile)."""
    if miles < 0.1:
        return f"{miles * 5280:.0f} ft"
    return f"{miles:.2f} mi"


def _normalize_lon(lon: float) -> float:
    while lon > 180.0:
        lon -= 360.0
    while lon < -180.0:
        lon += 360.0
    return lon
