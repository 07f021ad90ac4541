"""
Map view snapshots.

A map surface only needs a center, a zoom level, marker coordinates and a
bounding box; this module derives them from the hideout and seeker.
"""

import math

from hideout.geo import MILES_PER_DEGREE_LAT
from hideout.models import Address, Coordinate, MapView

# (min_lon, min_lat, max_lon, max_lat), zoom
REGION_BOUNDS: dict[str, tuple[tuple[float, float, float, float], int]] = {
    "New York": ((-80.0, 35.0, -70.0, 45.0), 8),
    "San Francisco": ((-125.0, 35.0, -115.0, 40.0), 9),
    "London": ((-5.0, 50.0, 2.0, 52.0), 10),
    "Tokyo": ((135.0, 33.0, 145.0, 38.0), 8),
    "Paris": ((0.0, 47.0, 5.0, 50.0), 9),
    "Sydney": ((145.0, -38.0, 155.0, -32.0), 8),
}
DEFAULT_BOUNDS = ((-125.0, 24.0, -65.0, 50.0), 6)

# Margin added around fitted markers
FIT_PADDING_MILES = 0.5
MAX_ZOOM = 16


def region_bounds(city_name: str) -> tuple[tuple[float, float, float, float], int]:
    """Bounding box and zoom for a city, matched by case-insensitive substring."""
    clean = city_name.lower()
    for key, value in REGION_BOUNDS.items():
        if key.lower() in clean:
            return value
    return DEFAULT_BOUNDS


def bbox_around(center: Coordinate, radius_miles: float) -> tuple[float, float, float, float]:
    """Square-ish box of `radius_miles` around a point."""
    dlat = radius_miles / MILES_PER_DEGREE_LAT
    dlon = dlat / max(math.cos(math.radians(center.lat)), 1e-6)
    return (center.lon - dlon, center.lat - dlat, center.lon + dlon, center.lat + dlat)


def zoom_for_span(span_degrees: float) -> int:
    """Web-map zoom level that shows roughly `span_degrees` of longitude."""
    if span_degrees <= 0:
        return MAX_ZOOM
    return max(1, min(MAX_ZOOM, int(math.log2(360.0 / span_degrees))))


def build_view(
    hideout: Address | None,
    seeker: Address | None,
    city: Address | None = None,
) -> MapView | None:
    """
    Build the map view for the current game.

    Fits both markers when hideout and seeker are known; otherwise falls
    back to the named region of the city or hideout.
    """
    anchor = hideout or city
    if anchor is None:
        return None

    markers = [a.coordinate for a in (hideout, seeker) if a is not None]
    if len(markers) > 1:
        lats = [m.lat for m in markers]
        lons = [m.lon for m in markers]
        center = Coordinate(lat=(min(lats) + max(lats)) / 2, lon=(min(lons) + max(lons)) / 2)
        pad = bbox_around(center, FIT_PADDING_MILES)
        pad_lat = (pad[3] - pad[1]) / 2
        pad_lon = (pad[2] - pad[0]) / 2
        bbox = (min(lons) - pad_lon, min(lats) - pad_lat, max(lons) + pad_lon, max(lats) + pad_lat)
        return MapView(center=center, zoom=zoom_for_span(bbox[2] - bbox[0]), bbox=bbox, markers=markers)

    bbox, zoom = region_bounds((city or anchor).label)
    return MapView(center=anchor.coordinate, zoom=zoom, bbox=bbox, markers=markers)
