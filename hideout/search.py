"""
Location search against the Nominatim geocoding service.

Used to pick a hideout. Any failure (network, HTTP status, bad payload)
yields an empty result list instead of an exception.
"""

import logging
from typing import Any

import requests
from pydantic import ValidationError

from hideout.config import DEFAULT_NOMINATIM_URL, DEFAULT_USER_AGENT
from hideout.models import Address, AddressKind, Coordinate

logger = logging.getLogger(__name__)

# Place types that make sense as a hideout area
SETTLEMENT_TYPES = {
    "city",
    "town",
    "village",
    "hamlet",
    "suburb",
    "locality",
    "administrative",
}
MIN_IMPORTANCE = 0.3


POPULAR_LOCATIONS: list[Address] = [
    Address(
        id=name,
        label=label,
        coordinate=Coordinate(lat=lat, lon=lon),
        kind=AddressKind.CITY,
        confidence=1.0,
    )
    for name, label, lat, lon in [
        ("New York", "New York, New York, USA", 40.7128, -74.0060),
        ("London", "London, England, UK", 51.5074, -0.1278),
        ("Tokyo", "Tokyo, Japan", 35.6762, 139.6503),
        ("Paris", "Paris, France", 48.8566, 2.3522),
        ("San Francisco", "San Francisco, California, USA", 37.7749, -122.4194),
    ]
]


def find_popular(name: str) -> Address | None:
    """Find a popular location by case-insensitive name or label prefix."""
    needle = name.strip().lower()
    if not needle:
        return None
    for location in POPULAR_LOCATIONS:
        if location.id.lower() == needle or location.label.lower().startswith(needle):
            return location
    return None


def is_settlement(item: dict[str, Any]) -> bool:
    """Keep towns and cities, or anything important enough to be a landmark area."""
    display_name = str(item.get("display_name", "")).lower()
    try:
        importance = float(item.get("importance") or 0.0)
    except (TypeError, ValueError):
        importance = 0.0
    return (
        item.get("type") in SETTLEMENT_TYPES
        or "city" in display_name
        or "town" in display_name
        or importance > MIN_IMPORTANCE
    )


def to_address(item: dict[str, Any]) -> Address | None:
    """Convert one Nominatim result to an Address, or None if malformed."""
    try:
        importance = float(item.get("importance") or 0.0)
        return Address(
            id=f"osm-{item['place_id']}",
            label=str(item["display_name"]),
            coordinate=Coordinate(lat=float(item["lat"]), lon=float(item["lon"])),
            kind=AddressKind.from_place_type(item.get("type")),
            confidence=max(0.0, min(1.0, importance)),
        )
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        logger.debug(f"Skipping malformed search result {item!r}: {e}")
        return None


class NominatimSearch:
    """Text search for places, filtered to settlements."""

    def __init__(
        self,
        base_url: str = DEFAULT_NOMINATIM_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 10.0,
        limit: int = 10,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.limit = limit
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent)

    def search(self, text: str) -> list[Address]:
        """
        Search for places matching free text.

        Args:
            text: The query, e.g. a city name

        Returns:
            Matching settlements in service order; empty on any failure
        """
        if not text.strip():
            return []

        params = {
            "format": "json",
            "q": text,
            "limit": self.limit,
            "addressdetails": 1,
            "dedupe": 1,
        }
        try:
            response = self.session.get(
                f"{self.base_url}/search", params=params, timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Location search for {text!r} failed: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Unexpected search payload for {text!r}: {type(data).__name__}")
            return []

        results = []
        for item in data:
            if not isinstance(item, dict) or not is_settlement(item):
                continue
            address = to_address(item)
            if address is not None:
                results.append(address)

        logger.debug(f"Search {text!r} returned {len(results)} of {len(data)} results")
        return results

    def close(self) -> None:
        self.session.close()
