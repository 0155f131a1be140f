"""
Best-effort "where is the viewer?" lookup

What this does (in plain English):
- Asks a public IP geolocation service for a rough lat/lng.
- If anything goes wrong (network, bad JSON, missing fields) we fall back to
  (0, 0) so the map still has somewhere to put the default marker.

Notes & guardrails:
- This is a nice-to-have. Nothing downstream should ever fail because of it.
- Location keeps the {lat, lng} field order. GeoJSON wants [lng, lat] and
  folium wants [lat, lng]; convert at the edges, never in here.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import pandas as pd
import requests

LOCATION_API_URL = "https://ipapi.co/json/"
REQUEST_TIMEOUT = 30


class LocationLookupError(Exception):
    """The location provider could not give us a usable lat/lng."""


@dataclass(frozen=True)
class Location:
    lat: float
    lng: float

    def as_latlng(self) -> list[float]:
        """[lat, lng], the order folium/Leaflet expects."""
        return [float(self.lat), float(self.lng)]


DEFAULT_LOCATION = Location(lat=0.0, lng=0.0)


def _as_number(value) -> float | None:
    try:
        if value is None or pd.isna(value):
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def get_current_location(url: str = LOCATION_API_URL, timeout: float = REQUEST_TIMEOUT) -> Location:
    """
    Look up the current location from the IP geolocation service.

    Raises:
        LocationLookupError: on any transport error, HTTP error, bad JSON,
        or a response without numeric latitude/longitude.
    """
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        raise LocationLookupError(f"Location lookup failed: {type(e).__name__}: {e}") from e

    if not isinstance(data, dict):
        raise LocationLookupError("Location lookup returned an unexpected payload")

    lat = _as_number(data.get("latitude"))
    lng = _as_number(data.get("longitude"))
    if lat is None or lng is None:
        raise LocationLookupError("Location lookup returned no coordinates")
    return Location(lat=lat, lng=lng)


def resolve_location(provider: Callable[[], Location] | None = None) -> Location:
    """
    Run the provider and swallow its failure into DEFAULT_LOCATION.

    Args:
        provider: zero-arg callable returning a Location. Defaults to
            get_current_location. Pass a stub to skip the network.

    Returns:
        Location: whatever the provider found, or (0, 0).
    """
    provider = provider or get_current_location
    try:
        return provider()
    except Exception as e:
        # Not fatal: the map just starts at (0, 0).
        reason = str(e) if isinstance(e, LocationLookupError) else f"{type(e).__name__}: {e}"
        print(f"[WARN] {reason}; using default location")
        return DEFAULT_LOCATION
