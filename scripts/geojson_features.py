"""
Country records -> GeoJSON FeatureCollection

What this does (in plain English):
- Every country record from the API becomes one Point feature.
- All of the record's fields ride along as the feature's properties, so the
  marker layer can read cases/deaths/etc. straight off the feature.
- Coordinates come from countryInfo.lat / countryInfo.long and are written
  in GeoJSON order: [longitude, latitude].

Notes & guardrails:
- We never drop a record here. A country without lat/long still yields a
  feature (with [None, None]); the marker layer is where we skip those.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

import pandas as pd


def country_to_feature(country: Optional[dict]) -> dict:
    """
    Wrap a single CountryRecord as a GeoJSON Point feature.
    """
    country = country or {}
    info = country.get("countryInfo") or {}
    lat = info.get("lat")
    lng = info.get("long")
    return {
        "type": "Feature",
        "properties": dict(country),
        "geometry": {"type": "Point", "coordinates": [lng, lat]},
    }


def to_feature_collection(countries: Iterable[dict]) -> dict:
    """
    Convert the country list into a FeatureCollection (one feature per record).
    """
    return {
        "type": "FeatureCollection",
        "features": [country_to_feature(c) for c in countries],
    }


def _is_coordinate(value) -> bool:
    if isinstance(value, bool) or not pd.api.types.is_number(value):
        return False
    return not pd.isna(value)


def feature_latlng(feature: dict) -> Optional[List[float]]:
    """
    Pull a folium-friendly [lat, lng] out of a Point feature.

    Returns:
        list[float] | None: None when either coordinate is missing or not a number.
    """
    coords = ((feature or {}).get("geometry") or {}).get("coordinates") or []
    if len(coords) != 2:
        return None
    lng, lat = coords
    if not (_is_coordinate(lat) and _is_coordinate(lng)):
        return None
    return [float(lat), float(lng)]


def validate_feature_collection(data) -> dict:
    """
    Minimal validation before we hand a collection to the map or write it out.
    """
    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise SystemExit("Input must be a GeoJSON FeatureCollection")
    if not isinstance(data.get("features"), list):
        raise SystemExit("FeatureCollection has no features list")
    return data
