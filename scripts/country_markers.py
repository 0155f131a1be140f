"""
Country features -> folium markers

Each feature becomes a Leaflet marker with a DivIcon. The icon is a small
badge with the (compressed) case count; hovering it shows a tooltip with the
country name, confirmed/deaths/recovered and the last update time.

The tooltip itself is pure CSS (see PAGE_CSS in build_map_page), so all we
emit here is HTML.
"""
from __future__ import annotations

from datetime import datetime
from html import escape
from typing import List, Optional

import folium
import pandas as pd

from scripts.geojson_features import feature_latlng

LAYER_NAME = "Countries"


def _is_number(value) -> bool:
    if isinstance(value, bool) or not pd.api.types.is_number(value):
        return False
    return not pd.isna(value)


def format_cases(cases) -> str:
    """
    Badge text for a case count.

    Anything over 1000 loses its last three digits and gets a "k+" suffix
    (so 12345 -> "12k+"). Smaller counts are shown as-is.
    """
    if not _is_number(cases):
        return "-"
    if isinstance(cases, float) and cases.is_integer():
        cases = int(cases)
    cases_string = f"{cases}"
    if cases > 1000:
        cases_string = f"{cases_string[:-3]}k+"
    return cases_string


def format_updated(updated) -> Optional[str]:
    """
    Render the API's `updated` timestamp (epoch ms) in the local locale's
    date/time format. Returns None if there's nothing sensible to show
    (0 counts as "not set").

    The locale comes from LC_TIME; build_map_page.main() picks up the
    user's setting before anything is rendered.
    """
    if not _is_number(updated) or not updated:
        return None
    try:
        ts = pd.to_datetime(updated, unit="ms", utc=True)
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return datetime.fromtimestamp(ts.timestamp()).strftime("%c")


def _text(value) -> str:
    return escape("-" if value is None else str(value))


def marker_html(properties: dict) -> str:
    """
    Build the DivIcon HTML for one country: tooltip block + case badge.
    """
    properties = properties or {}
    updated = format_updated(properties.get("updated"))

    items = [
        f"<li><strong>Confirmed:</strong> {_text(properties.get('cases'))}</li>",
        f"<li><strong>Deaths:</strong> {_text(properties.get('deaths'))}</li>",
        f"<li><strong>Recovered:</strong> {_text(properties.get('recovered'))}</li>",
    ]
    if updated:
        items.append(f"<li><strong>Last Update:</strong> {escape(updated)}</li>")

    return (
        '<span class="icon-marker">'
        '<span class="icon-marker-tooltip">'
        f"<h2>{_text(properties.get('country'))}</h2>"
        f"<ul>{''.join(items)}</ul>"
        "</span>"
        f"{escape(format_cases(properties.get('cases')))}"
        "</span>"
    )


def point_to_layer(feature: dict, latlng: List[float]) -> folium.Marker:
    """
    Marker for one feature at `latlng` ([lat, lng], folium order).
    """
    properties = (feature or {}).get("properties") or {}
    return folium.Marker(
        location=latlng,
        icon=folium.DivIcon(class_name="icon", html=marker_html(properties)),
        rise_on_hover=True,
    )


def build_country_layer(feature_collection: dict, name: str = LAYER_NAME) -> folium.FeatureGroup:
    """
    Turn the whole FeatureCollection into a single layer of markers.

    Features without usable coordinates stay in the collection but don't get
    a marker (Leaflet would choke on them).
    """
    layer = folium.FeatureGroup(name=name)
    skipped = []

    for feature in feature_collection.get("features", []):
        latlng = feature_latlng(feature)
        if latlng is None:
            skipped.append((feature.get("properties") or {}).get("country", "unknown"))
            continue
        point_to_layer(feature, latlng).add_to(layer)

    if skipped:
        print(f"[WARN] Skipped {len(skipped)} features without coordinates: {', '.join(map(str, skipped))}")
    return layer
