"""
Map effect: drop one marker per country onto an existing folium map

What this does (in plain English):
- Waits until the page hands us both a map and the default-marker handle.
- Figures out where the viewer is (best effort, (0, 0) otherwise) and moves
  the default marker + a spare popup there.
- Pulls the per-country dataset, turns it into a FeatureCollection and adds
  a single layer of country markers to the map.

Notes & guardrails:
- The handles are owned by the page. We only borrow them to move them.
- sync() is keyed on the identity of (map, marker). Same pair again means no
  work; a new pair tears down the old run and starts over.
- Every run carries a generation token. teardown() bumps the generation, and
  a run that notices it has gone stale drops its results instead of touching
  the map.
- A failed country fetch never breaks the page. We log it and leave a short
  notice for the page to show next to the counters.
"""
from __future__ import annotations

from typing import Callable, List, Optional

import folium

from scripts.country_markers import build_country_layer
from scripts.disease_api import CountryFetchError, fetch_countries
from scripts.geojson_features import to_feature_collection
from scripts.location import Location, resolve_location

COUNTRY_DATA_NOTICE = "Country data is currently unavailable."


class LayerHandle:
    """
    A borrowed, movable reference to something the page rendered.

    Works for anything with a `location` attribute (folium.Marker); for
    elements without one (folium.Popup) we just remember the position.
    """

    def __init__(self, element, location: Optional[List[float]] = None):
        self.element = element
        self.location = location if location is not None else getattr(element, "location", None)

    def set_lat_lng(self, location: Location) -> None:
        self.location = location.as_latlng()
        if hasattr(self.element, "location"):
            self.element.location = self.location


class MapFeatureBuilder:
    def __init__(
        self,
        countries_provider: Optional[Callable[[], object]] = None,
        location_provider: Optional[Callable[[], Location]] = None,
    ):
        self.countries_provider = countries_provider or fetch_countries
        self.location_provider = location_provider
        self.popup: Optional[LayerHandle] = None
        self.feature_collection: Optional[dict] = None
        self.layer: Optional[folium.FeatureGroup] = None
        self.notices: List[str] = []
        self._generation = 0
        self._map = None
        self._marker = None

    def sync(self, fmap: Optional[folium.Map], marker: Optional[LayerHandle]):
        """
        Run the effect if the (map, marker) pair is ready and has changed.

        Returns:
            folium.FeatureGroup | None: the country layer that is on the map, if any.
        """
        if fmap is None or marker is None:
            return None
        if fmap is self._map and marker is self._marker:
            return self.layer

        self.teardown()
        self._map, self._marker = fmap, marker
        return self.run(fmap, marker)

    def teardown(self) -> None:
        """Mark any in-flight run as stale."""
        self._generation += 1

    def _is_stale(self, token: int) -> bool:
        if token != self._generation:
            print("[INFO] Map effect torn down mid-run; discarding results")
            return True
        return False

    def run(self, fmap: folium.Map, marker: LayerHandle):
        token = self._generation
        self.layer = None
        self.feature_collection = None
        self.notices = []

        location = resolve_location(self.location_provider)
        if self._is_stale(token):
            return None

        self.popup = LayerHandle(folium.Popup(max_width=800))
        marker.set_lat_lng(location)
        self.popup.set_lat_lng(location)

        try:
            data = self.countries_provider()
        except CountryFetchError as e:
            print(f"[ERROR] Failed to fetch countries: {e}")
            self.notices.append(COUNTRY_DATA_NOTICE)
            return None
        if self._is_stale(token):
            return None

        if not isinstance(data, list) or not data:
            print("[WARN] Country payload was empty or not a list; no markers added")
            self.notices.append(COUNTRY_DATA_NOTICE)
            return None

        self.feature_collection = to_feature_collection(data)
        layer = build_country_layer(self.feature_collection)
        layer.add_to(fmap)
        self.layer = layer
        print(f"[INFO] Added {len(self.feature_collection['features'])} country features to the map")
        return layer
