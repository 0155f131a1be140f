#!/usr/bin/env python3
"""
Build the coronavirus map page.

What this does (in plain English):
- Creates a world map (folium/Leaflet) centred on (0, 0) with a default marker.
- Runs the map effect: locate the viewer, fetch per-country data, and drop
  one marker per country on the map.
- Fetches the global counters and renders them in a panel under the map.
- Writes a single self-contained HTML page (and, optionally, the country
  FeatureCollection as a web map asset).

Usage:
  python -m scripts.build_map_page --out public/index.html \
    --geojson public/countries.geojson
"""
from __future__ import annotations

import argparse
import json
import locale
from functools import partial
from pathlib import Path

import folium

from scripts.disease_api import DISEASE_API_BASE, REQUEST_TIMEOUT, fetch_countries, fetch_global_stats
from scripts.geojson_features import validate_feature_collection
from scripts.location import DEFAULT_LOCATION, LOCATION_API_URL, get_current_location
from scripts.map_feature_builder import LayerHandle, MapFeatureBuilder
from scripts.stats_panel import load_stats, render_stats_panel

DEFAULT_OUT = "public/index.html"
DEFAULT_ZOOM = 2
DEFAULT_TILES = "OpenStreetMap"
PAGE_TITLE = "Home Page"

# Marker badge + hover tooltip, and the counters panel under the map.
PAGE_CSS = """
<style>
  .folium-map { height: 70vh !important; }
  .icon-marker {
    position: relative; display: flex; align-items: center; justify-content: center;
    width: 3.6em; height: 3.6em; margin: -1.8em 0 0 -1.8em;
    color: #fff; font-size: .7em; font-weight: bold;
    background: #c62828; border: 2px solid #fff; border-radius: 50%;
    box-shadow: 0 0 6px rgba(0, 0, 0, .4);
  }
  .icon-marker-tooltip {
    display: none; position: absolute; bottom: 100%; left: 50%;
    width: 16em; margin-left: -8em; padding: .6em 1em;
    color: #222; font-weight: normal; text-align: left;
    background: #fff; border-radius: .3em; box-shadow: 0 0 6px rgba(0, 0, 0, .3);
  }
  .icon-marker-tooltip h2 { margin: 0 0 .4em; font-size: 1.2em; }
  .icon-marker-tooltip ul { margin: 0; padding: 0; list-style: none; }
  .icon-marker:hover .icon-marker-tooltip { display: block; }
  .tracker-stats { display: grid; grid-template-columns: repeat(2, 1fr); gap: .2em 1em; }
  .tracker-stat-primary { font-size: 1.4em; margin: .2em 0; }
  .tracker-stat-secondary { color: #666; margin: .2em 0; }
  .text-danger { color: #c62828; }
  .text-muted { color: #666; }
  .text-center { text-align: center; }
</style>
"""


def build_map(tiles: str = DEFAULT_TILES):
    """
    The bare map plus the default marker handle the effect will borrow.
    """
    center = DEFAULT_LOCATION.as_latlng()
    fmap = folium.Map(location=center, zoom_start=DEFAULT_ZOOM, tiles=tiles)
    marker = folium.Marker(location=center)
    marker.add_to(fmap)
    return fmap, LayerHandle(marker)


def build_page(
    api_base: str = DISEASE_API_BASE,
    timeout: float = REQUEST_TIMEOUT,
    locate: bool = True,
    tiles: str = DEFAULT_TILES,
):
    """
    Assemble the full page.

    Returns:
        tuple[folium.Map, MapFeatureBuilder]: the rendered map and the effect
        (so callers can grab its FeatureCollection).
    """
    fmap, marker = build_map(tiles=tiles)

    if locate:
        location_provider = partial(get_current_location, LOCATION_API_URL, timeout)
    else:
        location_provider = lambda: DEFAULT_LOCATION
    effect = MapFeatureBuilder(
        countries_provider=partial(fetch_countries, api_base, timeout),
        location_provider=location_provider,
    )
    effect.sync(fmap, marker)

    # The counters don't care how the map went, and vice versa.
    stats, error = load_stats(partial(fetch_global_stats, api_base, timeout))

    root = fmap.get_root()
    root.header.add_child(folium.Element(f"<title>{PAGE_TITLE}</title>"))
    root.header.add_child(folium.Element(PAGE_CSS))
    root.html.add_child(folium.Element(render_stats_panel(stats, error, effect.notices)))
    return fmap, effect


def use_user_locale() -> None:
    """
    Switch LC_TIME to the user's locale so "Last Update" reads the way they
    expect. Python starts in the "C" locale until told otherwise.
    """
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as e:
        print(f"[WARN] Could not use the system locale for dates ({e}); falling back to C")


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--out", dest="out_path", default=DEFAULT_OUT, help="Output HTML path (e.g., public/index.html)")
    ap.add_argument("--geojson", dest="geojson_path", help="Optional path for the country FeatureCollection")
    ap.add_argument("--api-base", default=DISEASE_API_BASE, help="disease.sh API root")
    ap.add_argument("--timeout", type=float, default=REQUEST_TIMEOUT, help="Per-request timeout in seconds")
    ap.add_argument("--no-locate", action="store_true", help="Skip the location lookup and start at (0, 0)")
    ap.add_argument("--tiles", default=DEFAULT_TILES, help="Base map tiles")
    args = ap.parse_args()

    use_user_locale()

    fmap, effect = build_page(
        api_base=args.api_base,
        timeout=args.timeout,
        locate=not args.no_locate,
        tiles=args.tiles,
    )

    out_path = Path(args.out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fmap.save(str(out_path))
    print(f"[OK] wrote {out_path}")

    if args.geojson_path:
        if effect.feature_collection is None:
            print("[WARN] No country features to write; skipping GeoJSON")
        else:
            geojson_path = Path(args.geojson_path)
            geojson_path.parent.mkdir(parents=True, exist_ok=True)
            data = validate_feature_collection(effect.feature_collection)
            geojson_path.write_text(json.dumps(data), encoding="utf-8")
            print(f"[OK] wrote {geojson_path}")


if __name__ == "__main__":
    main()
