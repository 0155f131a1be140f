import folium
import pytest

from scripts.disease_api import CountryFetchError
from scripts.location import Location, LocationLookupError
from scripts.map_feature_builder import COUNTRY_DATA_NOTICE, LayerHandle, MapFeatureBuilder


def make_page():
    fmap = folium.Map(location=[0, 0], zoom_start=2)
    marker = folium.Marker(location=[5, 5])
    marker.add_to(fmap)
    return fmap, LayerHandle(marker)


def groups_on(fmap):
    return [c for c in fmap._children.values() if isinstance(c, folium.FeatureGroup)]


def markers_in(layer):
    return [c for c in layer._children.values() if isinstance(c, folium.Marker)]


def failing_location():
    raise LocationLookupError("blocked")


def test_layer_handle_moves_marker():
    marker = folium.Marker(location=[5, 5])
    handle = LayerHandle(marker)
    handle.set_lat_lng(Location(lat=1, lng=2))
    assert handle.location == [1.0, 2.0]
    assert list(marker.location) == [1.0, 2.0]


def test_layer_handle_tracks_position_for_popup():
    handle = LayerHandle(folium.Popup(max_width=800))
    assert handle.location is None
    handle.set_lat_lng(Location(lat=3, lng=4))
    assert handle.location == [3.0, 4.0]


def test_run_adds_one_layer_with_country_markers(countries):
    fmap, marker = make_page()
    effect = MapFeatureBuilder(lambda: countries, lambda: Location(41.9, 12.5))

    layer = effect.sync(fmap, marker)

    assert groups_on(fmap) == [layer]
    assert len(markers_in(layer)) == 2
    assert len(effect.feature_collection["features"]) == 2
    assert effect.notices == []
    assert marker.location == [41.9, 12.5]
    assert effect.popup.location == [41.9, 12.5]


def test_location_failure_positions_marker_and_popup_at_origin(countries):
    fmap, marker = make_page()
    effect = MapFeatureBuilder(lambda: countries, failing_location)

    effect.sync(fmap, marker)

    assert marker.location == [0.0, 0.0]
    assert list(marker.element.location) == [0.0, 0.0]
    assert effect.popup.location == [0.0, 0.0]


@pytest.mark.parametrize("payload", [[], None, {"country": "Italy"}, "oops"])
def test_empty_or_malformed_payload_adds_no_markers(payload, capsys):
    fmap, marker = make_page()
    effect = MapFeatureBuilder(lambda: payload, failing_location)

    assert effect.sync(fmap, marker) is None
    assert groups_on(fmap) == []
    assert effect.feature_collection is None
    assert effect.notices == [COUNTRY_DATA_NOTICE]
    assert "[WARN] Country payload was empty or not a list" in capsys.readouterr().out


def test_country_fetch_error_is_logged_and_noticed(capsys):
    def boom():
        raise CountryFetchError("503 Server Error")

    fmap, marker = make_page()
    effect = MapFeatureBuilder(boom, failing_location)

    assert effect.sync(fmap, marker) is None
    assert groups_on(fmap) == []
    assert effect.notices == [COUNTRY_DATA_NOTICE]
    assert "[ERROR] Failed to fetch countries: 503 Server Error" in capsys.readouterr().out
    # the default marker still moved before the fetch
    assert marker.location == [0.0, 0.0]


@pytest.mark.parametrize("ready", [(True, False), (False, True), (False, False)])
def test_sync_waits_for_map_and_marker(ready, countries):
    calls = []
    fmap, marker = make_page()
    effect = MapFeatureBuilder(lambda: calls.append(1) or countries, failing_location)

    assert effect.sync(fmap if ready[0] else None, marker if ready[1] else None) is None
    assert calls == []


def test_sync_runs_once_per_identity_pair(countries):
    calls = []
    fmap, marker = make_page()
    effect = MapFeatureBuilder(lambda: calls.append(1) or countries, failing_location)

    first = effect.sync(fmap, marker)
    again = effect.sync(fmap, marker)
    assert first is again
    assert len(calls) == 1
    assert len(groups_on(fmap)) == 1


def test_sync_reruns_when_marker_identity_changes(countries):
    calls = []
    fmap, marker = make_page()
    effect = MapFeatureBuilder(lambda: calls.append(1) or countries, failing_location)

    effect.sync(fmap, marker)
    other = LayerHandle(folium.Marker(location=[7, 7]))
    effect.sync(fmap, other)

    assert len(calls) == 2
    assert other.location == [0.0, 0.0]


def test_teardown_mid_fetch_discards_results(countries, capsys):
    fmap, marker = make_page()
    effect = MapFeatureBuilder(None, failing_location)

    def slow_fetch():
        # page goes away while the request is in flight
        effect.teardown()
        return countries

    effect.countries_provider = slow_fetch
    assert effect.sync(fmap, marker) is None
    assert groups_on(fmap) == []
    assert effect.layer is None
    assert "discarding results" in capsys.readouterr().out


def test_teardown_during_location_lookup_leaves_marker_alone(countries):
    fmap, marker = make_page()
    effect = MapFeatureBuilder(lambda: countries, None)

    def slow_location():
        effect.teardown()
        return Location(9, 9)

    effect.location_provider = slow_location
    assert effect.sync(fmap, marker) is None
    assert list(marker.location) == [5.0, 5.0]
    assert groups_on(fmap) == []
