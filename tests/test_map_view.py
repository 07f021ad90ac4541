"""Tests for hideout.map_view module."""

import pytest

from hideout.map_view import DEFAULT_BOUNDS, build_view, region_bounds

from tests.conftest import make_address


class TestRegionBounds:
    def test_known_city(self):
        assert region_bounds("London, England, UK") == ((-5.0, 50.0, 2.0, 52.0), 10)

    def test_case_insensitive(self):
        assert region_bounds("downtown san francisco")[1] == 9

    def test_default(self):
        assert region_bounds("Springfield") == DEFAULT_BOUNDS


class TestBuildView:
    def test_nothing_selected(self):
        assert build_view(None, None) is None

    def test_hideout_only_uses_region(self):
        hideout = make_address("Paris, France", 48.8566, 2.3522)
        view = build_view(hideout, None)
        assert view.center == hideout.coordinate
        assert view.zoom == 9
        assert view.markers == [hideout.coordinate]

    def test_fits_both_markers(self):
        hideout = make_address("Hideout", 40.0, -75.0)
        seeker = make_address("Seeker", 40.05, -75.05)
        view = build_view(hideout, seeker)

        min_lon, min_lat, max_lon, max_lat = view.bbox
        for m in view.markers:
            assert min_lat < m.lat < max_lat
            assert min_lon < m.lon < max_lon
        assert view.center.lat == pytest.approx(40.025)
        assert 1 <= view.zoom <= 16
