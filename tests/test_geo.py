"""Tests for hideout.geo module."""

import math

import pytest

from hideout.geo import (
    destination,
    distance_miles,
    format_miles,
    initial_bearing,
    is_valid_coordinate,
    offset_flat,
)
from hideout.models import Coordinate

NEW_YORK = Coordinate(lat=40.7128, lon=-74.0060)
LONDON = Coordinate(lat=51.5074, lon=-0.1278)


class TestDistanceMiles:
    @pytest.mark.parametrize("point", [NEW_YORK, LONDON, Coordinate(lat=0.0, lon=0.0), Coordinate(lat=-89.9, lon=179.9)])
    def test_zero_for_same_point(self, point: Coordinate):
        assert distance_miles(point, point) == 0

    def test_symmetric(self):
        assert distance_miles(NEW_YORK, LONDON) == distance_miles(LONDON, NEW_YORK)

    def test_new_york_to_london(self):
        assert distance_miles(NEW_YORK, LONDON) == pytest.approx(3461, abs=10)

    def test_hundredth_degree_of_latitude(self):
        d = distance_miles(Coordinate(lat=40.0, lon=-75.0), Coordinate(lat=40.01, lon=-75.0))
        assert d == pytest.approx(0.691, abs=0.005)

    def test_antipodes_do_not_overflow(self):
        d = distance_miles(Coordinate(lat=0.0, lon=0.0), Coordinate(lat=0.0, lon=180.0))
        assert d == pytest.approx(math.pi * 3959)


class TestBearingAndDestination:
    def test_due_north(self):
        assert initial_bearing(Coordinate(lat=40.0, lon=-75.0), Coordinate(lat=41.0, lon=-75.0)) == pytest.approx(0.0)

    def test_due_east_on_equator(self):
        b = initial_bearing(Coordinate(lat=0.0, lon=0.0), Coordinate(lat=0.0, lon=1.0))
        assert b == pytest.approx(math.pi / 2)

    def test_destination_travels_requested_distance(self):
        start = Coordinate(lat=40.0, lon=-75.0)
        end = destination(start, math.radians(37), 2.5)
        assert distance_miles(start, end) == pytest.approx(2.5, rel=1e-6)

    def test_destination_toward_target_gets_closer(self):
        start = Coordinate(lat=40.0, lon=-75.0)
        target = Coordinate(lat=40.2, lon=-74.8)
        moved = destination(start, initial_bearing(start, target), 1.0)
        assert distance_miles(moved, target) == pytest.approx(distance_miles(start, target) - 1.0, abs=0.01)


class TestOffsetFlat:
    def test_zero_offset(self):
        start = Coordinate(lat=40.0, lon=-75.0)
        assert offset_flat(start, 1.0, 0.0) == start

    def test_offset_is_roughly_requested_distance(self):
        start = Coordinate(lat=40.0, lon=-75.0)
        for bearing in (0.0, 1.0, 2.5, 4.0, 5.5):
            assert distance_miles(start, offset_flat(start, bearing, 0.5)) == pytest.approx(0.5, rel=0.01)


class TestValidity:
    def test_valid(self):
        assert is_valid_coordinate(NEW_YORK)

    @pytest.mark.parametrize("lat, lon", [(91.0, 0.0), (0.0, -181.0), (float("nan"), 0.0), (0.0, float("inf"))])
    def test_invalid(self, lat, lon):
        assert not is_valid_coordinate(Coordinate(lat=lat, lon=lon))

    def test_format_miles(self):
        assert format_miles(2.0) == "2.00 mi"
        assert format_miles(0.05) == "264 ft"
