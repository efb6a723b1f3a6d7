"""Tests for lat/lng offsets, rotation, and rectangle synthesis."""

from __future__ import annotations

import math

import pytest

from greenquote.lawn_engine.area import compute_area
from greenquote.lawn_engine.geo import (
    METERS_PER_DEG_LAT,
    GeoPoint,
    clamp_latitude,
    offset_point,
    rectangle_around,
    rotate_around_point,
    wrap_longitude,
)

CENTER = GeoPoint(40.0, -75.0)


def _close(a: GeoPoint, b: GeoPoint, tol: float = 1e-9) -> bool:
    return abs(a.latitude - b.latitude) < tol and abs(a.longitude - b.longitude) < tol


def _side_m(a: GeoPoint, b: GeoPoint) -> float:
    north = (b.latitude - a.latitude) * METERS_PER_DEG_LAT
    east = (b.longitude - a.longitude) * METERS_PER_DEG_LAT * math.cos(math.radians(CENTER.latitude))
    return math.hypot(north, east)


class TestGeoPoint:
    def test_from_maps_dict(self):
        p = GeoPoint.from_dict({"lat": 1.5, "lng": -2.5})
        assert p == GeoPoint(1.5, -2.5)

    def test_from_long_keys(self):
        p = GeoPoint.from_dict({"latitude": 1.5, "longitude": -2.5})
        assert p.to_dict() == {"lat": 1.5, "lng": -2.5}


class TestOffsetPoint:
    def test_one_degree_north(self):
        p = offset_point(CENTER, 0, METERS_PER_DEG_LAT)
        assert p.latitude == pytest.approx(41.0)
        assert p.longitude == pytest.approx(-75.0)

    def test_east_scaled_by_latitude(self):
        p = offset_point(CENTER, 90, 1000)
        expected = 1000 / (METERS_PER_DEG_LAT * math.cos(math.radians(40.0)))
        assert p.latitude == pytest.approx(40.0)
        assert p.longitude - CENTER.longitude == pytest.approx(expected)

    def test_south_is_negative_north(self):
        south = offset_point(CENTER, 180, 50)
        back = offset_point(CENTER, 0, -50)
        assert _close(south, back)

    def test_zero_distance(self):
        assert _close(offset_point(CENTER, 123, 0), CENTER)


class TestRotateAroundPoint:
    def test_full_turn_is_identity(self):
        pts = rectangle_around(CENTER, 8_000, 1.3)
        rotated = rotate_around_point(pts, CENTER, 360)
        assert all(_close(a, b) for a, b in zip(pts, rotated))

    def test_zero_is_identity(self):
        pts = rectangle_around(CENTER, 8_000, 1.3)
        assert all(_close(a, b) for a, b in zip(pts, rotate_around_point(pts, CENTER, 0)))

    def test_quarter_turn_is_clockwise(self):
        """A point 100 m north ends up 100 m east after +90°."""
        north = offset_point(CENTER, 0, 100)
        [rotated] = rotate_around_point([north], CENTER, 90)
        assert _close(rotated, offset_point(CENTER, 90, 100))

    def test_preserves_count_and_order(self):
        pts = [offset_point(CENTER, b, 30) for b in (0, 90, 180, 270, 45)]
        rotated = rotate_around_point(pts, CENTER, 45)
        assert len(rotated) == 5
        assert _close(rotated[0], pts[4])

    def test_empty(self):
        assert rotate_around_point([], CENTER, 90) == []


class TestRectangleAround:
    @pytest.mark.parametrize("sqft,ratio", [(2_400, 2.5), (5_600, 1.2), (15_000, 1.3)])
    def test_area_matches_target(self, sqft, ratio):
        assert compute_area(rectangle_around(CENTER, sqft, ratio)) == pytest.approx(sqft, rel=0.005)

    def test_aspect_ratio(self):
        sw, se, ne, _nw = rectangle_around(CENTER, 10_000, 2.5)
        width = _side_m(sw, se)
        height = _side_m(se, ne)
        assert width / height == pytest.approx(2.5, rel=1e-6)

    def test_unrotated_corner_order(self):
        sw, se, ne, nw = rectangle_around(CENTER, 10_000, 1.5)
        assert sw.latitude < nw.latitude
        assert sw.longitude < se.longitude
        assert ne.latitude == pytest.approx(nw.latitude)

    @pytest.mark.parametrize("rotation", [0, 45, 90, 180, 270, 333])
    def test_rotation_preserves_area(self, rotation):
        base = compute_area(rectangle_around(CENTER, 8_000, 1.3))
        rotated = compute_area(rectangle_around(CENTER, 8_000, 1.3, rotation))
        assert rotated == pytest.approx(base, rel=0.001)

    def test_rotation_keeps_right_angles(self):
        a, b, c, _d = rectangle_around(CENTER, 8_000, 1.3, 30)
        ab = _side_m(a, b)
        bc = _side_m(b, c)
        ac = _side_m(a, c)
        assert ab ** 2 + bc ** 2 == pytest.approx(ac ** 2, rel=1e-6)

    def test_bad_aspect_ratio(self):
        with pytest.raises(ValueError):
            rectangle_around(CENTER, 1_000, 0)


class TestWrapping:
    @pytest.mark.parametrize("lng,expected", [
        (-75.0, -75.0), (180.0, -180.0), (180.5, -179.5), (-180.5, 179.5), (540.0, -180.0),
    ])
    def test_wrap_longitude(self, lng, expected):
        assert wrap_longitude(lng) == pytest.approx(expected)

    def test_clamp_latitude(self):
        assert clamp_latitude(90.0002) == 90.0
        assert clamp_latitude(-91) == -90.0
        assert clamp_latitude(45.5) == 45.5

    def test_offset_across_antimeridian(self):
        p = offset_point(GeoPoint(0.0, 179.9999), 90, 100)
        assert -180 <= p.longitude < -179.99

    def test_offset_past_pole_stays_valid(self):
        assert offset_point(GeoPoint(89.9999, 0.0), 0, 100).latitude == 90.0

    def test_rectangle_across_antimeridian(self):
        center = GeoPoint(-16.5, 179.9999)
        corners = rectangle_around(center, 8_000, 1.3, 180)
        assert all(-180 <= c.longitude < 180 for c in corners)
        assert compute_area(corners) == pytest.approx(8_000, rel=0.005)
