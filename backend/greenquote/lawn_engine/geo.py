"""
Lat/lng primitives and small local-plane transforms.

Offsets and rotations work in an equirectangular frame centred on a point:
111,320 m per degree of latitude, scaled by cos(latitude) for longitude.
That is accurate to well under a percent at lot scale, which is all the
estimator needs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from shapely import affinity
from shapely.geometry import MultiPoint

METERS_PER_DEG_LAT = 111_320.0
SQFT_PER_SQM = 10.7639


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    @classmethod
    def from_dict(cls, data: dict) -> "GeoPoint":
        """Accept ``{"lat", "lng"}`` (maps API form) or ``{"latitude", "longitude"}``."""
        if "lat" in data:
            return cls(float(data["lat"]), float(data["lng"]))
        return cls(float(data["latitude"]), float(data["longitude"]))

    def to_dict(self) -> dict:
        return {"lat": self.latitude, "lng": self.longitude}


def sqft_to_sqm(sqft: float) -> float:
    return sqft / SQFT_PER_SQM


def sqm_to_sqft(sqm: float) -> float:
    return sqm * SQFT_PER_SQM


# cos(latitude) floor so longitude scaling stays finite at the poles
_MIN_COS_LAT = 1e-6


def wrap_longitude(longitude: float) -> float:
    """Fold a longitude into [-180, 180)."""
    if -180.0 <= longitude < 180.0:
        return longitude
    return ((longitude + 180.0) % 360.0) - 180.0


def clamp_latitude(latitude: float) -> float:
    return min(max(latitude, -90.0), 90.0)


def _meters_per_deg_lng(latitude: float) -> float:
    return METERS_PER_DEG_LAT * max(math.cos(math.radians(latitude)), _MIN_COS_LAT)


def _to_local_meters(point: GeoPoint, origin: GeoPoint) -> tuple[float, float]:
    """(east, north) meters of ``point`` relative to ``origin``."""
    d_lng = wrap_longitude(point.longitude - origin.longitude)
    east = d_lng * _meters_per_deg_lng(origin.latitude)
    north = (point.latitude - origin.latitude) * METERS_PER_DEG_LAT
    return east, north


def _from_local_meters(east: float, north: float, origin: GeoPoint) -> GeoPoint:
    # results near the antimeridian or a pole stay valid coordinates
    return GeoPoint(
        latitude=clamp_latitude(origin.latitude + north / METERS_PER_DEG_LAT),
        longitude=wrap_longitude(
            origin.longitude + east / _meters_per_deg_lng(origin.latitude)
        ),
    )


def offset_point(center: GeoPoint, bearing_deg: float, distance_m: float) -> GeoPoint:
    """Move ``distance_m`` meters from ``center`` along a compass bearing.

    Bearing 0 is north, 90 east. Negative distances move the opposite way.
    """
    bearing = math.radians(bearing_deg)
    north = math.cos(bearing) * distance_m
    east = math.sin(bearing) * distance_m
    return _from_local_meters(east, north, center)


def rotate_around_point(
    points: Sequence[GeoPoint],
    center: GeoPoint,
    angle_deg: float,
) -> list[GeoPoint]:
    """Rotate points clockwise (compass sense) about ``center``.

    The rotation happens in local meters so right angles survive at any
    latitude. 360 degrees returns the input within float tolerance.
    """
    if not points:
        return []
    local = [_to_local_meters(p, center) for p in points]
    # shapely rotates counter-clockwise for positive angles
    rotated = affinity.rotate(MultiPoint(local), -angle_deg, origin=(0.0, 0.0))
    return [_from_local_meters(p.x, p.y, center) for p in rotated.geoms]


def rectangle_around(
    center: GeoPoint,
    area_sqft: float,
    aspect_ratio: float,
    rotation_deg: float = 0.0,
) -> list[GeoPoint]:
    """Four corners (SW, SE, NE, NW before rotation) of a rectangle of
    ``area_sqft`` centred on ``center``, width = height * aspect_ratio."""
    if aspect_ratio <= 0:
        raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")
    sq_meters = sqft_to_sqm(max(area_sqft, 0))
    height = math.sqrt(sq_meters / aspect_ratio)
    width = height * aspect_ratio
    half_w, half_h = width / 2, height / 2

    corners = [
        _from_local_meters(-half_w, -half_h, center),
        _from_local_meters(half_w, -half_h, center),
        _from_local_meters(half_w, half_h, center),
        _from_local_meters(-half_w, half_h, center),
    ]
    if rotation_deg % 360 != 0:
        corners = rotate_around_point(corners, center, rotation_deg)
    return corners
