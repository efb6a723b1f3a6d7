"""
Service-area measurement.

Areas are geodesic polygon areas on a sphere of radius 6,378,137 m (the same
spherical model the maps widget measures with), converted to square feet at
10.7639 sq ft per square meter.

Self-intersecting boundaries are measured as drawn. The breakdown flags them
so a UI can warn, but the number is never "corrected".
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence

from pyproj import Geod
from shapely.geometry import LinearRing, MultiPolygon, Polygon, mapping

from greenquote.lawn_engine.errors import InvalidGeometry
from greenquote.lawn_engine.geo import GeoPoint, sqm_to_sqft

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_378_137.0

_SPHERE = Geod(a=EARTH_RADIUS_M, b=EARTH_RADIUS_M)


@dataclass(frozen=True)
class PolygonArea:
    index: int
    sq_meters: float
    sq_ft: int
    vertex_count: int
    self_intersecting: bool = False


@dataclass(frozen=True)
class SessionArea:
    total_sqft: int
    breakdown: tuple[PolygonArea, ...] = ()

    @property
    def polygon_count(self) -> int:
        return len(self.breakdown)


# ──────────────────────────────────────────────────────────────────
# SINGLE POLYGON
# ──────────────────────────────────────────────────────────────────

def _check_polygon(points: Sequence[GeoPoint]) -> list[GeoPoint]:
    points = list(points)
    if len(points) < 3:
        raise InvalidGeometry(
            f"A polygon needs at least 3 points, got {len(points)}"
        )
    for i, p in enumerate(points):
        if not (math.isfinite(p.latitude) and math.isfinite(p.longitude)):
            raise InvalidGeometry(f"Point {i + 1} has a non-finite coordinate")
        if not -90 <= p.latitude <= 90:
            raise InvalidGeometry(f"Point {i + 1} latitude {p.latitude} out of range")
        if not -180 <= p.longitude <= 180:
            raise InvalidGeometry(f"Point {i + 1} longitude {p.longitude} out of range")
    return points


def compute_area_sq_meters(polygon: Sequence[GeoPoint]) -> float:
    """Enclosed area in square meters. Degenerate rings give 0."""
    points = _check_polygon(polygon)
    lons = [p.longitude for p in points]
    lats = [p.latitude for p in points]
    area, _perimeter = _SPHERE.polygon_area_perimeter(lons, lats)
    # sign only encodes winding order
    return max(abs(area), 0.0)


def compute_area(polygon: Sequence[GeoPoint]) -> int:
    """Enclosed area in whole square feet."""
    return round(sqm_to_sqft(compute_area_sq_meters(polygon)))


def is_self_intersecting(polygon: Sequence[GeoPoint]) -> bool:
    coords = [(p.longitude, p.latitude) for p in polygon]
    if len(coords) < 3:
        return False
    return not LinearRing(coords).is_simple


# ──────────────────────────────────────────────────────────────────
# SESSION
# ──────────────────────────────────────────────────────────────────

AreaListener = Callable[[int, tuple[PolygonArea, ...]], None]


@dataclass
class ServiceAreaSession:
    """Caller-owned set of lawn polygons for one property.

    Every mutation recomputes the touched polygon and resums the total.
    Not thread-safe; one editing flow owns one session.
    """

    on_change: Optional[AreaListener] = None
    _polygons: list[list[GeoPoint]] = field(default_factory=list)
    _sq_meters: list[float] = field(default_factory=list)
    _last: SessionArea = field(default_factory=lambda: SessionArea(total_sqft=0))

    @property
    def polygons(self) -> list[tuple[GeoPoint, ...]]:
        return [tuple(p) for p in self._polygons]

    @property
    def polygon_count(self) -> int:
        return len(self._polygons)

    @property
    def total_sqft(self) -> int:
        return self._last.total_sqft

    @property
    def breakdown(self) -> tuple[PolygonArea, ...]:
        return self._last.breakdown

    # ── polygon-level edits ──

    def add_polygon(self, points: Iterable[GeoPoint], silent: bool = False) -> int:
        """Add a polygon and return its index.

        ``silent`` defers the recompute, for batch loads that finish with an
        explicit :meth:`recompute`.
        """
        points = _check_polygon(list(points))
        self._polygons.append(points)
        self._sq_meters.append(compute_area_sq_meters(points))
        logger.debug("Added polygon %d (%d vertices)", len(self._polygons) - 1, len(points))
        if not silent:
            self.recompute()
        return len(self._polygons) - 1

    def remove_polygon(self, index: int) -> None:
        self._check_index(index)
        del self._polygons[index]
        del self._sq_meters[index]
        self.recompute()

    def clear(self) -> None:
        self._polygons.clear()
        self._sq_meters.clear()
        self.recompute()

    def replace_with_drawing(self, points: Iterable[GeoPoint]) -> int:
        """Drop every polygon (e.g. auto-estimated ones) and keep only a
        hand-drawn boundary."""
        points = _check_polygon(list(points))
        self._polygons.clear()
        self._sq_meters.clear()
        return self.add_polygon(points)

    # ── vertex-level edits ──

    def insert_vertex(self, polygon_index: int, vertex_index: int, point: GeoPoint) -> None:
        self._check_index(polygon_index)
        candidate = list(self._polygons[polygon_index])
        candidate.insert(vertex_index, point)
        self._replace(polygon_index, candidate)

    def move_vertex(self, polygon_index: int, vertex_index: int, point: GeoPoint) -> None:
        self._check_index(polygon_index)
        candidate = list(self._polygons[polygon_index])
        self._check_vertex(candidate, vertex_index)
        candidate[vertex_index] = point
        self._replace(polygon_index, candidate)

    def delete_vertex(self, polygon_index: int, vertex_index: int) -> None:
        self._check_index(polygon_index)
        candidate = list(self._polygons[polygon_index])
        self._check_vertex(candidate, vertex_index)
        del candidate[vertex_index]
        self._replace(polygon_index, candidate)

    # ── derived state ──

    def recompute(self) -> SessionArea:
        breakdown = tuple(
            PolygonArea(
                index=i,
                sq_meters=sq_m,
                sq_ft=round(sqm_to_sqft(sq_m)),
                vertex_count=len(points),
                self_intersecting=is_self_intersecting(points),
            )
            for i, (points, sq_m) in enumerate(zip(self._polygons, self._sq_meters))
        )
        # total from summed meters, not from the rounded per-polygon figures
        total_sqft = round(sqm_to_sqft(sum(self._sq_meters)))
        self._last = SessionArea(total_sqft=total_sqft, breakdown=breakdown)
        logger.debug("Total area: %d sq ft from %d polygons", total_sqft, len(breakdown))
        if self.on_change is not None:
            self.on_change(total_sqft, breakdown)
        return self._last

    def coordinates_snapshot(self) -> list[list[dict]]:
        return [[p.to_dict() for p in points] for points in self._polygons]

    def to_geojson(self) -> dict:
        """MultiPolygon GeoJSON (lng, lat order) of the current polygons."""
        shapes = [
            Polygon([(p.longitude, p.latitude) for p in points])
            for points in self._polygons
        ]
        return mapping(MultiPolygon(shapes))

    # ── internals ──

    def _replace(self, index: int, points: list[GeoPoint]) -> None:
        # validate before mutating so a rejected edit leaves the session intact
        points = _check_polygon(points)
        self._polygons[index] = points
        self._sq_meters[index] = compute_area_sq_meters(points)
        self.recompute()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._polygons):
            raise IndexError(f"No polygon at index {index}")

    @staticmethod
    def _check_vertex(points: list[GeoPoint], index: int) -> None:
        if not 0 <= index < len(points):
            raise IndexError(f"No vertex at index {index}")


def recompute_session(session: ServiceAreaSession) -> SessionArea:
    """Re-sum every polygon in ``session``."""
    return session.recompute()
