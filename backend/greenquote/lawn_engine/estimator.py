"""
Lawn auto-estimation from a geocoded address.

Builds a starting boundary without any tracing: one rectangle for small or
commercial lots, or a front yard plus a back yard for larger residential
lots. The shapes land in a :class:`ServiceAreaSession` so the displayed area
is the measured area of what was drawn, not the target.

Usage::

    from greenquote.lawn_engine.estimator import auto_estimate, GeocodedPlace
    place = GeocodedPlace(location=GeoPoint(39.78, -89.65), route_name="N Grand Ave")
    result = auto_estimate(place, "residential")
    result.total_sqft, result.polygon_count

Heuristics (defaults, all overridable through :class:`EstimatorConfig`):
  - residential 8,000 sq ft, commercial 15,000 sq ft
  - front/back split above 5,000 sq ft, residential only, 30% / 70%
  - aspect ratios: front 2.5 (wide and shallow), back 1.2, single 1.3
  - 40 m lot depth; front centre 20% of it toward the road, back 40% away
  - road bearing from the street name, else 180 (front faces south)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from greenquote.lawn_engine.area import ServiceAreaSession
from greenquote.lawn_engine.errors import MissingGeometry
from greenquote.lawn_engine.geo import GeoPoint, offset_point, rectangle_around

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────
# CONFIGURATION
# ──────────────────────────────────────────────────────────────────

class PropertyType(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"


class EstimateStrategy(str, Enum):
    SINGLE = "single"
    FRONT_BACK = "front_back"


DEFAULT_AREAS = {
    PropertyType.RESIDENTIAL.value: 8000,
    PropertyType.COMMERCIAL.value: 15000,
}


@dataclass(frozen=True)
class EstimatorConfig:
    default_areas: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_AREAS))
    multi_polygon_threshold_sqft: float = 5000
    front_yard_fraction: float = 0.3
    back_yard_fraction: float = 0.7
    front_aspect_ratio: float = 2.5
    back_aspect_ratio: float = 1.2
    single_aspect_ratio: float = 1.3
    lot_depth_m: float = 40.0
    front_offset_fraction: float = 0.2
    back_offset_fraction: float = 0.4
    default_road_bearing: float = 180.0

    @classmethod
    def from_settings(cls, settings=None) -> "EstimatorConfig":
        if settings is None:
            from greenquote.config import settings
        return cls(
            default_areas={
                PropertyType.RESIDENTIAL.value: settings.default_residential_sqft,
                PropertyType.COMMERCIAL.value: settings.default_commercial_sqft,
            },
            multi_polygon_threshold_sqft=settings.multi_polygon_threshold_sqft,
            front_yard_fraction=settings.front_yard_fraction,
            back_yard_fraction=settings.back_yard_fraction,
            front_aspect_ratio=settings.front_yard_aspect_ratio,
            back_aspect_ratio=settings.back_yard_aspect_ratio,
            single_aspect_ratio=settings.single_yard_aspect_ratio,
            lot_depth_m=settings.lot_depth_m,
            default_road_bearing=settings.default_road_bearing,
        )


@dataclass(frozen=True)
class GeocodedPlace:
    """What the geocoder hands back: a point plus optional address parts.

    ``address_components`` follows the maps API shape
    (``{"long_name": ..., "types": [...]}``); only the ``route`` entry is read.
    ``formatted_address`` is the fallback when there is no route.
    """

    location: Optional[GeoPoint] = None
    address_components: tuple[Mapping, ...] = ()
    formatted_address: str = ""
    route_name: Optional[str] = None

    @property
    def route(self) -> Optional[str]:
        if self.route_name:
            return self.route_name
        for component in self.address_components:
            if "route" in (component.get("types") or []):
                return component.get("long_name") or component.get("short_name")
        return None

    @property
    def street_hint(self) -> Optional[str]:
        """The route, else the street line of ``formatted_address``."""
        route = self.route
        if route:
            return route
        # later parts can name a state ("West Virginia"), so only the first
        street = (self.formatted_address or "").split(",")[0].strip()
        return street or None


@dataclass(frozen=True)
class EstimateResult:
    polygons: tuple[tuple[GeoPoint, ...], ...]
    total_sqft: int
    target_sqft: float
    center: GeoPoint
    road_bearing: float
    strategy: EstimateStrategy
    property_type: str

    @property
    def polygon_count(self) -> int:
        return len(self.polygons)


# ──────────────────────────────────────────────────────────────────
# HEURISTICS
# ──────────────────────────────────────────────────────────────────

# Checked in order; the first match wins.
_DIRECTIONS = [
    ("north", "n", 0.0),
    ("south", "s", 180.0),
    ("east", "e", 90.0),
    ("west", "w", 270.0),
]


def detect_road_bearing(route_name: Optional[str], default: float = 180.0) -> float:
    """Guess which way the street lies from the lot, from the street name.

    "North Main St" → 0, "Elm St W" → 270. Full words count anywhere in the
    name; single-letter abbreviations only as their own token. Anything else
    falls back to ``default``.
    """
    if not route_name:
        return default
    name = route_name.lower()
    tokens = set(re.findall(r"[a-z]+", name))
    for word, abbrev, bearing in _DIRECTIONS:
        if word in name or abbrev in tokens:
            return bearing
    return default


def target_area_for(
    property_type: str,
    default_areas: Mapping[str, float],
) -> float:
    key = (property_type or "").strip().lower()
    if key in default_areas and default_areas[key]:
        return float(default_areas[key])
    logger.debug("No default area for %r, using residential", property_type)
    return float(
        default_areas.get(PropertyType.RESIDENTIAL.value)
        or DEFAULT_AREAS[PropertyType.RESIDENTIAL.value]
    )


def choose_strategy(
    property_type: str,
    target_sqft: float,
    config: EstimatorConfig,
) -> EstimateStrategy:
    """Front/back split for larger residential lots; commercial lawns are
    treated as one connected area."""
    is_residential = (property_type or "").strip().lower() == PropertyType.RESIDENTIAL.value
    if is_residential and target_sqft > config.multi_polygon_threshold_sqft:
        return EstimateStrategy.FRONT_BACK
    return EstimateStrategy.SINGLE


def front_back_yards(
    center: GeoPoint,
    total_sqft: float,
    road_bearing: float,
    config: EstimatorConfig,
) -> list[list[GeoPoint]]:
    """Front yard (wider, toward the road) and back yard (squarer, away)."""
    front_sqft = round(total_sqft * config.front_yard_fraction)
    back_sqft = round(total_sqft * config.back_yard_fraction)

    front_center = offset_point(
        center, road_bearing, config.lot_depth_m * config.front_offset_fraction,
    )
    back_center = offset_point(
        center, road_bearing, -config.lot_depth_m * config.back_offset_fraction,
    )
    return [
        rectangle_around(front_center, front_sqft, config.front_aspect_ratio, road_bearing),
        rectangle_around(back_center, back_sqft, config.back_aspect_ratio, road_bearing),
    ]


def single_yard(
    center: GeoPoint,
    total_sqft: float,
    road_bearing: float,
    config: EstimatorConfig,
) -> list[list[GeoPoint]]:
    return [rectangle_around(center, total_sqft, config.single_aspect_ratio, road_bearing)]


# ──────────────────────────────────────────────────────────────────
# ENTRY POINT
# ──────────────────────────────────────────────────────────────────

def auto_estimate(
    place: Optional[GeocodedPlace],
    property_type: str = PropertyType.RESIDENTIAL.value,
    config: Optional[EstimatorConfig] = None,
    default_areas: Optional[Mapping[str, float]] = None,
    session: Optional[ServiceAreaSession] = None,
) -> EstimateResult:
    """Synthesize lawn polygons for ``place`` and load them into ``session``.

    Any existing polygons in the session are cleared first. ``default_areas``
    overrides entries of ``config.default_areas`` for this call only (e.g. an
    account's widget settings).

    Raises MissingGeometry when the place has no location.
    """
    if place is None or place.location is None:
        raise MissingGeometry("Select a valid address before estimating the lawn area")

    config = config or EstimatorConfig()
    areas = dict(config.default_areas)
    if default_areas:
        areas.update({k: v for k, v in default_areas.items() if v})

    center = place.location
    target_sqft = target_area_for(property_type, areas)
    road_bearing = detect_road_bearing(place.street_hint, config.default_road_bearing)
    strategy = choose_strategy(property_type, target_sqft, config)
    logger.debug(
        "Auto-estimating %s property: target %.0f sq ft, road bearing %.0f, strategy %s",
        property_type, target_sqft, road_bearing, strategy.value,
    )

    if strategy is EstimateStrategy.FRONT_BACK:
        shapes = front_back_yards(center, target_sqft, road_bearing, config)
    else:
        shapes = single_yard(center, target_sqft, road_bearing, config)

    if session is None:
        session = ServiceAreaSession()
    session.clear()
    for shape in shapes:
        session.add_polygon(shape, silent=True)
    measured = session.recompute()

    return EstimateResult(
        polygons=tuple(tuple(s) for s in shapes),
        total_sqft=measured.total_sqft,
        target_sqft=target_sqft,
        center=center,
        road_bearing=road_bearing,
        strategy=strategy,
        property_type=(property_type or "").strip().lower() or PropertyType.RESIDENTIAL.value,
    )
