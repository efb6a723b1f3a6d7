from __future__ import annotations

from greenquote.lawn_engine.area import ServiceAreaSession, compute_area, recompute_session
from greenquote.lawn_engine.errors import (
    InvalidGeometry,
    InvalidPricingConfiguration,
    MissingGeometry,
)
from greenquote.lawn_engine.estimator import EstimatorConfig, GeocodedPlace, auto_estimate
from greenquote.lawn_engine.geo import GeoPoint
from greenquote.lawn_engine.pricing import (
    PricingConfig,
    calculate_flat_price,
    calculate_tiered_price,
    compare_to_flat,
    price_area,
)
from greenquote.lawn_engine.tiers import DEFAULT_PRICING_TIERS, PricingTier, validate_tiers

__all__ = [
    "GeoPoint",
    "ServiceAreaSession",
    "compute_area",
    "recompute_session",
    "EstimatorConfig",
    "GeocodedPlace",
    "auto_estimate",
    "PricingTier",
    "DEFAULT_PRICING_TIERS",
    "validate_tiers",
    "PricingConfig",
    "calculate_flat_price",
    "calculate_tiered_price",
    "compare_to_flat",
    "price_area",
    "InvalidGeometry",
    "MissingGeometry",
    "InvalidPricingConfiguration",
]
