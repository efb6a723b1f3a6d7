"""
Lawn engine API.

Thin JSON layer over ``greenquote.lawn_engine`` so the embeddable widget and
the Pro app price and measure with the same code. Stateless: every request
carries the geometry and pricing configuration it needs.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from greenquote.lawn_engine.area import ServiceAreaSession
from greenquote.lawn_engine.errors import (
    InvalidGeometry,
    InvalidPricingConfiguration,
    LawnEngineError,
)
from greenquote.lawn_engine.estimator import EstimatorConfig, GeocodedPlace, auto_estimate
from greenquote.lawn_engine.geo import GeoPoint
from greenquote.lawn_engine.pricing import (
    PricingConfig,
    PricingResult,
    compare_to_flat,
    price_area,
)
from greenquote.lawn_engine.quote import build_quote_totals
from greenquote.lawn_engine.tiers import (
    describe_tiers,
    tiers_from_settings,
    validate_tiers,
)
from greenquote.models.schemas import (
    AreaRequest,
    AreaResponse,
    CompareRequest,
    CompareResponse,
    EstimateRequest,
    EstimateResponse,
    LatLng,
    PolygonAreaOut,
    PriceRequest,
    PricingConfigIn,
    PricingResultOut,
    PricingTierIn,
    PricingTierOut,
    QuoteRequest,
    QuoteResponse,
    TierValidationRequest,
    TierValidationResponse,
)
from greenquote.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")
estimator_config = EstimatorConfig.from_settings(settings)


# ──────────────────────────────────────────────────────────────────
# HELPERS
# ──────────────────────────────────────────────────────────────────

def _to_point(p: LatLng) -> GeoPoint:
    return GeoPoint.from_dict(p.model_dump())


def _to_latlng(p: GeoPoint) -> LatLng:
    return LatLng(lat=p.latitude, lng=p.longitude)


def _tiers_in(tiers: Optional[list[PricingTierIn]]) -> Optional[list[dict]]:
    if tiers is None:
        return None
    return [t.model_dump() for t in tiers]


def _pricing_config(body: PricingConfigIn) -> PricingConfig:
    tiers = _tiers_in(body.tiers)
    return PricingConfig(
        use_tiered_pricing=body.use_tiered_pricing,
        tiers=tuple(tiers) if tiers is not None else tiers_from_settings(settings),
        flat_rate=body.flat_rate,
        min_price_per_visit=body.min_price_per_visit,
    )


def _pricing_out(result: PricingResult) -> PricingResultOut:
    return PricingResultOut(**result.to_snapshot())


def _pricing_error(e: InvalidPricingConfiguration) -> HTTPException:
    logger.warning("Rejected pricing configuration: %s", e.errors)
    return HTTPException(
        status_code=400,
        detail={"message": "Invalid pricing tiers", "errors": e.errors},
    )


# ──────────────────────────────────────────────────────────────────
# ENDPOINTS
# ──────────────────────────────────────────────────────────────────

@router.get("/health")
async def health():
    return {"status": "ok"}


@router.post("/area", response_model=AreaResponse)
async def measure_area(body: AreaRequest):
    """Total and per-polygon lawn area in square feet."""
    session = ServiceAreaSession()
    try:
        for polygon in body.polygons:
            session.add_polygon([_to_point(p) for p in polygon], silent=True)
    except InvalidGeometry as e:
        raise HTTPException(status_code=400, detail=str(e))
    measured = session.recompute()

    return AreaResponse(
        total_sqft=measured.total_sqft,
        polygon_count=measured.polygon_count,
        breakdown=[
            PolygonAreaOut(
                index=b.index,
                sq_meters=b.sq_meters,
                sq_ft=b.sq_ft,
                vertex_count=b.vertex_count,
                self_intersecting=b.self_intersecting,
            )
            for b in measured.breakdown
        ],
    )


@router.post("/estimate", response_model=EstimateResponse)
async def estimate_lawn(body: EstimateRequest):
    """Synthesize lawn polygons for a geocoded address."""
    place = GeocodedPlace(
        location=_to_point(body.location) if body.location else None,
        address_components=tuple(c.model_dump() for c in body.address_components),
        formatted_address=body.formatted_address,
        route_name=body.route_name,
    )
    try:
        result = auto_estimate(
            place,
            body.property_type,
            config=estimator_config,
            default_areas=body.default_areas,
        )
    except LawnEngineError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return EstimateResponse(
        polygons=[[_to_latlng(p) for p in poly] for poly in result.polygons],
        polygon_count=result.polygon_count,
        total_sqft=result.total_sqft,
        target_sqft=result.target_sqft,
        center=_to_latlng(result.center),
        road_bearing=result.road_bearing,
        strategy=result.strategy.value,
        property_type=result.property_type,
    )


@router.post("/price", response_model=PricingResultOut)
async def price(body: PriceRequest):
    """Price an area with the supplied account pricing configuration."""
    try:
        result = price_area(body.area_sqft, _pricing_config(body))
    except InvalidPricingConfiguration as e:
        raise _pricing_error(e)
    return _pricing_out(result)


@router.post("/price/compare", response_model=CompareResponse)
async def compare(body: CompareRequest):
    """Tiered vs flat pricing, for the savings display."""
    tiers = _tiers_in(body.tiers)
    try:
        comparison = compare_to_flat(
            body.area_sqft,
            tiers if tiers is not None else tiers_from_settings(settings),
            body.flat_rate,
        )
    except InvalidPricingConfiguration as e:
        raise _pricing_error(e)
    return CompareResponse(
        tiered_price=comparison.tiered_price,
        flat_price=comparison.flat_price,
        savings=comparison.savings,
        savings_percent=comparison.savings_percent,
    )


@router.post("/tiers/validate", response_model=TierValidationResponse)
async def validate(body: TierValidationRequest):
    tiers = _tiers_in(body.tiers)
    result = validate_tiers(tiers)
    return TierValidationResponse(
        valid=result.valid,
        errors=list(result.errors),
        labels=describe_tiers(tiers) if result.valid else [],
    )


@router.get("/tiers/default", response_model=list[PricingTierOut])
async def default_tiers():
    return [PricingTierOut(**t.to_dict()) for t in tiers_from_settings(settings)]


@router.post("/quote", response_model=QuoteResponse)
async def quote(body: QuoteRequest):
    """Per-visit and monthly totals: area price, add-ons, frequency."""
    try:
        pricing = price_area(body.area_sqft, _pricing_config(body))
    except InvalidPricingConfiguration as e:
        raise _pricing_error(e)

    totals = build_quote_totals(
        pricing,
        frequency=body.frequency,
        addons=[a.model_dump() for a in body.addons],
    )
    return QuoteResponse(
        per_visit=totals.per_visit,
        monthly=totals.monthly,
        base_price=totals.base_price,
        addons_total=totals.addons_total,
        multiplier=totals.multiplier,
        visits_per_month=totals.visits_per_month,
        frequency=totals.frequency,
        pricing=_pricing_out(pricing),
    )
