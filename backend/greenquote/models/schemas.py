from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Optional


class LatLng(BaseModel):
    lat: float
    lng: float


# ── Area ──

class AreaRequest(BaseModel):
    polygons: list[list[LatLng]] = []


class PolygonAreaOut(BaseModel):
    index: int
    sq_meters: float
    sq_ft: int
    vertex_count: int
    self_intersecting: bool = False


class AreaResponse(BaseModel):
    total_sqft: int
    polygon_count: int
    breakdown: list[PolygonAreaOut] = []


# ── Auto-estimate ──

class AddressComponent(BaseModel):
    long_name: str = ""
    short_name: str = ""
    types: list[str] = []


class EstimateRequest(BaseModel):
    location: Optional[LatLng] = None
    property_type: str = "residential"
    address_components: list[AddressComponent] = []
    formatted_address: str = ""
    route_name: Optional[str] = None
    default_areas: dict[str, float] = {}


class EstimateResponse(BaseModel):
    polygons: list[list[LatLng]]
    polygon_count: int
    total_sqft: int
    target_sqft: float
    center: LatLng
    road_bearing: float
    strategy: str
    property_type: str


# ── Pricing ──

class PricingTierIn(BaseModel):
    # loose types so validation can report every bad value at once
    up_to_sqft: Optional[float | str] = None
    rate_per_sqft: Optional[float | str] = None


class PricingConfigIn(BaseModel):
    use_tiered_pricing: bool = True
    tiers: Optional[list[PricingTierIn]] = None
    flat_rate: Optional[float] = 0.01
    min_price_per_visit: Optional[float] = 50.0


class PriceRequest(PricingConfigIn):
    area_sqft: float = Field(ge=0)


class BreakdownLineOut(BaseModel):
    kind: str
    label: str
    range_start: Optional[float] = None
    range_end: Optional[float] = None
    sqft_charged: float
    rate: float
    subtotal: float
    note: str = ""


class PricingTierOut(BaseModel):
    up_to_sqft: Optional[float] = None
    rate_per_sqft: float


class PricingResultOut(BaseModel):
    pricing_mode: str
    area_sqft: float
    calculated_price: float
    base_price: float
    minimum_price: Optional[float] = None
    minimum_applied: bool = False
    effective_rate: float
    breakdown: list[BreakdownLineOut] = []
    pricing_tiers_snapshot: Optional[list[PricingTierOut]] = None
    flat_rate_snapshot: Optional[float] = None


class TierValidationRequest(BaseModel):
    tiers: list[PricingTierIn] = []


class TierValidationResponse(BaseModel):
    valid: bool
    errors: list[str] = []
    labels: list[str] = []


class CompareRequest(BaseModel):
    area_sqft: float = Field(ge=0)
    tiers: Optional[list[PricingTierIn]] = None
    flat_rate: float = 0.01


class CompareResponse(BaseModel):
    tiered_price: float
    flat_price: float
    savings: float
    savings_percent: float


# ── Quote ──

class AddonIn(BaseModel):
    name: str
    price_per_visit: float = 0


class QuoteRequest(PriceRequest):
    frequency: Optional[str] = None
    addons: list[AddonIn] = []


class QuoteResponse(BaseModel):
    per_visit: int
    monthly: int
    base_price: float
    addons_total: float
    multiplier: float
    visits_per_month: int
    frequency: Optional[str] = None
    pricing: PricingResultOut
