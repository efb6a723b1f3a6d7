"""
Square-footage pricing: flat or tiered (blended) rates plus a per-visit minimum.

Tiered pricing works like tax brackets. Each tier's rate applies only to the
square footage that falls inside that tier, so larger lawns get a lower
blended rate on the excess, not on the whole area.

With the default tiers, 25,000 sq ft prices as:
    first 5,000  × $0.012 = $60
    next 15,000  × $0.008 = $120
    last 5,000   × $0.005 = $25
    total                   $205   (vs $250 at a flat $0.01)

A :class:`PricingResult` is the immutable snapshot stored with a quote. It
carries the tiers or flat rate it was computed from, so later changes to an
account's pricing never alter a quote that was already priced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from greenquote.lawn_engine.errors import InvalidPricingConfiguration
from greenquote.lawn_engine.tiers import (
    DEFAULT_PRICING_TIERS,
    PricingTier,
    TierLike,
    format_tier_range,
    sort_tiers,
    tiers_from_settings,
    validate_tiers,
)

logger = logging.getLogger(__name__)

MODE_TIERED = "tiered"
MODE_FLAT = "flat"


def round_half_up(amount: float, places: int = 2) -> float:
    """Round with halves going up (0.125 -> 0.13), matching the quote widget."""
    step = Decimal(1).scaleb(-places)
    return float(Decimal(str(amount)).quantize(step, rounding=ROUND_HALF_UP))


def _cents(amount: float) -> float:
    return round_half_up(amount, 2)


# ──────────────────────────────────────────────────────────────────
# RESULT TYPES
# ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BreakdownLine:
    kind: str  # "tier", "flat" or "minimum"
    label: str
    sqft_charged: float
    rate: float
    subtotal: float
    range_start: Optional[float] = None
    range_end: Optional[float] = None
    note: str = ""

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "label": self.label,
            "range_start": self.range_start,
            "range_end": self.range_end,
            "sqft_charged": self.sqft_charged,
            "rate": self.rate,
            "subtotal": self.subtotal,
            "note": self.note,
        }


@dataclass(frozen=True)
class PricingResult:
    area_sqft: float
    pricing_mode: str
    calculated_price: float
    base_price: float
    breakdown: tuple[BreakdownLine, ...] = ()
    minimum_applied: bool = False
    minimum_price: Optional[float] = None
    tiers_snapshot: Optional[tuple[PricingTier, ...]] = None
    flat_rate_snapshot: Optional[float] = None

    @property
    def total_price(self) -> float:
        return self.base_price

    @property
    def effective_rate(self) -> float:
        return effective_rate(self.base_price, self.area_sqft)

    @property
    def sqft_charged(self) -> float:
        return sum(line.sqft_charged for line in self.breakdown)

    def to_snapshot(self) -> dict:
        """JSON-ready record to persist verbatim alongside the quote."""
        return {
            "pricing_mode": self.pricing_mode,
            "area_sqft": self.area_sqft,
            "calculated_price": self.calculated_price,
            "base_price": self.base_price,
            "minimum_price": self.minimum_price,
            "minimum_applied": self.minimum_applied,
            "effective_rate": self.effective_rate,
            "breakdown": [line.to_dict() for line in self.breakdown],
            "pricing_tiers_snapshot": (
                [t.to_dict() for t in self.tiers_snapshot]
                if self.tiers_snapshot is not None else None
            ),
            "flat_rate_snapshot": self.flat_rate_snapshot,
        }


@dataclass(frozen=True)
class PricingComparison:
    tiered_price: float
    flat_price: float
    savings: float
    savings_percent: float


@dataclass(frozen=True)
class PricingConfig:
    """An account's active pricing settings, as read from its settings row."""

    use_tiered_pricing: bool = True
    tiers: Optional[tuple[TierLike, ...]] = None
    flat_rate: Optional[float] = 0.01
    min_price_per_visit: Optional[float] = 50.0

    @classmethod
    def from_settings(cls, settings=None) -> "PricingConfig":
        if settings is None:
            from greenquote.config import settings
        return cls(
            use_tiered_pricing=settings.use_tiered_pricing,
            tiers=tiers_from_settings(settings),
            flat_rate=settings.default_flat_rate,
            min_price_per_visit=settings.default_min_price_per_visit,
        )


# ──────────────────────────────────────────────────────────────────
# CALCULATIONS
# ──────────────────────────────────────────────────────────────────

def effective_rate(price: float, area_sqft: float) -> float:
    """Blended price per square foot."""
    if not area_sqft or area_sqft <= 0:
        return 0.0
    return round_half_up(price / area_sqft, 4)


def calculate_flat_price(area_sqft: float, rate_per_sqft: Optional[float]) -> float:
    """``area × rate`` to the cent. No area or no rate prices at 0."""
    if not area_sqft or area_sqft <= 0 or not rate_per_sqft:
        return 0.0
    return _cents(area_sqft * rate_per_sqft)


def calculate_tiered_price(
    area_sqft: float,
    tiers: Optional[Sequence[TierLike]] = None,
    minimum_price: Optional[float] = None,
) -> PricingResult:
    """Blended price for ``area_sqft`` across ``tiers`` (defaults if None).

    Raises InvalidPricingConfiguration with every violation if the tier set
    is invalid, including a set with no unbounded tier, rather than silently
    capping large lawns at the last bounded tier.
    """
    if tiers is None:
        tiers = DEFAULT_PRICING_TIERS
    validation = validate_tiers(tiers)
    if not validation.valid:
        raise InvalidPricingConfiguration(validation.errors)

    sorted_tiers = sort_tiers(tiers)
    area = max(area_sqft or 0, 0)
    remaining = area
    previous_max = 0.0
    total = 0.0
    breakdown = []

    for tier in sorted_tiers:
        if remaining <= 0:
            break
        tier_max = float("inf") if tier.is_unbounded else float(tier.up_to_sqft)
        sqft_in_tier = min(remaining, tier_max - previous_max)

        if sqft_in_tier > 0:
            subtotal = sqft_in_tier * tier.rate_per_sqft
            total += subtotal
            breakdown.append(BreakdownLine(
                kind="tier",
                label=format_tier_range(previous_max, tier.up_to_sqft),
                range_start=previous_max,
                range_end=tier.up_to_sqft,
                sqft_charged=sqft_in_tier,
                rate=tier.rate_per_sqft,
                subtotal=_cents(subtotal),
            ))
            remaining -= sqft_in_tier
        previous_max = tier_max

    price = _cents(total)
    result = PricingResult(
        area_sqft=area,
        pricing_mode=MODE_TIERED,
        calculated_price=price,
        base_price=price,
        breakdown=tuple(breakdown),
        tiers_snapshot=tuple(sorted_tiers),
    )
    return apply_minimum(result, minimum_price)


def price_flat(
    area_sqft: float,
    rate_per_sqft: Optional[float],
    minimum_price: Optional[float] = None,
) -> PricingResult:
    """Flat-rate pricing as a full :class:`PricingResult`."""
    area = max(area_sqft or 0, 0)
    price = calculate_flat_price(area, rate_per_sqft)
    breakdown = ()
    if area > 0:
        rate = rate_per_sqft or 0.0
        breakdown = (BreakdownLine(
            kind="flat",
            label=f"Base service ({area:,.0f} sq ft × ${rate:.4f})",
            range_start=0.0,
            range_end=None,
            sqft_charged=area,
            rate=rate,
            subtotal=price,
        ),)
    result = PricingResult(
        area_sqft=area,
        pricing_mode=MODE_FLAT,
        calculated_price=price,
        base_price=price,
        breakdown=breakdown,
        flat_rate_snapshot=rate_per_sqft,
    )
    return apply_minimum(result, minimum_price)


def apply_minimum(result: PricingResult, minimum_price: Optional[float]) -> PricingResult:
    """Raise the price to the per-visit minimum, recording the uplift.

    A missing or zero minimum leaves the result as is.
    """
    if not minimum_price or minimum_price <= 0:
        return result
    if result.calculated_price >= minimum_price:
        return replace(result, minimum_price=minimum_price, minimum_applied=False)

    minimum = _cents(minimum_price)
    uplift = _cents(minimum - result.calculated_price)
    logger.info(
        "Minimum price applied: %.2f -> %.2f for %.0f sq ft",
        result.calculated_price, minimum, result.area_sqft,
    )
    line = BreakdownLine(
        kind="minimum",
        label="Minimum price applied",
        sqft_charged=0,
        rate=0.0,
        subtotal=uplift,
        note=f"(min ${minimum:,.2f})",
    )
    return replace(
        result,
        base_price=minimum,
        breakdown=result.breakdown + (line,),
        minimum_applied=True,
        minimum_price=minimum,
    )


def price_area(area_sqft: float, config: Optional[PricingConfig] = None) -> PricingResult:
    """Price an area with an account's configuration.

    Tiered when enabled and tiers are present (None means default tiers), flat
    otherwise; the per-visit minimum is applied either way.
    """
    config = config or PricingConfig()
    tiers = DEFAULT_PRICING_TIERS if config.tiers is None else config.tiers
    if config.use_tiered_pricing and len(tiers) > 0:
        return calculate_tiered_price(area_sqft, tiers, config.min_price_per_visit)
    return price_flat(area_sqft, config.flat_rate, config.min_price_per_visit)


def compare_to_flat(
    area_sqft: float,
    tiers: Optional[Sequence[TierLike]],
    flat_rate: Optional[float],
) -> PricingComparison:
    """Tiered vs flat for display ("you save $45"). Minimums are ignored."""
    tiered_price = calculate_tiered_price(area_sqft, tiers).base_price
    flat_price = calculate_flat_price(area_sqft, flat_rate)
    savings = flat_price - tiered_price
    savings_percent = (savings / flat_price) * 100 if flat_price > 0 else 0.0
    return PricingComparison(
        tiered_price=tiered_price,
        flat_price=flat_price,
        savings=_cents(savings),
        savings_percent=round_half_up(savings_percent, 1),
    )
