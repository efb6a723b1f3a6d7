"""Pricing tiers: the bracket table behind blended square-foot pricing.

A tier covers the square footage from the previous tier's upper bound up to
its own ``up_to_sqft``. The last tier has no upper bound so arbitrarily large
lawns are always covered.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Union


@dataclass(frozen=True)
class PricingTier:
    up_to_sqft: Optional[float]  # None = no upper limit
    rate_per_sqft: float

    @property
    def is_unbounded(self) -> bool:
        return self.up_to_sqft is None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PricingTier":
        # values are kept as given; validate_tiers reports bad ones
        return cls(
            up_to_sqft=data.get("up_to_sqft"),
            rate_per_sqft=data.get("rate_per_sqft"),
        )

    def to_dict(self) -> dict:
        return {"up_to_sqft": self.up_to_sqft, "rate_per_sqft": self.rate_per_sqft}


TierLike = Union[PricingTier, Mapping[str, Any]]


# Default tiers for new accounts
DEFAULT_PRICING_TIERS: tuple[PricingTier, ...] = (
    PricingTier(up_to_sqft=5000, rate_per_sqft=0.012),
    PricingTier(up_to_sqft=20000, rate_per_sqft=0.008),
    PricingTier(up_to_sqft=None, rate_per_sqft=0.005),
)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: tuple[str, ...] = ()


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def coerce_tiers(tiers: Iterable[TierLike]) -> list[PricingTier]:
    return [t if isinstance(t, PricingTier) else PricingTier.from_dict(t) for t in tiers]


def _sort_key(tier: PricingTier) -> tuple[int, float]:
    if tier.up_to_sqft is None:
        return (1, 0.0)
    if not _is_number(tier.up_to_sqft):
        # malformed bounds sort first; validation reports them
        return (0, float("-inf"))
    return (0, float(tier.up_to_sqft))


def sort_tiers(tiers: Iterable[TierLike]) -> list[PricingTier]:
    """Ascending by upper bound, unbounded tier last. Stable for ties."""
    return sorted(coerce_tiers(tiers), key=_sort_key)


def validate_tiers(tiers: Optional[Sequence[TierLike]]) -> ValidationResult:
    """Check a tier set and report every problem found, not just the first.

    Rules:
      - at least one tier
      - every rate is a positive number
      - every bounded upper limit is a positive number, strictly above the
        previous tier's limit once sorted
      - exactly one tier has no upper limit
    """
    if not tiers:
        return ValidationResult(valid=False, errors=("At least one pricing tier is required",))

    errors: list[str] = []
    previous_max = 0.0
    unbounded_count = 0

    for i, tier in enumerate(sort_tiers(tiers), start=1):
        rate = tier.rate_per_sqft
        if not _is_number(rate) or rate <= 0:
            errors.append(f"Tier {i}: Rate must be a positive number")

        bound = tier.up_to_sqft
        if bound is None:
            unbounded_count += 1
            if unbounded_count == 2:
                errors.append("Only one tier can have no upper limit")
            continue

        if not _is_number(bound) or bound <= 0:
            errors.append(f"Tier {i}: Upper limit must be a positive number or \"No limit\"")
            continue
        if bound <= previous_max:
            errors.append(
                f"Tier {i}: Upper limit must be greater than previous tier ({previous_max:,.0f})"
            )
        previous_max = float(bound)

    if unbounded_count == 0:
        errors.append(
            "Last tier should have \"No limit\" for upper bound to cover all lawn sizes"
        )

    return ValidationResult(valid=not errors, errors=tuple(errors))


def format_tier_range(range_start: float, range_end: Optional[float]) -> str:
    """``"0-5,000 sq ft"`` for a bounded range, ``"20,000+ sq ft"`` otherwise."""
    if range_end is None:
        return f"{range_start:,.0f}+ sq ft"
    return f"{range_start:,.0f}-{range_end:,.0f} sq ft"


def describe_tiers(tiers: Iterable[TierLike]) -> list[str]:
    """One display label per tier, in sorted order."""
    labels = []
    previous_max = 0.0
    for tier in sort_tiers(tiers):
        labels.append(format_tier_range(previous_max, tier.up_to_sqft))
        if tier.up_to_sqft is not None and _is_number(tier.up_to_sqft):
            previous_max = float(tier.up_to_sqft)
    return labels


def tiers_from_settings(settings=None) -> tuple[PricingTier, ...]:
    if settings is None:
        from greenquote.config import settings
    return tuple(coerce_tiers(settings.default_pricing_tiers))
