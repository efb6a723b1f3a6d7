"""Per-visit and monthly quote totals on top of a priced lawn area."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from greenquote.lawn_engine.pricing import PricingResult, round_half_up


@dataclass(frozen=True)
class Frequency:
    key: str
    label: str
    multiplier: float
    visits_per_month: int


FREQUENCIES = {
    f.key: f
    for f in (
        Frequency("one_time", "One-Time", 1.2, 1),
        Frequency("weekly", "Weekly", 0.85, 4),
        Frequency("bi_weekly", "Bi-Weekly", 1.0, 2),
        Frequency("monthly", "Monthly", 1.1, 1),
    )
}


@dataclass(frozen=True)
class AddonCharge:
    name: str
    price_per_visit: float


@dataclass(frozen=True)
class QuoteTotals:
    pricing: PricingResult
    frequency: Optional[str]
    multiplier: float
    visits_per_month: int
    addons: tuple[AddonCharge, ...]
    addons_total: float
    per_visit: int
    monthly: int

    @property
    def base_price(self) -> float:
        return self.pricing.base_price


def _price(value) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    return price if price > 0 else 0.0


def monthly_revenue(price_per_visit: float, frequency: Optional[str]) -> float:
    freq = FREQUENCIES.get(frequency or "")
    visits = freq.visits_per_month if freq else 1
    return _price(price_per_visit) * visits


def build_quote_totals(
    pricing: PricingResult,
    frequency: Optional[str] = None,
    addons: Iterable[Mapping] = (),
) -> QuoteTotals:
    """Combine the area price with add-ons and the visit frequency.

    ``addons`` are ``{"name", "price_per_visit"}`` mappings; unparseable or
    negative prices count as 0. Per-visit and monthly totals are whole
    dollars. Unknown frequencies price as a single visit at ×1.
    """
    charges = tuple(
        AddonCharge(name=str(a.get("name") or ""), price_per_visit=_price(a.get("price_per_visit")))
        for a in addons
    )
    addons_total = round_half_up(sum(c.price_per_visit for c in charges), 2)

    freq = FREQUENCIES.get(frequency or "")
    multiplier = freq.multiplier if freq else 1.0
    visits = freq.visits_per_month if freq else 1

    per_visit = int(round_half_up((pricing.base_price + addons_total) * multiplier, 0))
    return QuoteTotals(
        pricing=pricing,
        frequency=frequency,
        multiplier=multiplier,
        visits_per_month=visits,
        addons=charges,
        addons_total=addons_total,
        per_visit=per_visit,
        monthly=per_visit * visits,
    )
