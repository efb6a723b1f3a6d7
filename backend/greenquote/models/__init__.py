from __future__ import annotations

from greenquote.models.schemas import (
    AreaRequest,
    EstimateRequest,
    PriceRequest,
    PricingResultOut,
    QuoteRequest,
)

__all__ = ["AreaRequest", "EstimateRequest", "PriceRequest", "PricingResultOut", "QuoteRequest"]
