"""Error types raised by the lawn engine.

All of these are local, recoverable input problems. The API layer turns them
into 400 responses; other callers are expected to show a corrective message.
"""

from __future__ import annotations


class LawnEngineError(ValueError):
    """Base class for engine input errors."""


class InvalidGeometry(LawnEngineError):
    """Polygon has fewer than 3 points or malformed coordinates."""


class MissingGeometry(LawnEngineError):
    """Auto-estimate requested without a geocoded location."""


class InvalidPricingConfiguration(LawnEngineError):
    """Tier set failed validation. ``errors`` holds every violation."""

    def __init__(self, errors: list[str] | tuple[str, ...]):
        self.errors = list(errors)
        super().__init__("Invalid pricing tiers: " + "; ".join(self.errors))
