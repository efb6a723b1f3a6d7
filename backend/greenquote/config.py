from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    log_level: str = "INFO"

    # Auto-estimate defaults (sq ft)
    default_residential_sqft: int = 8000
    default_commercial_sqft: int = 15000
    multi_polygon_threshold_sqft: int = 5000
    front_yard_fraction: float = 0.3
    back_yard_fraction: float = 0.7
    front_yard_aspect_ratio: float = 2.5
    back_yard_aspect_ratio: float = 1.2
    single_yard_aspect_ratio: float = 1.3
    lot_depth_m: float = 40.0  # typical suburban lot
    default_road_bearing: float = 180.0  # front yard faces south

    # Pricing defaults for new accounts
    default_pricing_tiers: list[dict] = [
        {"up_to_sqft": 5000, "rate_per_sqft": 0.012},
        {"up_to_sqft": 20000, "rate_per_sqft": 0.008},
        {"up_to_sqft": None, "rate_per_sqft": 0.005},
    ]
    use_tiered_pricing: bool = True
    default_flat_rate: float = 0.01
    default_min_price_per_visit: float = 50.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
