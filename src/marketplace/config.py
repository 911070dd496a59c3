from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EstimatorConfig:
    year_rate: float = 1500.0  # dollars per model year away from the make average
    mileage_rate: float = 800.0  # dollars per mileage_step away from the make average
    mileage_step: float = 10_000.0
    band: float = 0.10
    high_confidence_matches: int = 2


@dataclass(frozen=True)
class DashboardConfig:
    trend_months: int = 6
    top_brands: int = 8
    new_listing_days: int = 7
    default_estimate_year: int = 2022
