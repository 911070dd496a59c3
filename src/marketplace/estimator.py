from __future__ import annotations

import math
from typing import Sequence

from marketplace.config import EstimatorConfig
from marketplace.data_models import Confidence, Estimation, ListingRecord


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def estimate_fair_price(
    catalog: Sequence[ListingRecord],
    make: str,
    model: str,
    year: int,
    mileage: float,
    config: EstimatorConfig = EstimatorConfig(),
) -> Estimation | None:
    """
    Comparable-based valuation for a single vehicle.

    Comparables are all records of the same make; the base price comes from
    exact model matches when there are any, otherwise from the whole make.
    Year and mileage are then corrected linearly against the make averages.
    Returns None when the catalog has no record of ``make``.
    """
    comparables = [r for r in catalog if r.make == make]
    if not comparables:
        return None

    exact_matches = [r for r in comparables if r.model == model]

    confidence: Confidence
    if len(exact_matches) >= config.high_confidence_matches:
        base_price = _mean([r.price for r in exact_matches])
        confidence = "High"
    elif len(exact_matches) == 1:
        base_price = exact_matches[0].price
        confidence = "Medium"
    else:
        base_price = _mean([r.price for r in comparables])
        confidence = "Low"

    avg_year = _mean([r.year for r in comparables])
    base_price += (year - avg_year) * config.year_rate

    avg_mileage = _mean([r.mileage for r in comparables])
    base_price -= ((mileage - avg_mileage) / config.mileage_step) * config.mileage_rate

    # band is taken from the unrounded base, so its midpoint can drift from estimated_price
    low = round_half_up(base_price * (1 - config.band))
    high = round_half_up(base_price * (1 + config.band))

    return Estimation(
        estimated_price=round_half_up(base_price),
        price_range=(low, high),
        confidence=confidence,
        comparable_count=len(comparables),
    )
