from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Literal


Confidence = Literal["High", "Medium", "Low"]
Condition = Literal["Excellent", "Good", "Fair", "Poor"]
Transmission = Literal["Automatic", "Manual"]
FuelType = Literal["Gasoline", "Diesel", "Hybrid", "Electric"]
DealRating = Literal["Great Deal", "Good Deal", "Fair Deal", "Overpriced"]


@dataclass(frozen=True)
class ListingRecord:
    make: str
    model: str
    year: int
    price: float
    mileage: float


@dataclass(frozen=True)
class Estimation:
    estimated_price: int
    price_range: tuple[int, int]
    confidence: Confidence
    comparable_count: int


@dataclass(frozen=True)
class CarListing:
    id: str
    make: str
    model: str
    year: int
    price: float
    mileage: float
    fair_price: float
    listed_date: date
    condition: Condition
    transmission: Transmission
    fuel_type: FuelType
    body_type: str
    deal_rating: DealRating
