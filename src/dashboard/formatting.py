from __future__ import annotations

from marketplace.data_models import Confidence
from marketplace.estimator import round_half_up

_CONFIDENCE_TONES: dict[str, str] = {
    "High": "success",
    "Medium": "warning",
    "Low": "destructive",
}


def format_currency(value: float) -> str:
    amount = round_half_up(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,}"


def format_percent(change: float | None) -> str:
    if change is None:
        return "n/a"
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.1f}%"


def format_mileage(value: float) -> str:
    return f"{round_half_up(value):,} mi"


def format_price_range(price_range: tuple[int, int]) -> str:
    low, high = price_range
    return f"{format_currency(low)} - {format_currency(high)}"


def confidence_tone(confidence: Confidence) -> str:
    return _CONFIDENCE_TONES[confidence]
