from __future__ import annotations

import json
import math
import re
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from marketplace.data_models import CarListing, ListingRecord

SAMPLE_LISTINGS_PATH = Path(__file__).parent / "data" / "sample_listings.json"

_MILEAGE_RE = re.compile(r"^\s*(\d[\d,]*(?:\.\d+)?)\s*(?:mi|miles|km|kms)?\.?\s*$", re.IGNORECASE)


class CatalogError(ValueError):
    pass


# ── Cascading selection ─────────────────────────────────────────────

def distinct_makes(catalog: Sequence[ListingRecord]) -> list[str]:
    return sorted({r.make for r in catalog})


def models_for_make(catalog: Sequence[ListingRecord], make: str) -> list[str]:
    return sorted({r.model for r in catalog if r.make == make})


def years_for_make_model(catalog: Sequence[ListingRecord], make: str, model: str) -> list[int]:
    return sorted({r.year for r in catalog if r.make == make and r.model == model}, reverse=True)


# ── Normalization ───────────────────────────────────────────────────

def parse_mileage(value: Any) -> float:
    """Parse free-form odometer input such as ``15000``, ``"15000"`` or ``"45,000 km"``.

    Raises ValueError for empty, non-numeric or negative input.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Unparseable mileage: {value!r}")
    if isinstance(value, (int, float)):
        mileage = float(value)
    else:
        match = _MILEAGE_RE.match(str(value))
        if not match:
            raise ValueError(f"Unparseable mileage: {value!r}")
        mileage = float(match.group(1).replace(",", ""))
    if not math.isfinite(mileage) or mileage < 0:
        raise ValueError(f"Mileage must be a non-negative number, got {value!r}")
    return mileage


def records_from_listings(listings: Iterable[CarListing]) -> list[ListingRecord]:
    # the static dataset is valued at its fair price, not the asking price
    records: list[ListingRecord] = []
    for c in listings:
        record = _screen_record(c.make, c.model, c.year, c.fair_price, c.mileage)
        if record is not None:
            records.append(record)
    return records


def records_from_feed(rows: Iterable[Mapping[str, Any]]) -> list[ListingRecord]:
    records: list[ListingRecord] = []
    for row in rows:
        record = _screen_record(row.get("make"), row.get("model"), row.get("year"), row.get("price"), row.get("mileage"))
        if record is not None:
            records.append(record)
    return records


def _screen_record(make: Any, model: Any, year: Any, price: Any, mileage: Any) -> ListingRecord | None:
    """Build an estimator record, or None when make/model is empty, year or mileage is unusable, or price is not > 0."""
    make = str(make or "").strip()
    model = str(model or "").strip()
    if not make or not model:
        return None
    safe_year = _safe_int(year)
    safe_price = _safe_float(price)
    if safe_year is None or safe_price is None:
        return None
    try:
        safe_mileage = parse_mileage(mileage)
    except ValueError:
        return None
    return ListingRecord(make=make, model=model, year=safe_year, price=safe_price, mileage=safe_mileage)


# ── Loading ─────────────────────────────────────────────────────────

def load_listings(path: str | Path | None = None) -> list[CarListing]:
    source = Path(path) if path is not None else SAMPLE_LISTINGS_PATH
    return [listing_from_dict(row) for row in _read_json_array(source)]


def load_feed(path: str | Path) -> list[dict[str, Any]]:
    rows = _read_json_array(Path(path))
    if not all(isinstance(row, dict) for row in rows):
        raise CatalogError(f"{path}: every feed entry must be an object")
    return rows


def listing_from_dict(row: Mapping[str, Any]) -> CarListing:
    def pick(snake: str, camel: str | None = None) -> Any:
        if snake in row:
            return row[snake]
        if camel and camel in row:
            return row[camel]
        raise CatalogError(f"Listing {row.get('id', '?')} is missing '{camel or snake}'")

    try:
        listing = CarListing(
            id=str(pick("id")),
            make=str(pick("make")),
            model=str(pick("model")),
            year=int(pick("year")),
            price=float(pick("price")),
            mileage=float(pick("mileage")),
            fair_price=float(pick("fair_price", "fairPrice")),
            listed_date=date.fromisoformat(str(pick("listed_date", "listedDate"))),
            condition=pick("condition"),
            transmission=pick("transmission"),
            fuel_type=pick("fuel_type", "fuelType"),
            body_type=str(pick("body_type", "bodyType")),
            deal_rating=pick("deal_rating", "dealRating"),
        )
    except CatalogError:
        raise
    except (TypeError, ValueError) as exc:
        raise CatalogError(f"Listing {row.get('id', '?')} is malformed: {exc}") from exc
    if _safe_float(listing.price) is None or _safe_float(listing.fair_price) is None:
        raise CatalogError(f"Listing {listing.id} must have positive price and fair price")
    return listing


def _read_json_array(path: Path) -> list[Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CatalogError(f"{path}: cannot read ({exc})") from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(payload, list):
        raise CatalogError(f"{path}: expected a JSON array")
    return payload


def _safe_int(val: Any) -> int | None:
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, float) and not val.is_integer():
        return None
    try:
        return int(val)
    except (TypeError, ValueError, OverflowError):
        return None


def _safe_float(val: Any) -> float | None:
    if val is None:
        return None
    try:
        f = float(val)
        return f if math.isfinite(f) and f > 0 else None
    except (TypeError, ValueError):
        return None
