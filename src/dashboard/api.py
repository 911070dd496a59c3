from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request, Response
from pydantic import BaseModel, Field

from dashboard.formatting import confidence_tone, format_currency, format_mileage, format_price_range
from dashboard.logging_config import configure_logging, new_request_id, request_id
from dashboard.settings import DashboardSettings
from marketplace.analytics import (
    body_type_distribution,
    brand_distribution,
    kpi_summary,
    listing_volume,
    mileage_price_points,
    price_trends,
    year_distribution,
)
from marketplace.catalog import (
    distinct_makes,
    load_feed,
    load_listings,
    models_for_make,
    parse_mileage,
    records_from_feed,
    records_from_listings,
    years_for_make_model,
)
from marketplace.config import DashboardConfig
from marketplace.data_models import CarListing, ListingRecord
from marketplace.estimator import estimate_fair_price
from marketplace.listings_table import TableSort, price_delta, query_listings

logger = logging.getLogger(__name__)


# ── Request / Response Models ───────────────────────────────────────

class FairPriceRequest(BaseModel):
    make: str = Field(min_length=1)
    model: str = ""
    year: int | None = Field(default=None, ge=1900, le=2100)
    mileage: str | float


class FairPriceResponse(BaseModel):
    available: bool
    make: str
    model: str
    year: int
    mileage: float
    estimated_price: int | None = None
    price_range: tuple[int, int] | None = None
    confidence: str | None = None
    comparable_count: int | None = None
    display: dict[str, str] = Field(default_factory=dict)
    message: str | None = None


class HealthResponse(BaseModel):
    status: str


# ── Data Wiring ─────────────────────────────────────────────────────

def build_estimation_catalog(settings: DashboardSettings, listings: list[CarListing]) -> list[ListingRecord]:
    """Normalized feed records when a feed is configured and usable, else the listings at fair value."""
    if settings.feed_path:
        records = records_from_feed(load_feed(settings.feed_path))
        if records:
            logger.info("Estimator catalog: %d feed records from %s", len(records), settings.feed_path)
            return records
        logger.warning("Feed %s has no usable records; falling back to dashboard listings", settings.feed_path)
    return records_from_listings(listings)


def _listing_row(listing: CarListing) -> dict[str, Any]:
    diff, diff_pct = price_delta(listing)
    row = asdict(listing)
    row["listed_date"] = listing.listed_date.isoformat()
    row["price_diff"] = diff
    row["price_diff_pct"] = diff_pct
    return row


# ── App Factory ─────────────────────────────────────────────────────

def create_app(settings: DashboardSettings | None = None) -> FastAPI:
    settings = settings or DashboardSettings()
    configure_logging(level=settings.log_level, fmt=settings.log_format)

    cfg = DashboardConfig(
        trend_months=settings.trend_months,
        top_brands=settings.top_brands,
        new_listing_days=settings.new_listing_days,
        default_estimate_year=settings.default_estimate_year,
    )
    listings = load_listings(settings.listings_path)
    catalog = build_estimation_catalog(settings, listings)
    logger.info("Loaded %d listings, %d estimator records", len(listings), len(catalog))

    def as_of() -> date:
        return settings.as_of_date or date.today()

    app = FastAPI(title="Vehicle Marketplace Dashboard API", version="0.1.0")

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Response:
        rid = request.headers.get("X-Request-ID") or new_request_id()
        request_id.set(rid)
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    # ── Cascading Selection ─────────────────────────────────────────

    @app.get("/catalog/makes")
    async def get_makes() -> dict[str, Any]:
        return {"makes": distinct_makes(catalog)}

    @app.get("/catalog/models")
    async def get_models(make: str = Query(min_length=1)) -> dict[str, Any]:
        return {"make": make, "models": models_for_make(catalog, make)}

    @app.get("/catalog/years")
    async def get_years(make: str = Query(min_length=1), model: str = Query(min_length=1)) -> dict[str, Any]:
        return {"make": make, "model": model, "years": years_for_make_model(catalog, make, model)}

    # ── Fair Price ──────────────────────────────────────────────────

    @app.post("/fair-price", response_model=FairPriceResponse)
    async def fair_price(payload: FairPriceRequest) -> FairPriceResponse:
        try:
            mileage = parse_mileage(payload.mileage)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        year = payload.year if payload.year is not None else cfg.default_estimate_year
        logger.info(
            "Fair price request for %s %s",
            payload.make,
            payload.model,
            extra={"context": {"make": payload.make, "model": payload.model, "year": year, "mileage": mileage}},
        )
        result = estimate_fair_price(catalog, payload.make, payload.model, year, mileage)
        if result is None:
            logger.info("No comparables for make %s", payload.make)
            return FairPriceResponse(
                available=False,
                make=payload.make,
                model=payload.model,
                year=year,
                mileage=mileage,
                message=f"Insufficient data for {payload.make}",
            )

        return FairPriceResponse(
            available=True,
            make=payload.make,
            model=payload.model,
            year=year,
            mileage=mileage,
            estimated_price=result.estimated_price,
            price_range=result.price_range,
            confidence=result.confidence,
            comparable_count=result.comparable_count,
            display={
                "estimated_price": format_currency(result.estimated_price),
                "price_range": format_price_range(result.price_range),
                "mileage": format_mileage(mileage),
                "confidence_tone": confidence_tone(result.confidence),
                "comparables": f"Based on {result.comparable_count} comparable listings",
            },
        )

    # ── Dashboard Panels ────────────────────────────────────────────

    @app.get("/dashboard/kpis")
    async def get_kpis() -> dict[str, Any]:
        day = as_of()
        summary = kpi_summary(listings, as_of=day, new_listing_days=cfg.new_listing_days)
        return {"as_of": day.isoformat(), **asdict(summary)}

    @app.get("/dashboard/price-trends")
    async def get_price_trends() -> dict[str, Any]:
        return {"points": [asdict(p) for p in price_trends(listings, months=cfg.trend_months)]}

    @app.get("/dashboard/listing-volume")
    async def get_listing_volume() -> dict[str, Any]:
        return {"points": [asdict(p) for p in listing_volume(listings, months=cfg.trend_months)]}

    @app.get("/dashboard/body-types")
    async def get_body_types() -> dict[str, Any]:
        return {"body_types": [asdict(s) for s in body_type_distribution(listings)]}

    @app.get("/dashboard/brands")
    async def get_brands() -> dict[str, Any]:
        return {"brands": [asdict(s) for s in brand_distribution(listings, top=cfg.top_brands)]}

    @app.get("/dashboard/mileage-price")
    async def get_mileage_price() -> dict[str, Any]:
        return {"points": [asdict(p) for p in mileage_price_points(listings)]}

    @app.get("/dashboard/years")
    async def get_years_distribution() -> dict[str, Any]:
        return {"years": [asdict(y) for y in year_distribution(listings)]}

    # ── Listings Table ──────────────────────────────────────────────

    @app.get("/listings")
    async def get_listings(
        search: str = "",
        make: str = "all",
        sort: str = "listed_date",
        order: str = "desc",
    ) -> dict[str, Any]:
        try:
            table_sort = TableSort(field=sort, order=order)  # type: ignore[arg-type]
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        rows = [_listing_row(c) for c in query_listings(listings, search=search, make=make, sort=table_sort)]
        return {"count": len(rows), "makes": sorted({c.make for c in listings}), "listings": rows}

    return app


app = create_app()
