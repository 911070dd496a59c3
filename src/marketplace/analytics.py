from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import date, timedelta
from typing import Sequence

import pandas as pd

from marketplace.data_models import CarListing
from marketplace.estimator import round_half_up


@dataclass(frozen=True)
class PriceTrendPoint:
    month: str
    avg_price: int
    median_price: int
    listings: int


@dataclass(frozen=True)
class VolumePoint:
    month: str
    listings: int


@dataclass(frozen=True)
class BodyTypeStat:
    type: str
    count: int
    avg_price: int
    pct_change: float | None


@dataclass(frozen=True)
class BrandStat:
    name: str
    count: int
    avg_price: int


@dataclass(frozen=True)
class MileagePricePoint:
    mileage: float
    price: float
    make: str


@dataclass(frozen=True)
class YearCount:
    year: str
    count: int


@dataclass(frozen=True)
class KpiSummary:
    total_listings: int
    avg_price: int
    avg_price_change: float | None
    median_price: int
    median_price_change: float | None
    avg_mileage: int
    avg_mileage_change: float | None
    new_listings: int
    new_listings_change: float | None
    great_deals: int
    great_deals_change: float | None


_LISTING_COLUMNS = [f.name for f in fields(CarListing)]


def listings_frame(listings: Sequence[CarListing]) -> pd.DataFrame:
    frame = pd.DataFrame([asdict(c) for c in listings], columns=_LISTING_COLUMNS)
    frame["listed_date"] = pd.to_datetime(frame["listed_date"])
    frame["month"] = frame["listed_date"].dt.to_period("M")
    frame["is_great_deal"] = frame["deal_rating"].eq("Great Deal")
    return frame


def percent_change(current: float | None, previous: float | None) -> float | None:
    if current is None or previous is None or pd.isna(current) or pd.isna(previous) or previous == 0:
        return None
    return round((float(current) - float(previous)) / float(previous) * 100, 1)


def _monthly(frame: pd.DataFrame) -> pd.DataFrame:
    return (
        frame.groupby("month")
        .agg(
            avg_price=("price", "mean"),
            median_price=("price", "median"),
            avg_mileage=("mileage", "mean"),
            listings=("id", "count"),
            great_deals=("is_great_deal", "sum"),
        )
        .sort_index()
    )


def price_trends(listings: Sequence[CarListing], months: int = 6) -> list[PriceTrendPoint]:
    if not listings:
        return []
    monthly = _monthly(listings_frame(listings)).tail(months)
    return [
        PriceTrendPoint(
            month=period.strftime("%b"),
            avg_price=round_half_up(float(row.avg_price)),
            median_price=round_half_up(float(row.median_price)),
            listings=int(row.listings),
        )
        for period, row in monthly.iterrows()
    ]


def listing_volume(listings: Sequence[CarListing], months: int = 6) -> list[VolumePoint]:
    return [VolumePoint(month=p.month, listings=p.listings) for p in price_trends(listings, months)]


def body_type_distribution(listings: Sequence[CarListing]) -> list[BodyTypeStat]:
    if not listings:
        return []
    frame = listings_frame(listings)
    overall = frame.groupby("body_type").agg(n_listings=("id", "count"), avg_price=("price", "mean"))

    periods = sorted(frame["month"].unique())
    changes: dict[str, float | None] = {}
    if len(periods) >= 2:
        latest = frame[frame["month"] == periods[-1]].groupby("body_type")["price"].mean()
        previous = frame[frame["month"] == periods[-2]].groupby("body_type")["price"].mean()
        for body_type in overall.index:
            changes[body_type] = percent_change(latest.get(body_type), previous.get(body_type))

    overall = overall.reset_index().sort_values(["n_listings", "body_type"], ascending=[False, True])
    return [
        BodyTypeStat(
            type=str(row.body_type),
            count=int(row.n_listings),
            avg_price=round_half_up(float(row.avg_price)),
            pct_change=changes.get(row.body_type),
        )
        for row in overall.itertuples(index=False)
    ]


def brand_distribution(listings: Sequence[CarListing], top: int = 8) -> list[BrandStat]:
    if not listings:
        return []
    frame = listings_frame(listings)
    stats = (
        frame.groupby("make")
        .agg(n_listings=("id", "count"), avg_price=("price", "mean"))
        .reset_index()
        .sort_values(["n_listings", "make"], ascending=[False, True])
        .head(top)
    )
    return [
        BrandStat(name=str(row.make), count=int(row.n_listings), avg_price=round_half_up(float(row.avg_price)))
        for row in stats.itertuples(index=False)
    ]


def mileage_price_points(listings: Sequence[CarListing]) -> list[MileagePricePoint]:
    points = [MileagePricePoint(mileage=c.mileage, price=c.price, make=c.make) for c in listings]
    return sorted(points, key=lambda p: (p.mileage, p.price))


def year_distribution(listings: Sequence[CarListing]) -> list[YearCount]:
    if not listings:
        return []
    counts = listings_frame(listings).groupby("year")["id"].count().sort_index()
    return [YearCount(year=str(year), count=int(count)) for year, count in counts.items()]


def kpi_summary(listings: Sequence[CarListing], as_of: date, new_listing_days: int = 7) -> KpiSummary:
    """
    Headline numbers for the KPI cards.

    Price, mileage and great-deal changes compare the two latest calendar
    months present in the data. New listings count the ``new_listing_days``
    ending at ``as_of`` (inclusive) against the window right before it.
    """
    if not listings:
        return KpiSummary(0, 0, None, 0, None, 0, None, 0, None, 0, None)

    frame = listings_frame(listings)
    monthly = _monthly(frame)
    latest = monthly.iloc[-1] if len(monthly) >= 2 else None
    previous = monthly.iloc[-2] if len(monthly) >= 2 else None

    def month_change(column: str) -> float | None:
        if latest is None or previous is None:
            return None
        return percent_change(latest[column], previous[column])

    end = pd.Timestamp(as_of)
    window = pd.Timedelta(timedelta(days=new_listing_days))
    listed = frame["listed_date"]
    new_now = int(((listed > end - window) & (listed <= end)).sum())
    new_before = int(((listed > end - 2 * window) & (listed <= end - window)).sum())

    return KpiSummary(
        total_listings=len(frame),
        avg_price=round_half_up(float(frame["price"].mean())),
        avg_price_change=month_change("avg_price"),
        median_price=round_half_up(float(frame["price"].median())),
        median_price_change=month_change("median_price"),
        avg_mileage=round_half_up(float(frame["mileage"].mean())),
        avg_mileage_change=month_change("avg_mileage"),
        new_listings=new_now,
        new_listings_change=percent_change(new_now, new_before),
        great_deals=int(frame["is_great_deal"].sum()),
        great_deals_change=month_change("great_deals"),
    )
