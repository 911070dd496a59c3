from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal, Sequence, get_args

from marketplace.data_models import CarListing

SortField = Literal["price", "year", "mileage", "listed_date"]
SortOrder = Literal["asc", "desc"]

SORT_FIELDS: tuple[str, ...] = get_args(SortField)
SORT_ORDERS: tuple[str, ...] = get_args(SortOrder)


@dataclass(frozen=True)
class TableSort:
    field: SortField = "listed_date"
    order: SortOrder = "desc"

    def __post_init__(self) -> None:
        if self.field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field {self.field!r}; expected one of {', '.join(SORT_FIELDS)}")
        if self.order not in SORT_ORDERS:
            raise ValueError(f"Unknown sort order {self.order!r}; expected asc or desc")

    def toggle(self, field: SortField) -> TableSort:
        if field == self.field:
            return replace(self, order="asc" if self.order == "desc" else "desc")
        return TableSort(field=field, order="desc")


def query_listings(
    listings: Sequence[CarListing],
    search: str = "",
    make: str = "all",
    sort: TableSort = TableSort(),
) -> list[CarListing]:
    items = list(listings)

    if search:
        q = search.lower()
        items = [
            c for c in items
            if q in c.make.lower() or q in c.model.lower() or q in str(c.year)
        ]

    if make != "all":
        items = [c for c in items if c.make == make]

    return sorted(items, key=lambda c: getattr(c, sort.field), reverse=sort.order == "desc")


def price_delta(listing: CarListing) -> tuple[float, float | None]:
    diff = listing.price - listing.fair_price
    if listing.fair_price <= 0:
        return diff, None
    return diff, round(diff / listing.fair_price * 100, 1)
