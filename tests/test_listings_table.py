from dataclasses import replace

import pytest

from marketplace.catalog import load_listings
from marketplace.listings_table import TableSort, price_delta, query_listings


def test_default_sort_is_newest_first():
    rows = query_listings(load_listings())
    assert len(rows) == 24
    assert rows[0].id == "23"
    assert rows[-1].listed_date.isoformat() == "2026-01-15"


def test_search_matches_make_model_and_year():
    listings = load_listings()
    assert {c.make for c in query_listings(listings, search="toy")} == {"Toyota"}
    assert len(query_listings(listings, search="TOYOTA")) == 5
    assert [c.model for c in query_listings(listings, search="2019")] == ["F-150"]
    assert [c.model for c in query_listings(listings, search="rav")] == ["RAV4"]


def test_make_filter_and_price_sort():
    rows = query_listings(load_listings(), make="Honda", sort=TableSort(field="price", order="asc"))
    assert [c.price for c in rows] == [24500, 29000, 31200]


def test_make_filter_all_keeps_everything():
    assert len(query_listings(load_listings(), make="all", sort=TableSort(field="mileage"))) == 24


def test_toggle_sort():
    default = TableSort()
    assert default.toggle("listed_date") == TableSort(field="listed_date", order="asc")
    assert default.toggle("listed_date").toggle("listed_date") == default
    assert default.toggle("price") == TableSort(field="price", order="desc")


def test_invalid_sort_rejected():
    with pytest.raises(ValueError):
        TableSort(field="colour")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        TableSort(order="sideways")  # type: ignore[arg-type]


def test_price_delta_against_fair_price():
    camry = load_listings()[0]
    assert price_delta(camry) == (1500, 5.6)
    crv = load_listings()[1]
    diff, pct = price_delta(crv)
    assert diff == -1300
    assert pct == -4.0


def test_price_delta_without_fair_price_has_no_percentage():
    listing = replace(load_listings()[0], fair_price=0.0)
    assert price_delta(listing) == (28500, None)
