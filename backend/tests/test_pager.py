import math

import pytest
from hypothesis import given, strategies as st
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from app.core.errors import StorageError
from app.models.property import PropertyType
from app.schemas.search import SearchFilters
from app.services.pager import SearchResultPage, predicate_clause, search_listings
from app.services.query_composer import TEXT, Predicate

VILNIUS_PRICES = [50000, 75000, 100000, 125000, 150000, 175000, 200000, 225000, 250000, 275000, 290000, 300000]


@pytest.fixture
def vilnius_listings(alice, make_property):
    listings = [make_property(alice, price=float(price), area_m2=40.0 + i) for i, price in enumerate(VILNIUS_PRICES)]
    make_property(alice, city="Kaunas", price=150000.0)
    make_property(alice, type=PropertyType.house, price=150000.0)
    return listings


@given(total=st.integers(min_value=0, max_value=10_000), page_size=st.integers(min_value=1, max_value=100))
def test_total_pages_is_ceiling(total, page_size):
    page = SearchResultPage(total_count=total, page_size=page_size)
    expected = 0 if total == 0 else math.ceil(total / page_size)
    assert page.total_pages == expected


def test_price_range_sorted_ascending(db, vilnius_listings):
    filters = SearchFilters.model_validate(
        {
            "propertyType": "apartment",
            "city": "Vilnius",
            "minPrice": "100000",
            "maxPrice": "200000",
            "sortBy": "price",
            "sortOrder": "asc",
        }
    )

    result = search_listings(db, filters)

    prices = [p.price for p in result.items]
    assert prices == [100000.0, 125000.0, 150000.0, 175000.0, 200000.0]
    assert result.total_count == 5
    assert result.total_pages == 1


def test_pages_split_matches(db, vilnius_listings):
    base = {"propertyType": "apartment", "city": "vilnius", "sortBy": "price", "sortOrder": "asc", "limit": 5}

    first = search_listings(db, SearchFilters.model_validate(base))
    last = search_listings(db, SearchFilters.model_validate({**base, "page": 3}))

    assert first.total_count == 12
    assert first.total_pages == 3
    assert [p.price for p in first.items] == [50000.0, 75000.0, 100000.0, 125000.0, 150000.0]
    assert [p.price for p in last.items] == [290000.0, 300000.0]
    assert last.total_count == 12


def test_page_past_end_keeps_total(db, vilnius_listings):
    result = search_listings(db, SearchFilters(city="Vilnius", property_type=PropertyType.apartment, page=9, page_size=5))

    assert result.items == []
    assert result.total_count == 12
    assert result.page == 9
    assert result.total_pages == 3


def test_no_matches(db, vilnius_listings):
    result = search_listings(db, SearchFilters(city="Šiauliai"))

    assert result.items == []
    assert result.total_count == 0
    assert result.total_pages == 0


@pytest.mark.parametrize("low, high", [(0, 60000), (100000, 100000), (180000, 260000), (310000, 400000)])
def test_results_stay_within_price_bounds(db, vilnius_listings, low, high):
    result = search_listings(db, SearchFilters(min_price=low, max_price=high, page_size=100))

    assert all(low <= p.price <= high for p in result.items)
    # the Kaunas flat and the Vilnius house are both priced 150000
    others = 2 if low <= 150000 <= high else 0
    assert result.total_count == sum(low <= price <= high for price in VILNIUS_PRICES) + others


def test_default_sort_is_newest_first(db, vilnius_listings):
    result = search_listings(db, SearchFilters(page_size=100))
    ids = [p.id for p in result.items]
    assert ids == sorted(ids, reverse=True)


def test_keywords_require_every_term(db, alice, make_property):
    both = make_property(alice, description="Renovated flat with a sunny balcony")
    make_property(alice, description="Renovated flat near the park")
    make_property(alice, description="Old flat, balcony needs work")

    result = search_listings(db, SearchFilters(keywords="  renovated   balcony "))

    assert [p.id for p in result.items] == [both.id]


def test_database_failure_raises_storage_error(db, vilnius_listings, monkeypatch):
    def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "execute", broken_execute)

    with pytest.raises(StorageError) as excinfo:
        search_listings(db, SearchFilters())

    assert excinfo.value.message == "Failed to fetch properties"
    assert excinfo.value.to_dict() == {"error": "Failed to fetch properties", "details": "connection lost"}


def test_keywords_with_punctuation(db, alice, make_property):
    match = make_property(alice, description="O'Brien's renovated flat, sunny balcony!")
    make_property(alice, description="Renovated flat without outdoor space")

    result = search_listings(db, SearchFilters(keywords="balcony! O'Brien & renovated,"))

    assert [p.id for p in result.items] == [match.id]


def test_keywords_that_are_only_punctuation_match_nothing(db, vilnius_listings):
    result = search_listings(db, SearchFilters(keywords="& !"))

    assert result.items == []
    assert result.total_count == 0


def test_keywords_search_location_columns(db, alice, make_property):
    on_street = make_property(alice, district="Žvėrynas", street="Vytauto", description="Quiet flat")
    make_property(alice, district="Naujamiestis", street="Gedimino", description="Quiet flat")

    result = search_listings(db, SearchFilters(keywords="quiet vytauto"))

    assert [p.id for p in result.items] == [on_street.id]


def test_postgres_keywords_are_bound_as_plain_queries():
    clause = predicate_clause(Predicate("fts", TEXT, ("balcony!", "O'Brien", "a:")), "postgresql")

    compiled = clause.compile(dialect=postgresql.dialect())
    sql = str(compiled)

    assert sql.count("plainto_tsquery(") == 3
    assert " to_tsquery(" not in sql
    assert "&&" in sql
    assert {"balcony!", "O'Brien", "a:"} <= set(compiled.params.values())
