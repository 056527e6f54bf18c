"""Translate ``SearchFilters`` into a backend-neutral query plan.

The plan is plain data: ``app.services.pager`` is the only place that knows
how to turn it into SQL.
"""

import re
from dataclasses import dataclass
from typing import Any

from app.schemas.search import SearchFilters, SortField, SortOrder

EQ = "eq"
CONTAINS = "contains"
GTE = "gte"
LTE = "lte"
TEXT = "text"

_WHITESPACE = re.compile(r"\s+")

# filter attribute -> (listing column, operator)
FILTER_COLUMNS: dict[str, tuple[str, str]] = {
    "property_type": ("type", EQ),
    "purpose": ("purpose", EQ),
    "city": ("city", CONTAINS),
    "district": ("district", CONTAINS),
    "min_price": ("price", GTE),
    "max_price": ("price", LTE),
    "min_area": ("area_m2", GTE),
    "max_area": ("area_m2", LTE),
    "rooms": ("num_rooms", EQ),
    "floor": ("floor_number", EQ),
    "heating_type": ("heating_type", EQ),
}

SORT_COLUMNS: dict[SortField, str] = {
    SortField.created_at: "created_at",
    SortField.price: "price",
    SortField.area: "area_m2",
}


@dataclass(frozen=True)
class Predicate:
    column: str
    op: str
    value: Any


@dataclass(frozen=True)
class SortKey:
    column: str
    descending: bool


@dataclass(frozen=True)
class QueryPlan:
    predicates: tuple[Predicate, ...]
    sort: SortKey
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


def tokenize_keywords(keywords: str | None) -> list[str]:
    if not keywords:
        return []
    return [token for token in _WHITESPACE.split(keywords) if token]


def keyword_terms(keywords: str | None) -> tuple[str, ...] | None:
    """Terms for an AND text search, or None when nothing is left.

    Terms are kept raw; the pager quotes each one for the store.
    """
    tokens = tokenize_keywords(keywords)
    if not tokens:
        return None
    return tuple(tokens)


def build_predicates(filters: SearchFilters) -> tuple[Predicate, ...]:
    predicates = []
    for attribute, (column, op) in FILTER_COLUMNS.items():
        value = getattr(filters, attribute)
        if value is None or value == "":
            continue
        if hasattr(value, "value"):
            value = value.value
        predicates.append(Predicate(column, op, value))

    terms = keyword_terms(filters.keywords)
    if terms is not None:
        predicates.append(Predicate("fts", TEXT, terms))
    return tuple(predicates)


def compose_query(filters: SearchFilters) -> QueryPlan:
    return QueryPlan(
        predicates=build_predicates(filters),
        sort=SortKey(
            column=SORT_COLUMNS[SortField(filters.sort_by)],
            descending=SortOrder(filters.sort_order) == SortOrder.desc,
        ),
        page=max(filters.page, 1),
        page_size=max(filters.page_size, 1),
    )
