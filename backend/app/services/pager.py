import logging
import math
import re
from dataclasses import dataclass, field

from sqlalchemy import and_, cast, false, func, or_, select
from sqlalchemy.dialects.postgresql import REGCONFIG
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import StorageError
from app.models.property import Property
from app.schemas.search import SearchFilters
from app.services.query_composer import CONTAINS, EQ, GTE, LTE, TEXT, Predicate, QueryPlan, compose_query

logger = logging.getLogger(__name__)

_WORD = re.compile(r"\w+")


@dataclass
class SearchResultPage:
    items: list[Property] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 10

    @property
    def total_pages(self) -> int:
        if self.total_count <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)


def _text_columns():
    return (Property.description, Property.city, Property.district, Property.street)


def _text_clause(terms: tuple[str, ...], dialect_name: str):
    """Every term must occur somewhere in the listing's text columns.

    Postgres parses each term with ``plainto_tsquery`` so punctuation in user
    input never reaches the tsquery grammar. Elsewhere each word of a term is
    a substring match on any text column.
    """
    if dialect_name == "postgresql":
        config = cast(get_settings().SEARCH_TEXT_CONFIG, REGCONFIG)
        document = func.to_tsvector(config, func.concat_ws(" ", *_text_columns()))
        query = func.plainto_tsquery(config, terms[0])
        for term in terms[1:]:
            query = query.op("&&")(func.plainto_tsquery(config, term))
        return document.bool_op("@@")(query)

    words = [word for term in terms for word in _WORD.findall(term)]
    if not words:
        # an empty tsquery matches nothing either
        return false()
    return and_(
        *[or_(*[column.icontains(word, autoescape=True) for column in _text_columns()]) for word in words]
    )


def predicate_clause(predicate: Predicate, dialect_name: str):
    if predicate.op == TEXT:
        return _text_clause(predicate.value, dialect_name)

    column = getattr(Property, predicate.column)
    if predicate.op == EQ:
        return column == predicate.value
    if predicate.op == CONTAINS:
        return column.icontains(predicate.value, autoescape=True)
    if predicate.op == GTE:
        return column >= predicate.value
    if predicate.op == LTE:
        return column <= predicate.value
    raise ValueError(f"Unsupported predicate operator: {predicate.op}")


def execute_plan(db: Session, plan: QueryPlan) -> SearchResultPage:
    """Run ``plan`` and return one page plus the total matching count.

    Rows and total come back from one statement via ``count(*) OVER ()``. A
    page past the end returns no rows to read the total from, so only then is
    a separate count issued.
    """
    dialect_name = db.get_bind().dialect.name
    clauses = [predicate_clause(p, dialect_name) for p in plan.predicates]

    sort_column = getattr(Property, plan.sort.column)
    order = sort_column.desc() if plan.sort.descending else sort_column.asc()
    tiebreak = Property.id.desc() if plan.sort.descending else Property.id.asc()

    stmt = (
        select(Property, func.count().over().label("total_count"))
        .where(*clauses)
        .order_by(order.nulls_last(), tiebreak)
        .offset(plan.offset)
        .limit(plan.limit)
    )

    try:
        rows = db.execute(stmt).all()
        if rows:
            total = rows[0].total_count
        elif plan.offset == 0:
            total = 0
        else:
            total = db.scalar(select(func.count()).select_from(Property).where(*clauses)) or 0
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Property search query failed: %s", exc)
        raise StorageError("Failed to fetch properties", details=str(getattr(exc, "orig", None) or exc)) from exc

    return SearchResultPage(
        items=[row[0] for row in rows],
        total_count=total,
        page=plan.page,
        page_size=plan.page_size,
    )


def search_listings(db: Session, filters: SearchFilters) -> SearchResultPage:
    plan = compose_query(filters)
    result = execute_plan(db, plan)
    logger.info(
        "Search matched %s properties (page %s/%s, %s predicates)",
        result.total_count,
        result.page,
        result.total_pages,
        len(plan.predicates),
    )
    return result
