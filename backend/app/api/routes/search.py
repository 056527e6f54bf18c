from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import ValidationError
from app.core.rate_limit import limiter
from app.schemas.property import PropertyResponse
from app.schemas.search import SearchFilters, SearchResponse
from app.services.pager import SearchResultPage, search_listings
from app.services.saved_searches import decode_filters_param

router = APIRouter(prefix="/search", tags=["search"])


def search_filters(
    property_type: str | None = Query(None, alias="propertyType"),
    purpose: str | None = None,
    city: str | None = None,
    district: str | None = None,
    min_price: str | None = Query(None, alias="minPrice"),
    max_price: str | None = Query(None, alias="maxPrice"),
    min_area: str | None = Query(None, alias="minArea"),
    max_area: str | None = Query(None, alias="maxArea"),
    rooms: str | None = None,
    floor: str | None = None,
    heating_type: str | None = Query(None, alias="heatingType"),
    keywords: str | None = None,
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    page: str | None = None,
    limit: str | None = None,
    filters: str | None = Query(None, description="JSON snapshot from a saved search; resets to page 1"),
) -> SearchFilters:
    if filters:
        applied = decode_filters_param(filters)
        if limit:
            applied = _with_limit(applied, limit)
        return applied

    try:
        return SearchFilters.model_validate(
            {
                "propertyType": property_type,
                "purpose": purpose,
                "city": city,
                "district": district,
                "minPrice": min_price,
                "maxPrice": max_price,
                "minArea": min_area,
                "maxArea": max_area,
                "rooms": rooms,
                "floor": floor,
                "heatingType": heating_type,
                "keywords": keywords,
                "sortBy": sort_by,
                "sortOrder": sort_order,
                "page": page,
                "limit": limit,
            }
        )
    except PydanticValidationError as exc:
        raise ValidationError("Invalid search parameters", details=str(exc)) from exc


def _with_limit(filters: SearchFilters, limit: str) -> SearchFilters:
    try:
        return SearchFilters.model_validate({**filters.model_dump(by_alias=True), "limit": limit})
    except PydanticValidationError as exc:
        raise ValidationError("Invalid search parameters", details=str(exc)) from exc


def to_search_response(result: SearchResultPage) -> SearchResponse:
    return SearchResponse(
        properties=[PropertyResponse.model_validate(item) for item in result.items],
        count=result.total_count,
        page=result.page,
        limit=result.page_size,
        total_pages=result.total_pages,
    )


@router.get("", response_model=SearchResponse)
@limiter.limit("120/minute")
def search_properties(
    request: Request,
    filters: SearchFilters = Depends(search_filters),
    db: Session = Depends(get_db),
):
    return to_search_response(search_listings(db, filters))
