import enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.config import get_settings
from app.models.property import ListingPurpose, PropertyType
from app.schemas.property import PropertyResponse


class SortField(str, enum.Enum):
    created_at = "created_at"
    price = "price"
    area = "area"


class SortOrder(str, enum.Enum):
    asc = "asc"
    desc = "desc"


def _default_page_size() -> int:
    return get_settings().SEARCH_PAGE_SIZE


# OFFSET is a signed 64-bit integer in the stores we run on.
MAX_OFFSET = 2**63 - 1


def max_page() -> int:
    """Largest page whose offset fits ``MAX_OFFSET`` at any allowed page size."""
    return MAX_OFFSET // get_settings().SEARCH_MAX_PAGE_SIZE + 1


class SearchFilters(BaseModel):
    """Flat search request. Wire names are camelCase, attributes snake_case.

    Blank strings count as absent, so ``SearchFilters.model_validate({})`` and a
    form submitted with every field empty produce the same value.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    property_type: PropertyType | None = Field(default=None, alias="propertyType")
    purpose: ListingPurpose | None = None
    city: str | None = None
    district: str | None = None
    min_price: float | None = Field(default=None, alias="minPrice")
    max_price: float | None = Field(default=None, alias="maxPrice")
    min_area: float | None = Field(default=None, alias="minArea")
    max_area: float | None = Field(default=None, alias="maxArea")
    rooms: int | None = None
    floor: int | None = None
    heating_type: str | None = Field(default=None, alias="heatingType")
    keywords: str | None = None

    sort_by: SortField = Field(default=SortField.created_at, alias="sortBy")
    sort_order: SortOrder = Field(default=SortOrder.desc, alias="sortOrder")
    page: int = 1
    page_size: int = Field(default_factory=_default_page_size, alias="limit")

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data):
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            if isinstance(value, str):
                value = value.strip()
            if value is None or value == "":
                continue
            cleaned[key] = value
        return cleaned

    @field_validator("page")
    @classmethod
    def _clamp_page(cls, value: int) -> int:
        if value > max_page():
            raise ValueError(f"page must be at most {max_page()}")
        return max(value, 1)

    @field_validator("page_size")
    @classmethod
    def _clamp_page_size(cls, value: int) -> int:
        return min(max(value, 1), get_settings().SEARCH_MAX_PAGE_SIZE)


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    properties: list[PropertyResponse]
    count: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")
