from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.property import ListingPurpose, ListingStatus, PropertyType


class PropertyCreate(BaseModel):
    city: str | None = None
    district: str | None = None
    street: str | None = None
    house_number: str | None = None
    heating_type: str | None = None
    floor_number: int | None = None
    num_rooms: int | None = Field(default=None, ge=0)
    area_m2: float | None = Field(default=None, gt=0)
    price: float | None = Field(default=None, ge=0)
    purpose: ListingPurpose | None = None
    type: PropertyType | None = None
    status: ListingStatus = ListingStatus.active
    description: str | None = None
    images: list[str] = Field(default_factory=list)


class PropertyUpdate(BaseModel):
    city: str | None = None
    district: str | None = None
    street: str | None = None
    house_number: str | None = None
    heating_type: str | None = None
    floor_number: int | None = None
    num_rooms: int | None = Field(default=None, ge=0)
    area_m2: float | None = Field(default=None, gt=0)
    price: float | None = Field(default=None, ge=0)
    purpose: ListingPurpose | None = None
    type: PropertyType | None = None
    status: ListingStatus | None = None
    description: str | None = None
    images: list[str] | None = None


class PropertyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    broker_id: int
    agency_id: int | None
    city: str | None
    district: str | None
    street: str | None
    house_number: str | None
    heating_type: str | None
    floor_number: int | None
    num_rooms: int | None
    area_m2: float | None
    price: float | None
    purpose: ListingPurpose | None
    type: PropertyType | None
    status: ListingStatus
    description: str | None
    images: list[str]
    created_at: datetime
    updated_at: datetime | None
