from datetime import datetime
import enum

from sqlalchemy import JSON, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class PropertyType(str, enum.Enum):
    apartment = "apartment"
    house = "house"
    commercial = "commercial"


class ListingPurpose(str, enum.Enum):
    sale = "sale"
    rent = "rent"


class ListingStatus(str, enum.Enum):
    active = "active"
    pending = "pending"
    sold = "sold"
    rented = "rented"


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    broker_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    agency_id: Mapped[int | None] = mapped_column(ForeignKey("agencies.id"), index=True)

    city: Mapped[str | None] = mapped_column(String(120), index=True)
    district: Mapped[str | None] = mapped_column(String(120))
    street: Mapped[str | None] = mapped_column(String(160))
    house_number: Mapped[str | None] = mapped_column(String(20))

    heating_type: Mapped[str | None] = mapped_column(String(60))
    floor_number: Mapped[int | None] = mapped_column(Integer)
    num_rooms: Mapped[int | None] = mapped_column(Integer)
    area_m2: Mapped[float | None] = mapped_column(Float)
    price: Mapped[float | None] = mapped_column(Float, index=True)

    purpose: Mapped[ListingPurpose | None] = mapped_column(Enum(ListingPurpose))
    type: Mapped[PropertyType | None] = mapped_column(Enum(PropertyType))
    status: Mapped[ListingStatus] = mapped_column(Enum(ListingStatus), default=ListingStatus.active, nullable=False)

    description: Mapped[str | None] = mapped_column(Text)
    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, onupdate=datetime.utcnow)
