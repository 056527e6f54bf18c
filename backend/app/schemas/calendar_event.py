from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.calendar_event import CalendarEventType
from app.schemas.common import naive_utc


class CalendarEventCreate(BaseModel):
    client_id: int | None = None
    property_id: int | None = None
    event_type: CalendarEventType
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    start_time: datetime
    end_time: datetime
    reminder: bool = False

    _utc = field_validator("start_time", "end_time")(naive_utc)


class CalendarEventUpdate(BaseModel):
    client_id: int | None = None
    property_id: int | None = None
    event_type: CalendarEventType | None = None
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    reminder: bool | None = None

    _utc = field_validator("start_time", "end_time")(naive_utc)


class CalendarEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    broker_id: int
    client_id: int | None
    property_id: int | None
    event_type: CalendarEventType
    title: str
    description: str | None
    start_time: datetime
    end_time: datetime
    reminder: bool
    created_at: datetime
    updated_at: datetime
