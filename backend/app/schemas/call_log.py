from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import naive_utc


class CallLogCreate(BaseModel):
    client_id: int | None = None
    property_id: int | None = None
    description: str = Field(min_length=1)
    call_time: datetime
    duration_minutes: int | None = Field(default=None, ge=0)
    outcome: str | None = None
    reminder_at: datetime | None = None

    _utc = field_validator("call_time", "reminder_at")(naive_utc)


class CallLogUpdate(BaseModel):
    client_id: int | None = None
    property_id: int | None = None
    description: str | None = Field(default=None, min_length=1)
    call_time: datetime | None = None
    duration_minutes: int | None = Field(default=None, ge=0)
    outcome: str | None = None
    reminder_at: datetime | None = None

    _utc = field_validator("call_time", "reminder_at")(naive_utc)


class CallLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    broker_id: int
    client_id: int | None
    property_id: int | None
    description: str
    call_time: datetime
    duration_minutes: int | None
    outcome: str | None
    reminder_at: datetime | None
    reminder_sent: bool
    created_at: datetime
    updated_at: datetime
