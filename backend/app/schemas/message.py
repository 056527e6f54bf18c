from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.auth import UserSummary


class MessageCreate(BaseModel):
    receiver_id: int
    property_id: int | None = None
    content: str = Field(min_length=1, max_length=4000)


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_id: int
    receiver_id: int
    property_id: int | None
    content: str
    is_read: bool
    sent_at: datetime
    sender: UserSummary | None = None
    receiver: UserSummary | None = None


class ConversationPartner(UserSummary):
    unread_count: int = 0
