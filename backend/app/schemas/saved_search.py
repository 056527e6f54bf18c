from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.schemas.search import SearchFilters


class SavedSearchCreate(BaseModel):
    name: str
    filters: SearchFilters


class SavedSearchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    filters: dict
    created_at: datetime
