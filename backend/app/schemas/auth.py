from pydantic import BaseModel, ConfigDict, EmailStr

from app.models.user import UserRole


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    name: str | None = None
    phone: str | None = None
    role: UserRole = UserRole.individual
    # Only used for company signups: creates the agency the user belongs to.
    agency_name: str | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    name: str | None
    phone: str | None
    role: UserRole
    agency_id: int | None


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    email: EmailStr
    profile_picture: str | None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
