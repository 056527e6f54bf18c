from dataclasses import dataclass

from app.core.errors import AuthenticationRequired
from app.models.user import User, UserRole


@dataclass(frozen=True)
class Identity:
    """The caller of a service operation: a user id, or anonymous."""

    user_id: int | None = None
    role: UserRole | None = None
    agency_id: int | None = None

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls()

    @classmethod
    def of(cls, user: User) -> "Identity":
        return cls(user_id=user.id, role=user.role, agency_id=user.agency_id)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require_user_id(self, message: str = "You must be logged in.") -> int:
        if self.user_id is None:
            raise AuthenticationRequired(message)
        return self.user_id
