from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.identity import Identity
from app.core.security import decode_token
from app.models.user import User, UserRole

# auto_error is off so anonymous callers reach endpoints that allow them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_optional_user(
    db: Session = Depends(get_db),
    token: str | None = Depends(oauth2_scheme),
) -> User | None:
    if not token:
        return None

    try:
        payload = decode_token(token)
    except JWTError:
        raise _credentials_exception()

    user_id = payload.get("sub")
    token_session_version = payload.get("sv")
    if payload.get("typ") != "access" or not user_id or token_session_version is None:
        raise _credentials_exception()

    user = db.get(User, int(user_id))
    if not user:
        raise _credentials_exception()
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User inactive")
    if user.session_version != int(token_session_version):
        raise HTTPException(status_code=401, detail="Session revoked")
    return user


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise _credentials_exception()
    return user


def get_identity(user: User | None = Depends(get_optional_user)) -> Identity:
    return Identity.of(user) if user else Identity.anonymous()


def require_roles(*roles: UserRole):
    def role_dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return current_user

    return role_dependency
