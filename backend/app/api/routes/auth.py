from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.rate_limit import limiter
from app.core.security import create_access_token, get_password_hash, validate_password_strength, verify_password
from app.models.agency import Agency
from app.models.user import User, UserRole
from app.schemas.auth import TokenResponse, UserCreate, UserResponse
from app.services.audit import audit_event

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=201)
@limiter.limit("10/minute")
def register(request: Request, payload: UserCreate, db: Session = Depends(get_db)):
    settings = get_settings()
    if not settings.ALLOW_PUBLIC_SIGNUP:
        raise HTTPException(status_code=403, detail="Public signup is disabled")

    existing = db.query(User).filter(User.email == payload.email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    if not validate_password_strength(payload.password):
        raise HTTPException(status_code=400, detail="Weak password. Use 8+ chars with letters and a number.")

    agency = None
    if payload.role == UserRole.company:
        if not payload.agency_name or not payload.agency_name.strip():
            raise HTTPException(status_code=400, detail="agency_name is required for company accounts")
        agency = Agency(name=payload.agency_name.strip(), contact_email=payload.email, contact_phone=payload.phone)
        db.add(agency)
        db.flush()

    user = User(
        email=payload.email,
        name=payload.name,
        phone=payload.phone,
        role=payload.role,
        agency_id=agency.id if agency else None,
        hashed_password=get_password_hash(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    audit_event(db, "register", "auth", user_id=user.id)
    return user


@router.post("/login", response_model=TokenResponse)
@limiter.limit("20/minute")
def login(request: Request, form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == form_data.username).first()
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Incorrect email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User inactive")

    audit_event(db, "login_success", "auth", user_id=user.id)
    return TokenResponse(access_token=create_access_token(str(user.id), user.session_version))


@router.post("/revoke")
def revoke_sessions(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    current_user.session_version += 1
    db.commit()
    return {"status": "revoked"}


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
