import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs512"
os.environ["SMTP_HOST"] = ""

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.core.identity import Identity
from app.core.security import create_access_token, get_password_hash
from app.main import app
from app.models.agency import Agency
from app.models.property import ListingPurpose, Property, PropertyType
from app.models.user import User, UserRole

PASSWORD = "correct-horse-9"
_password_hash = None


def _hashed_password() -> str:
    global _password_hash
    if _password_hash is None:
        _password_hash = get_password_hash(PASSWORD)
    return _password_hash


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make_user(email: str, role: UserRole = UserRole.individual, agency: Agency | None = None, name: str | None = None) -> User:
        user = User(
            email=email,
            name=name or email.split("@")[0].title(),
            hashed_password=_hashed_password(),
            role=role,
            agency_id=agency.id if agency else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_property(db):
    def _make_property(broker: User, **fields) -> Property:
        defaults = {
            "city": "Vilnius",
            "district": "Senamiestis",
            "type": PropertyType.apartment,
            "purpose": ListingPurpose.sale,
            "price": 150000.0,
            "area_m2": 60.0,
            "num_rooms": 2,
            "floor_number": 3,
            "heating_type": "central",
            "description": "Bright flat",
            "images": [],
        }
        defaults.update(fields)
        prop = Property(broker_id=broker.id, agency_id=broker.agency_id, **defaults)
        db.add(prop)
        db.commit()
        db.refresh(prop)
        return prop

    return _make_property


@pytest.fixture
def alice(make_user):
    return make_user("alice@brokers.lt")


@pytest.fixture
def bob(make_user):
    return make_user("bob@brokers.lt")


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.session_version)}"}


def identity_of(user: User) -> Identity:
    return Identity.of(user)
