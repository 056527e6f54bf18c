import os

from app.core.database import Base, SessionLocal, engine
from app.core.security import get_password_hash
from app.models.agency import Agency
from app.models.user import User, UserRole


def create_agency_account(email: str, password: str, agency_name: str) -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"User already exists: {email}")
            return

        agency = Agency(name=agency_name, contact_email=email)
        db.add(agency)
        db.flush()
        db.add(
            User(
                email=email,
                name=agency_name,
                hashed_password=get_password_hash(password),
                role=UserRole.company,
                agency_id=agency.id,
            )
        )
        db.commit()
        print(f"Created agency {agency_name!r} with account {email}")
    finally:
        db.close()


if __name__ == "__main__":
    email = os.getenv("BOOTSTRAP_AGENCY_EMAIL")
    password = os.getenv("BOOTSTRAP_AGENCY_PASSWORD")
    if email and password:
        create_agency_account(email, password, os.getenv("BOOTSTRAP_AGENCY_NAME", "Premium Property"))
    else:
        print("Bootstrap skipped. Set BOOTSTRAP_AGENCY_EMAIL and BOOTSTRAP_AGENCY_PASSWORD to create an agency account.")
