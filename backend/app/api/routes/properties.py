from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user, require_roles
from app.models.property import Property
from app.models.user import User, UserRole
from app.schemas.property import PropertyCreate, PropertyResponse, PropertyUpdate
from app.services.audit import audit_event

router = APIRouter(prefix="/properties", tags=["properties"])


def _can_manage(user: User, prop: Property) -> bool:
    if prop.broker_id == user.id:
        return True
    return user.role == UserRole.company and user.agency_id is not None and prop.agency_id == user.agency_id


def _get_managed_property(db: Session, property_id: int, user: User) -> Property:
    prop = db.get(Property, property_id)
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    if not _can_manage(user, prop):
        raise HTTPException(status_code=403, detail="You can only manage your own listings")
    return prop


@router.post("", response_model=PropertyResponse, status_code=201)
def create_property(
    payload: PropertyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    prop = Property(**payload.model_dump(), broker_id=current_user.id, agency_id=current_user.agency_id)
    db.add(prop)
    db.commit()
    db.refresh(prop)
    audit_event(db, "property_create", "property", user_id=current_user.id, resource_id=prop.id)
    return prop


@router.get("", response_model=list[PropertyResponse])
def list_my_properties(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return (
        db.query(Property)
        .filter(Property.broker_id == current_user.id)
        .order_by(Property.created_at.desc(), Property.id.desc())
        .all()
    )


@router.get("/agency", response_model=list[PropertyResponse])
def list_agency_properties(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.company)),
):
    if current_user.agency_id is None:
        return []
    return (
        db.query(Property)
        .filter(Property.agency_id == current_user.agency_id)
        .order_by(Property.created_at.desc(), Property.id.desc())
        .all()
    )


@router.get("/{property_id}", response_model=PropertyResponse)
def get_property(property_id: int, db: Session = Depends(get_db)):
    prop = db.get(Property, property_id)
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    return prop


@router.patch("/{property_id}", response_model=PropertyResponse)
def update_property(
    property_id: int,
    payload: PropertyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    prop = _get_managed_property(db, property_id, current_user)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(prop, key, value)
    db.commit()
    db.refresh(prop)
    audit_event(db, "property_update", "property", user_id=current_user.id, resource_id=prop.id)
    return prop


@router.delete("/{property_id}", status_code=204)
def delete_property(property_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    prop = _get_managed_property(db, property_id, current_user)
    db.delete(prop)
    db.commit()
    audit_event(db, "property_delete", "property", user_id=current_user.id, resource_id=property_id)
