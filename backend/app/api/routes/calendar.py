from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.routes.clients import get_own_client
from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.calendar_event import CalendarEvent
from app.models.user import User
from app.schemas.calendar_event import CalendarEventCreate, CalendarEventResponse, CalendarEventUpdate

router = APIRouter(prefix="/calendar-events", tags=["calendar"])


def _get_own_event(db: Session, event_id: int, broker_id: int) -> CalendarEvent:
    item = db.query(CalendarEvent).filter(CalendarEvent.id == event_id, CalendarEvent.broker_id == broker_id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Calendar event not found")
    return item


@router.post("", response_model=CalendarEventResponse, status_code=201)
def create_event(payload: CalendarEventCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if payload.end_time <= payload.start_time:
        raise HTTPException(status_code=400, detail="end_time must be after start_time")
    if payload.client_id is not None:
        get_own_client(db, payload.client_id, current_user.id)

    item = CalendarEvent(**payload.model_dump(), broker_id=current_user.id)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@router.get("", response_model=list[CalendarEventResponse])
def list_events(
    start: datetime | None = None,
    end: datetime | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = db.query(CalendarEvent).filter(CalendarEvent.broker_id == current_user.id)
    if start is not None:
        q = q.filter(CalendarEvent.end_time >= start)
    if end is not None:
        q = q.filter(CalendarEvent.start_time <= end)
    return q.order_by(CalendarEvent.start_time.asc()).all()


@router.get("/{event_id}", response_model=CalendarEventResponse)
def get_event(event_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_own_event(db, event_id, current_user.id)


@router.patch("/{event_id}", response_model=CalendarEventResponse)
def update_event(
    event_id: int,
    payload: CalendarEventUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = _get_own_event(db, event_id, current_user.id)
    updates = payload.model_dump(exclude_unset=True)
    start_time = updates.get("start_time") or item.start_time
    end_time = updates.get("end_time") or item.end_time
    if end_time <= start_time:
        raise HTTPException(status_code=400, detail="end_time must be after start_time")
    if updates.get("client_id") is not None:
        get_own_client(db, updates["client_id"], current_user.id)

    for key, value in updates.items():
        setattr(item, key, value)
    db.commit()
    db.refresh(item)
    return item


@router.delete("/{event_id}", status_code=204)
def delete_event(event_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    item = _get_own_event(db, event_id, current_user.id)
    db.delete(item)
    db.commit()
