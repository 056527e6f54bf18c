from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.routes.clients import get_own_client
from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.call_log import CallLog
from app.models.user import User
from app.schemas.call_log import CallLogCreate, CallLogResponse, CallLogUpdate

router = APIRouter(prefix="/call-logs", tags=["call-logs"])


def _get_own_call_log(db: Session, call_log_id: int, broker_id: int) -> CallLog:
    item = db.query(CallLog).filter(CallLog.id == call_log_id, CallLog.broker_id == broker_id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Call log not found")
    return item


@router.post("", response_model=CallLogResponse, status_code=201)
def create_call_log(payload: CallLogCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if payload.client_id is not None:
        get_own_client(db, payload.client_id, current_user.id)
    item = CallLog(**payload.model_dump(), broker_id=current_user.id)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@router.get("", response_model=list[CallLogResponse])
def list_call_logs(
    client_id: int | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = db.query(CallLog).filter(CallLog.broker_id == current_user.id)
    if client_id is not None:
        q = q.filter(CallLog.client_id == client_id)
    return q.order_by(CallLog.call_time.desc()).all()


@router.get("/{call_log_id}", response_model=CallLogResponse)
def get_call_log(call_log_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_own_call_log(db, call_log_id, current_user.id)


@router.patch("/{call_log_id}", response_model=CallLogResponse)
def update_call_log(
    call_log_id: int,
    payload: CallLogUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = _get_own_call_log(db, call_log_id, current_user.id)
    updates = payload.model_dump(exclude_unset=True)
    if updates.get("client_id") is not None:
        get_own_client(db, updates["client_id"], current_user.id)
    if "reminder_at" in updates:
        # A moved reminder should fire again.
        item.reminder_sent = False
    for key, value in updates.items():
        setattr(item, key, value)
    db.commit()
    db.refresh(item)
    return item


@router.delete("/{call_log_id}", status_code=204)
def delete_call_log(call_log_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    item = _get_own_call_log(db, call_log_id, current_user.id)
    db.delete(item)
    db.commit()
