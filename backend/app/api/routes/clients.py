from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.client import Client
from app.models.user import User
from app.schemas.client import ClientCreate, ClientResponse, ClientUpdate

router = APIRouter(prefix="/clients", tags=["clients"])


def get_own_client(db: Session, client_id: int, broker_id: int) -> Client:
    client = db.query(Client).filter(Client.id == client_id, Client.broker_id == broker_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.post("", response_model=ClientResponse, status_code=201)
def create_client(payload: ClientCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    client = Client(**payload.model_dump(), broker_id=current_user.id)
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@router.get("", response_model=list[ClientResponse])
def list_clients(
    q: str | None = Query(default=None, description="Filter by name, e-mail or phone"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Client).filter(Client.broker_id == current_user.id)
    if q and q.strip():
        term = q.strip()
        query = query.filter(
            or_(
                Client.name.icontains(term, autoescape=True),
                Client.email.icontains(term, autoescape=True),
                Client.phone.icontains(term, autoescape=True),
            )
        )
    return query.order_by(Client.name.asc()).all()


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(client_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_own_client(db, client_id, current_user.id)


@router.patch("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: int,
    payload: ClientUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    client = get_own_client(db, client_id, current_user.id)
    updates = payload.model_dump(exclude_unset=True)
    if "name" in updates and not (updates["name"] or "").strip():
        raise HTTPException(status_code=400, detail="name must not be empty")
    for key, value in updates.items():
        setattr(client, key, value)
    db.commit()
    db.refresh(client)
    return client


@router.delete("/{client_id}", status_code=204)
def delete_client(client_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    client = get_own_client(db, client_id, current_user.id)
    db.delete(client)
    db.commit()
