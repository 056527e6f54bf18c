from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_identity
from app.core.identity import Identity
from app.schemas.auth import UserSummary
from app.schemas.message import ConversationPartner, MessageCreate, MessageResponse
from app.services.messaging import get_conversation, list_partners, send_message

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/partners", response_model=list[ConversationPartner])
def conversation_partners(db: Session = Depends(get_db), identity: Identity = Depends(get_identity)):
    return [
        ConversationPartner(**UserSummary.model_validate(user).model_dump(), unread_count=unread)
        for user, unread in list_partners(db, identity)
    ]


@router.get("/{partner_id}", response_model=list[MessageResponse])
def conversation(partner_id: int, db: Session = Depends(get_db), identity: Identity = Depends(get_identity)):
    return get_conversation(db, identity, partner_id)


@router.post("", response_model=MessageResponse, status_code=201)
def post_message(payload: MessageCreate, db: Session = Depends(get_db), identity: Identity = Depends(get_identity)):
    return send_message(db, identity, payload.receiver_id, payload.content, payload.property_id)
