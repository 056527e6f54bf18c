import logging

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.errors import NotFoundError, StorageError, ValidationError
from app.core.identity import Identity
from app.models.message import Message
from app.models.property import Property
from app.models.user import User

logger = logging.getLogger(__name__)


def list_partners(db: Session, identity: Identity) -> list[tuple[User, int]]:
    """Every other active user, paired with the count of their unread messages to the caller."""
    user_id = identity.require_user_id()
    unread = (
        select(Message.sender_id, func.count(Message.id).label("unread"))
        .where(Message.receiver_id == user_id, Message.is_read.is_(False))
        .group_by(Message.sender_id)
        .subquery()
    )
    stmt = (
        select(User, func.coalesce(unread.c.unread, 0))
        .outerjoin(unread, unread.c.sender_id == User.id)
        .where(User.id != user_id, User.is_active.is_(True))
        .order_by(User.name.asc(), User.email.asc())
    )
    return [(user, count) for user, count in db.execute(stmt).all()]


def get_conversation(db: Session, identity: Identity, partner_id: int) -> list[Message]:
    """Messages between the caller and ``partner_id``, oldest first.

    Messages the partner sent to the caller are marked read.
    """
    user_id = identity.require_user_id()
    if db.get(User, partner_id) is None:
        raise NotFoundError("User not found")

    stmt = (
        select(Message)
        .options(selectinload(Message.sender), selectinload(Message.receiver))
        .where(
            or_(
                and_(Message.sender_id == user_id, Message.receiver_id == partner_id),
                and_(Message.sender_id == partner_id, Message.receiver_id == user_id),
            )
        )
        .order_by(Message.sent_at.asc(), Message.id.asc())
    )
    try:
        messages = list(db.scalars(stmt))
        db.execute(
            update(Message)
            .where(Message.receiver_id == user_id, Message.sender_id == partner_id, Message.is_read.is_(False))
            .values(is_read=True)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Could not load messages for this conversation.", details=str(exc)) from exc
    return messages


def send_message(
    db: Session,
    identity: Identity,
    receiver_id: int,
    content: str,
    property_id: int | None = None,
) -> Message:
    user_id = identity.require_user_id("You must be logged in to send messages.")
    content = (content or "").strip()
    if not content:
        raise ValidationError("Message must not be empty.")
    if receiver_id == user_id:
        raise ValidationError("You cannot message yourself.")
    if db.get(User, receiver_id) is None:
        raise NotFoundError("Recipient not found")
    if property_id is not None and db.get(Property, property_id) is None:
        raise NotFoundError("Property not found")

    message = Message(sender_id=user_id, receiver_id=receiver_id, property_id=property_id, content=content)
    try:
        db.add(message)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Sending message from %s to %s failed: %s", user_id, receiver_id, exc)
        raise StorageError("Failed to send message.", details=str(exc)) from exc
    db.refresh(message)
    return message
