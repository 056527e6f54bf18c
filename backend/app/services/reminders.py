from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.models.call_log import CallLog


def due_call_reminders(db: Session, now: datetime | None = None) -> list[CallLog]:
    now = now or datetime.utcnow()
    stmt = (
        select(CallLog)
        .options(selectinload(CallLog.broker), selectinload(CallLog.client))
        .where(CallLog.reminder_at.is_not(None), CallLog.reminder_at <= now, CallLog.reminder_sent.is_(False))
        .order_by(CallLog.reminder_at.asc())
    )
    return list(db.scalars(stmt))


def reminder_text(call: CallLog) -> str:
    who = call.client.name if call.client else "a client"
    lines = [
        f"Reminder: follow up on your call with {who}.",
        f"Call time: {call.call_time:%Y-%m-%d %H:%M} UTC",
        "",
        call.description,
    ]
    if call.outcome:
        lines.append(f"Outcome: {call.outcome}")
    return "\n".join(lines)
