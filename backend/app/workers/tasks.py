import logging
import smtplib
from email.message import EmailMessage

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.services.reminders import due_call_reminders, reminder_text
from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


def _send_email(to_email: str, subject: str, body: str) -> dict:
    settings = get_settings()
    if not settings.SMTP_HOST:
        return {"status": "smtp_not_configured"}

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_FROM_EMAIL
    msg["To"] = to_email
    msg.set_content(body)

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
        if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
            server.starttls()
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)

    return {"status": "sent"}


@celery_app.task
def send_due_call_reminders() -> dict:
    db = SessionLocal()
    sent = 0
    skipped = 0
    failed = 0
    try:
        for call in due_call_reminders(db):
            try:
                result = _send_email(call.broker.email, "Call follow-up reminder", reminder_text(call))
            except (smtplib.SMTPException, OSError) as exc:
                failed += 1
                logger.warning("Reminder for call log %s failed: %s", call.id, exc)
                continue
            if result.get("status") != "sent":
                skipped += 1
                continue
            call.reminder_sent = True
            sent += 1
        db.commit()
    finally:
        db.close()
    return {"sent": sent, "skipped": skipped, "failed": failed}
