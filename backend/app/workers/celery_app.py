from celery import Celery

from app.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "premium_property",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["app.workers.tasks"],
)
celery_app.conf.beat_schedule = {
    "send-due-call-reminders": {
        "task": "app.workers.tasks.send_due_call_reminders",
        "schedule": float(settings.REMINDER_SCAN_SECONDS),
    },
}
