from celery import Celery
from celery.schedules import crontab

from app.core.config import settings

celery_app = Celery(
    "brigade",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["app.tasks.validation_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.TIMEZONE,
    enable_utc=True,
    beat_schedule={
        # Every morning at 06:00: shifts whose hours still wait for validation
        "daily-pending-validation-report": {
            "task": "app.tasks.validation_tasks.report_pending_validation",
            "schedule": crontab(hour=6, minute=0),
        },
    },
)
