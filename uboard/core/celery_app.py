"""Celery app. Outbound account email is the only background work."""
from celery import Celery
from kombu import Queue

from uboard.core.config import settings

EMAIL_QUEUE = "email"

celery_app = Celery(
    "uboard",
    broker=settings.CELERY_BROKER_URL,
    include=["uboard.workers.email"],
)
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    task_ignore_result=True,
    # Publish errors reach the caller instead of being retried in-process.
    task_publish_retry=False,
    task_default_queue=EMAIL_QUEUE,
    task_queues=(Queue(EMAIL_QUEUE),),
    task_routes={"uboard.workers.email.*": {"queue": EMAIL_QUEUE}},
    timezone="UTC",
    enable_utc=True,
)
