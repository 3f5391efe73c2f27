"""Celery task delivering account emails through SendGrid."""
import logging

import httpx

from uboard.core.celery_app import celery_app
from uboard.core.config import settings

logger = logging.getLogger(__name__)


def build_payload(to: str, subject: str, body: str, html: str) -> dict:
    return {
        "personalizations": [{"to": [{"email": to}]}],
        "from": {"email": settings.FROM_EMAIL},
        "subject": subject,
        "content": [
            {"type": "text/plain", "value": body},
            {"type": "text/html", "value": html},
        ],
    }


@celery_app.task
def deliver_email(to: str, subject: str, body: str, html: str) -> bool:
    """Send one message. Failures are logged and not retried."""
    if not settings.SENDGRID_API_KEY:
        logger.warning("SENDGRID_API_KEY not set, dropping email to %s", to)
        return False
    try:
        resp = httpx.post(
            settings.SENDGRID_API_URL,
            json=build_payload(to, subject, body, html),
            headers={"Authorization": f"Bearer {settings.SENDGRID_API_KEY}"},
            timeout=10.0,
        )
        resp.raise_for_status()
    except httpx.HTTPError:
        logger.exception("Send email to %s failed", to)
        return False
    return True
