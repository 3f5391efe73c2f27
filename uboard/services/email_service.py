"""Account emails: confirmation and password reset."""
import logging
from enum import Enum

from kombu.exceptions import OperationalError

from uboard.core.config import settings
from uboard.workers.email import deliver_email

logger = logging.getLogger(__name__)


class EmailType(str, Enum):
    RESET = "reset"
    CONF = "conf"


class EmailService:
    def __init__(self, website: str | None = None):
        self.website = (website or settings.WEBSITE).rstrip("/")

    def _send_email(self, email_address: str, subject: str, body: str, html: str) -> bool:
        """Queue the message for delivery. False if the broker refused it."""
        try:
            deliver_email.delay(email_address, subject, body, html)
        except OperationalError:
            logger.exception("Could not queue email to %s", email_address)
            return False
        return True

    async def send_confirm_email(self, token: str, first_name: str, last_name: str, email_address: str) -> bool:
        confirm_url = f"{self.website}/confirmation/c={token}"
        subject = "UBoard - Confirm your Email Address"
        body = (
            f"Thank you for signing up to UBoard, {first_name} {last_name}.\n\n"
            "To continue with your account registration, please confirm your email address by visiting:\n\n"
            f"{confirm_url}"
        )
        html = (
            f"Thank you for signing up to UBoard, {first_name} {last_name}. <br/>"
            "To continue with your account registration, please confirm your email address by "
            f'<a href="{confirm_url}">clicking here</a>'
        )
        return self._send_email(email_address, subject, body, html)

    async def send_reset_email(
        self, token: str, first_name: str, last_name: str, user_name: str, email_address: str
    ) -> bool:
        reset_url = f"{self.website}/password-reset/r={token}"
        subject = "UBoard - Password Reset Requested"
        body = (
            f"Hello, {first_name} {last_name}.\n"
            f"A password reset has been requested for the account with username: {user_name}. "
            f"To reset your password, visit the link below.\n{reset_url}"
        )
        html = (
            f"Hello, {first_name} {last_name}. <br/>"
            f"A password reset has been requested for the account with username: {user_name}. "
            f'To reset your password, <a href="{reset_url}">click here</a>'
        )
        return self._send_email(email_address, subject, body, html)
