"""Account confirmation and password reset through emailed tokens."""
import logging
import secrets
import string
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from uboard.core.config import settings
from uboard.core.security import hash_password
from uboard.models.user import User
from uboard.repositories.user import UserRepository
from uboard.services.email_service import EmailService, EmailType

logger = logging.getLogger(__name__)

TOKEN_ALPHABET = string.ascii_letters + string.digits


def generate_token() -> str:
    """Random alphanumeric string, one character per alphabet letter."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(len(TOKEN_ALPHABET)))


class UserController:
    def __init__(self, users: UserRepository, email_service: EmailService):
        self.users = users
        self.email_service = email_service

    async def _send_email(self, user: User, email_type: EmailType, token: str) -> bool:
        if email_type is EmailType.RESET:
            return await self.email_service.send_reset_email(
                token, user.first_name, user.last_name, user.user_name, user.email
            )
        return await self.email_service.send_confirm_email(token, user.first_name, user.last_name, user.email)

    async def _issue_token(self, user: User, email_type: EmailType) -> bool:
        """Assign a fresh token (invalidating earlier ones) and email it."""
        token = generate_token()
        expires = datetime.utcnow() + timedelta(hours=settings.CONFIRMATION_TOKEN_TTL_HOURS)
        try:
            # The type prefix lets validation reject a token used for the wrong purpose.
            await self.users.update(
                user,
                confirmation_token=f"{email_type.value}:{token}",
                confirmation_token_expires=expires,
            )
        except SQLAlchemyError:
            logger.exception("Could not store %s token for user %s", email_type.value, user.id)
            return False

        sent = await self._send_email(user, email_type, token)
        if not sent:
            logger.warning("%s email to user %s was not sent", email_type.value, user.id)
        return sent

    async def _validate_token(self, token: str, email_type: EmailType) -> User | None:
        stored = f"{email_type.value}:{token}"
        user = await self.users.get_by_confirmation_token(stored)
        if user is None or user.confirmation_token != stored:
            return None
        if user.confirmation_token_expires is None or user.confirmation_token_expires <= datetime.utcnow():
            return None
        return user

    async def send_reset_email(self, user: User) -> bool:
        return await self._issue_token(user, EmailType.RESET)

    async def send_email_confirmation(self, user: User) -> bool:
        return await self._issue_token(user, EmailType.CONF)

    async def confirm_email(self, token: str) -> bool:
        """Confirm the account owning ``token``. False if the token is invalid or expired."""
        user = await self._validate_token(token, EmailType.CONF)
        if user is None:
            return False
        try:
            await self.users.update(user, confirmed=True, confirmation_token=None, confirmation_token_expires=None)
        except SQLAlchemyError:
            logger.exception("Could not confirm user %s", user.id)
            return False
        return True

    async def reset_password(self, token: str, new_password: str, confirmation: str) -> bool:
        user = await self._validate_token(token, EmailType.RESET)
        if user is None or new_password != confirmation:
            return False
        try:
            await self.users.update(
                user,
                password_hash=hash_password(new_password),
                confirmation_token=None,
                confirmation_token_expires=None,
            )
        except SQLAlchemyError:
            logger.exception("Could not reset password for user %s", user.id)
            return False
        return True
