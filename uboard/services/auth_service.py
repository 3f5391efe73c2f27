"""Authentication business logic."""
from sqlalchemy.ext.asyncio import AsyncSession

from uboard.core.security import create_access_token, hash_password, verify_password
from uboard.models.user import User
from uboard.repositories.user import UserRepository
from uboard.schemas.user import UserCreate, UserResponse


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    return await UserRepository(db).create(
        first_name=data.first_name,
        last_name=data.last_name,
        user_name=data.user_name,
        email=data.email,
        password_hash=hash_password(data.password),
    )


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    user = await UserRepository(db).get_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def user_to_response(user: User, include_email: bool = False) -> UserResponse:
    return UserResponse(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        user_name=user.user_name,
        email=user.email if include_email else None,
        confirmed=user.confirmed,
        created_at=user.created_at,
    )


def create_token_for_user(user: User) -> str:
    return create_access_token(user.id)
