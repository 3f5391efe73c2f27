"""API dependencies: auth, db session, controllers."""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from uboard.controllers.comment import CommentController
from uboard.controllers.post import PostController
from uboard.controllers.user import UserController
from uboard.core.security import access_token_subject
from uboard.db.session import get_db
from uboard.models.user import User
from uboard.repositories.comment import CommentRepository
from uboard.repositories.engagement import CheckinRepository, LikeRepository, ReportRepository
from uboard.repositories.post import PostRepository
from uboard.repositories.tag import TagRepository
from uboard.repositories.user import UserRepository
from uboard.services.email_service import EmailService
from uboard.services.storage_service import FileManager, get_file_manager

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not credentials:
        raise unauthorized
    user_id = access_token_subject(credentials.credentials)
    if user_id is None:
        raise unauthorized
    user = await UserRepository(db).get(user_id)
    if user is None:
        raise unauthorized
    return user


def get_email_service() -> EmailService:
    return EmailService()


def get_post_controller(
    db: AsyncSession = Depends(get_db),
    files: FileManager = Depends(get_file_manager),
) -> PostController:
    return PostController(
        PostRepository(db),
        LikeRepository(db),
        CheckinRepository(db),
        ReportRepository(db),
        TagRepository(db),
        files,
    )


def get_comment_controller(db: AsyncSession = Depends(get_db)) -> CommentController:
    return CommentController(CommentRepository(db), PostRepository(db))


def get_user_controller(
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> UserController:
    return UserController(UserRepository(db), email_service)
