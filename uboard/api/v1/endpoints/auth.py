"""Auth endpoints: register, login, me."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from uboard.api.deps import get_current_user, get_db, get_user_controller
from uboard.controllers.user import UserController
from uboard.models.user import User
from uboard.repositories.user import UserRepository
from uboard.schemas.user import LoginRequest, Token, UserCreate, UserResponse
from uboard.services.auth_service import authenticate_user, create_token_for_user, create_user, user_to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    controller: UserController = Depends(get_user_controller),
):
    logger.info("Register attempt: %s %s", data.user_name, data.email)
    users = UserRepository(db)
    if await users.get_by_email(data.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    if await users.get_by_user_name(data.user_name):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken")
    user = await create_user(db, data)
    await controller.send_email_confirmation(user)
    logger.info("Register success: %s %s", user.id, user.user_name)
    return Token(access_token=create_token_for_user(user), user=user_to_response(user, include_email=True))


@router.post("/login", response_model=Token)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await authenticate_user(db, data.email, data.password)
    if not user:
        logger.info("Login failed for %s", data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return Token(access_token=create_token_for_user(user), user=user_to_response(user, include_email=True))


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return user_to_response(current_user, include_email=True)
