"""User endpoints: a user's posts, email confirmation and password reset."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from uboard.api.deps import get_current_user, get_db, get_post_controller, get_user_controller
from uboard.api.responses import render
from uboard.controllers.post import PostController
from uboard.controllers.user import UserController
from uboard.models.user import User
from uboard.repositories.user import UserRepository
from uboard.schemas.user import ConfirmEmailRequest, PasswordReset, PasswordResetRequest
from uboard.services.aggregation import ALL_TYPES

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}/posts")
async def list_user_posts(
    user_id: str,
    type: str = Query(ALL_TYPES),
    limit: int = Query(20, ge=1),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    return render(await controller.get_user_posts(current_user.id, user_id, type, limit, offset))


@router.post("/confirm", response_model=dict)
async def confirm_email(
    data: ConfirmEmailRequest,
    controller: UserController = Depends(get_user_controller),
):
    if not await controller.confirm_email(data.token):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired token")
    return {"success": True, "message": "Email confirmed"}


@router.post("/password-reset/request", response_model=dict)
async def request_password_reset(
    data: PasswordResetRequest,
    db: AsyncSession = Depends(get_db),
    controller: UserController = Depends(get_user_controller),
):
    user = await UserRepository(db).get_by_email(data.email)
    # Same answer whether or not the address is registered.
    if user is not None:
        await controller.send_reset_email(user)
    return {"success": True, "message": "If the account exists, a reset email has been sent"}


@router.post("/password-reset", response_model=dict)
async def reset_password(
    data: PasswordReset,
    controller: UserController = Depends(get_user_controller),
):
    if not await controller.reset_password(data.token, data.password, data.password_confirmation):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token or passwords do not match")
    return {"success": True, "message": "Password changed successfully"}
