"""Single-comment endpoints. Listing and creation live under /posts/{id}/comments."""
from fastapi import APIRouter, Depends

from uboard.api.deps import get_comment_controller, get_current_user
from uboard.api.responses import render
from uboard.controllers.comment import CommentController
from uboard.models.user import User
from uboard.schemas.comment import CommentUpdate

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/{comment_id}")
async def get_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    controller: CommentController = Depends(get_comment_controller),
):
    return render(await controller.get_comment(comment_id))


@router.put("/{comment_id}")
async def update_comment(
    comment_id: str,
    data: CommentUpdate,
    current_user: User = Depends(get_current_user),
    controller: CommentController = Depends(get_comment_controller),
):
    return render(await controller.update_comment(current_user.id, comment_id, data.body))


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    controller: CommentController = Depends(get_comment_controller),
):
    return render(await controller.delete_comment(current_user.id, comment_id))
