"""Posts: listing, search, CRUD, votes, reports, check-ins and comments."""
import os
import shutil
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from uboard.api.deps import get_comment_controller, get_current_user, get_post_controller
from uboard.api.responses import render
from uboard.controllers.comment import CommentController
from uboard.controllers.post import PostController
from uboard.models.post import LOCATION_MAX_LENGTH, TITLE_MAX_LENGTH, TYPE_MAX_LENGTH
from uboard.models.user import User
from uboard.schemas.comment import CommentCreate
from uboard.schemas.post import Coords, PostUpdate
from uboard.services.aggregation import ALL_TYPES
from uboard.services.storage_service import UploadedFile

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("")
async def list_posts(
    type: str = Query(ALL_TYPES),
    limit: int = Query(20, ge=1),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    return render(await controller.get_posts(current_user.id, type, limit, offset))


@router.get("/search")
async def search_posts(
    query: str = Query(..., min_length=1),
    type: str = Query(ALL_TYPES),
    limit: int = Query(20, ge=1),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    return render(await controller.search_posts(current_user.id, type, query, limit, offset))


@router.get("/{post_id}")
async def get_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    return render(await controller.get_post(current_user.id, post_id))


@router.post("")
async def create_post(
    type: str | None = Form(None, max_length=TYPE_MAX_LENGTH),
    title: str | None = Form(None, max_length=TITLE_MAX_LENGTH),
    body: str | None = Form(None),
    location: str | None = Form(None, max_length=LOCATION_MAX_LENGTH),
    capacity: int | None = Form(None),
    tags: list[str] | None = Form(None),
    lat: float | None = Form(None, ge=-90, le=90),
    lng: float | None = Form(None, ge=-180, le=180),
    file: UploadFile | None = File(None),
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    coords = Coords(lat=lat, lng=lng) if lat is not None and lng is not None else None
    if file is None or not file.filename:
        return render(
            await controller.create_post(current_user.id, type, title, body, location, capacity, tags, coords)
        )

    # The file manager copies from disk, so spool the upload to a temp file first.
    fd, tmp_path = tempfile.mkstemp(suffix=Path(file.filename).suffix)
    try:
        with os.fdopen(fd, "wb") as out:
            shutil.copyfileobj(file.file, out)
        uploaded = UploadedFile(path=tmp_path, filename=file.filename)
        return render(
            await controller.create_post(
                current_user.id, type, title, body, location, capacity, tags, coords, uploaded
            )
        )
    finally:
        os.unlink(tmp_path)


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    data: PostUpdate,
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    return render(
        await controller.update_post(
            current_user.id, post_id, data.title, data.body, data.location, data.capacity, data.coords
        )
    )


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    return render(await controller.delete_post(current_user.id, post_id))


@router.put("/{post_id}/upvote")
async def upvote(
    post_id: str,
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    return render(await controller.upvote(current_user.id, post_id))


@router.put("/{post_id}/downvote")
async def downvote(
    post_id: str,
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    return render(await controller.downvote(current_user.id, post_id))


@router.put("/{post_id}/report")
async def report(
    post_id: str,
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    return render(await controller.report(current_user.id, post_id))


@router.put("/{post_id}/checkin")
async def checkin(
    post_id: str,
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    return render(await controller.checkin(current_user.id, post_id))


@router.put("/{post_id}/checkout")
async def checkout(
    post_id: str,
    current_user: User = Depends(get_current_user),
    controller: PostController = Depends(get_post_controller),
):
    return render(await controller.checkout(current_user.id, post_id))


@router.get("/{post_id}/comments")
async def list_comments(
    post_id: str,
    limit: int = Query(20, ge=1),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    controller: CommentController = Depends(get_comment_controller),
):
    return render(await controller.get_comments(post_id, limit, offset))


@router.post("/{post_id}/comments")
async def create_comment(
    post_id: str,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    controller: CommentController = Depends(get_comment_controller),
):
    return render(await controller.create_comment(data.body, current_user.id, post_id))
