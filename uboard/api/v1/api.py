"""V1 API router aggregation."""
from fastapi import APIRouter

from uboard.api.v1.endpoints import auth, comments, posts, users

api_router = APIRouter(prefix="/v1")
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(posts.router)
api_router.include_router(comments.router)
