"""API router aggregation."""
from fastapi import APIRouter

from unknown_items.api.endpoints import auth, categories, comments, posts, uploads, users

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(posts.router)
api_router.include_router(comments.router)
api_router.include_router(users.router)
api_router.include_router(categories.router)
api_router.include_router(uploads.router)
