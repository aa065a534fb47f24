"""Main API router that aggregates all route modules."""

from fastapi import APIRouter

from scribe.api import account, admin, health, posts

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(account.router, prefix="/account", tags=["account"])
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])

# Admin endpoints
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
