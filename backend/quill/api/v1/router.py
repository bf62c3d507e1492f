"""API v1 main router - aggregates all endpoint routers."""

from fastapi import APIRouter

from quill.api.v1 import categories, engagement, posts, profiles, settings, uploads

api_router = APIRouter()

# Main endpoints
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_router.include_router(engagement.router, tags=["engagement"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
api_router.include_router(settings.router)
