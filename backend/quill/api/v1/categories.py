"""Categories API endpoints."""

from fastapi import APIRouter, Depends

from quill.api.deps import get_post_service
from quill.schemas.post import CategoryResponse
from quill.services.post_service import PostService

router = APIRouter()


@router.get("", response_model=list[CategoryResponse])
async def list_categories(service: PostService = Depends(get_post_service)) -> list[CategoryResponse]:
    """List all categories by name."""
    return await service.list_categories()
