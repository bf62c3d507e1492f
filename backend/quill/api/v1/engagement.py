"""Likes, reading list and comments API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from quill.api.deps import get_current_user_id, get_engagement_service
from quill.schemas.comment import CommentCreate, CommentResponse, ToggleResponse
from quill.schemas.post import PostResponse
from quill.services.engagement_service import EngagementService

router = APIRouter()


@router.post("/posts/{post_id}/like", response_model=ToggleResponse)
async def toggle_like(
    post_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: EngagementService = Depends(get_engagement_service),
) -> ToggleResponse:
    """Like or unlike a post."""
    liked = await service.toggle_like(post_id, user_id)
    return ToggleResponse(post_id=post_id, active=liked)


@router.post("/posts/{post_id}/save", response_model=ToggleResponse)
async def toggle_save(
    post_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: EngagementService = Depends(get_engagement_service),
) -> ToggleResponse:
    """Add a post to or remove it from the reading list."""
    saved = await service.toggle_save(post_id, user_id)
    return ToggleResponse(post_id=post_id, active=saved)


@router.get("/posts/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    post_id: UUID,
    service: EngagementService = Depends(get_engagement_service),
) -> list[CommentResponse]:
    """Comments for a post, threaded one level deep."""
    return await service.get_comments(post_id)


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: UUID,
    comment_in: CommentCreate,
    user_id: UUID = Depends(get_current_user_id),
    service: EngagementService = Depends(get_engagement_service),
) -> CommentResponse:
    """Comment on a post, or reply to a top-level comment."""
    return await service.add_comment(post_id, user_id, comment_in.content, comment_in.parent_id)


@router.get("/reading-list", response_model=list[PostResponse])
async def reading_list(
    user_id: UUID = Depends(get_current_user_id),
    service: EngagementService = Depends(get_engagement_service),
) -> list[PostResponse]:
    """Posts saved by the current user, most recent first."""
    return await service.get_reading_list(user_id)
