"""Comment schemas for API request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    """Schema for adding a comment or a reply."""

    content: str = Field(..., max_length=2000)
    parent_id: UUID | None = Field(default=None, description="Top-level comment being replied to")


class CommentResponse(BaseModel):
    """Schema for comment responses. Top-level comments carry their replies."""

    id: UUID
    post_id: UUID
    author_id: UUID
    parent_id: UUID | None = None
    content: str
    created_at: datetime
    updated_at: datetime
    replies: list["CommentResponse"] = Field(default_factory=list)

    class Config:
        from_attributes = True


class ToggleResponse(BaseModel):
    """Result of a like or reading-list toggle."""

    post_id: UUID
    active: bool
