"""Post and category schemas for API request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl


class PostCreate(BaseModel):
    """Input for publishing or saving a draft.

    Limits are enforced by the post service so they stay configurable.
    """

    title: str
    content: str
    excerpt: str | None = None
    category_id: UUID | None = None
    published: bool = False


class PostUpdate(BaseModel):
    """Partial edit of an existing post. The slug is never editable."""

    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    category_id: UUID | None = None
    cover_image_url: HttpUrl | None = None
    published: bool | None = None


class PostListOptions(BaseModel):
    """Closed option set for listing posts; also the cache key material."""

    limit: int = Field(default=10, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    published_only: bool = True
    author_id: UUID | None = None
    category_id: UUID | None = None


class PostResponse(BaseModel):
    """Schema for post responses, with engagement stats."""

    id: UUID
    title: str
    slug: str
    content: str
    excerpt: str | None = None
    cover_image_url: str | None = None
    author_id: UUID
    category_id: UUID | None = None
    published: bool
    created_at: datetime
    updated_at: datetime
    likes_count: int = 0
    comments_count: int = 0
    reading_time: int = 0

    class Config:
        from_attributes = True


class PostListResponse(BaseModel):
    """Schema for paginated post list response."""

    posts: list[PostResponse]
    total: int
    limit: int
    offset: int


class CategoryResponse(BaseModel):
    """Schema for category responses."""

    id: UUID
    name: str
    slug: str
    description: str | None = None

    class Config:
        from_attributes = True
