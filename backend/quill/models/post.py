"""Post model for PostgreSQL."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class Post(SQLModel, table=True):
    """
    Article written by a student.
    The slug is unique across all posts, drafts included, and never changes
    once assigned.
    """

    __tablename__ = "posts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    author_id: UUID = Field(foreign_key="profiles.id", index=True, ondelete="CASCADE")
    category_id: UUID | None = Field(
        default=None, foreign_key="categories.id", index=True, ondelete="SET NULL"
    )

    # Content
    title: str = Field(max_length=200)
    slug: str = Field(max_length=100, unique=True, index=True)
    content: str
    excerpt: str | None = Field(default=None, max_length=500)
    cover_image_url: str | None = Field(default=None, max_length=2048)

    # Status
    published: bool = Field(default=False, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
