"""Comment, like and reading list models.

All of them cascade away with their post.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class Comment(SQLModel, table=True):
    """Comment on a post. Replies point at a top-level comment via parent_id."""

    __tablename__ = "comments"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    post_id: UUID = Field(foreign_key="posts.id", index=True, ondelete="CASCADE")
    author_id: UUID = Field(foreign_key="profiles.id", index=True, ondelete="CASCADE")
    parent_id: UUID | None = Field(
        default=None, foreign_key="comments.id", index=True, ondelete="CASCADE"
    )
    content: str = Field(max_length=2000)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Like(SQLModel, table=True):
    """A user's like on a post (at most one per user and post)."""

    __tablename__ = "likes"
    __table_args__ = (UniqueConstraint("user_id", "post_id"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="profiles.id", index=True, ondelete="CASCADE")
    post_id: UUID = Field(foreign_key="posts.id", index=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ReadingListEntry(SQLModel, table=True):
    """A post saved to a user's reading list."""

    __tablename__ = "reading_list"
    __table_args__ = (UniqueConstraint("user_id", "post_id"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="profiles.id", index=True, ondelete="CASCADE")
    post_id: UUID = Field(foreign_key="posts.id", index=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
