"""Profile and preference models for PostgreSQL."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class Profile(SQLModel, table=True):
    """Public profile of an account.

    The id is the auth provider's user id; rows are created by the signup flow.
    """

    __tablename__ = "profiles"

    id: UUID = Field(primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    full_name: str | None = Field(default=None, max_length=100)
    avatar_url: str | None = Field(default=None, max_length=2048)
    bio: str | None = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class UserPreferences(SQLModel, table=True):
    """Per-user settings, created with defaults on first read."""

    __tablename__ = "user_preferences"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="profiles.id", unique=True, index=True, ondelete="CASCADE")

    theme: str = Field(default="system", max_length=10)  # light, dark, system
    email_notifications: bool = Field(default=True)
    push_notifications: bool = Field(default=False)
    newsletter_subscription: bool = Field(default=False)
    privacy_profile_public: bool = Field(default=True)
    privacy_show_email: bool = Field(default=False)
    language: str = Field(default="en", max_length=5)  # en, fil
    timezone: str = Field(default="UTC", max_length=64)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
