"""Profile and preference schemas for API request/response validation."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, HttpUrl

from quill.constants.settings_defaults import DEFAULT_PREFERENCES


class ProfileUpdate(BaseModel):
    """Partial profile edit."""

    full_name: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    avatar_url: HttpUrl | None = None


class ProfileResponse(BaseModel):
    """Schema for profile responses."""

    id: UUID
    email: str
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PreferencesUpdate(BaseModel):
    """Pydantic model for user preferences with validation. Only sent keys change."""

    theme: Literal["light", "dark", "system"] | None = Field(
        default=None,
        description="UI theme preference",
    )
    email_notifications: bool | None = None
    push_notifications: bool | None = None
    newsletter_subscription: bool | None = None
    privacy_profile_public: bool | None = None
    privacy_show_email: bool | None = None
    language: Literal["en", "fil"] | None = Field(
        default=None,
        description="Interface language",
    )
    timezone: str | None = Field(default=None, min_length=1, max_length=64)


class PreferencesResponse(BaseModel):
    """Stored preferences for a user."""

    user_id: UUID
    theme: Literal["light", "dark", "system"] = DEFAULT_PREFERENCES["theme"]
    email_notifications: bool = DEFAULT_PREFERENCES["email_notifications"]
    push_notifications: bool = DEFAULT_PREFERENCES["push_notifications"]
    newsletter_subscription: bool = DEFAULT_PREFERENCES["newsletter_subscription"]
    privacy_profile_public: bool = DEFAULT_PREFERENCES["privacy_profile_public"]
    privacy_show_email: bool = DEFAULT_PREFERENCES["privacy_show_email"]
    language: Literal["en", "fil"] = DEFAULT_PREFERENCES["language"]
    timezone: str = DEFAULT_PREFERENCES["timezone"]

    class Config:
        from_attributes = True
