"""Default settings constants shared across the application."""

from typing import Any

# Default preferences for new users
DEFAULT_PREFERENCES: dict[str, Any] = {
    "theme": "system",
    "email_notifications": True,
    "push_notifications": False,
    "newsletter_subscription": False,
    "privacy_profile_public": True,
    "privacy_show_email": False,
    "language": "en",
    "timezone": "UTC",
}
