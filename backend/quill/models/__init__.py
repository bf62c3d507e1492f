"""Models package - SQLModel database models."""

from quill.models.category import Category
from quill.models.engagement import Comment, Like, ReadingListEntry
from quill.models.post import Post
from quill.models.profile import Profile, UserPreferences

__all__ = ["Profile", "UserPreferences", "Category", "Post", "Comment", "Like", "ReadingListEntry"]
