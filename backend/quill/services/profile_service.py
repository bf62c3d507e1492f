"""Profile service - profile edits, avatars and preferences."""

import logging
from datetime import UTC, datetime
from uuid import UUID

from quill.constants.settings_defaults import DEFAULT_PREFERENCES
from quill.db.base import Store
from quill.exceptions import NotFound, UniqueViolation
from quill.models import Profile, UserPreferences
from quill.schemas.profile import PreferencesUpdate, ProfileUpdate
from quill.services.cache import QueryCache
from quill.services.image_service import ImageFile
from quill.services.upload_service import UploadPurpose, UploadService

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for managing user profiles."""

    def __init__(self, store: Store, cache: QueryCache, uploads: UploadService):
        self.store = store
        self.cache = cache
        self.uploads = uploads

    async def get_profile(self, user_id: UUID) -> Profile:
        rows = await self.store.select(Profile, {"id": user_id}, limit=1)
        if not rows:
            raise NotFound(f"Profile {user_id} not found")
        return rows[0]

    async def update_profile(self, user_id: UUID, data: ProfileUpdate) -> Profile:
        """Apply a partial profile update."""
        patch = data.model_dump(exclude_unset=True)
        if patch.get("avatar_url") is not None:
            patch["avatar_url"] = str(patch["avatar_url"])
        for field in ("full_name", "bio"):
            if isinstance(patch.get(field), str):
                patch[field] = patch[field].strip() or None
        patch["updated_at"] = datetime.now(UTC)

        rows = await self.store.update(Profile, {"id": user_id}, patch)
        if not rows:
            raise NotFound(f"Profile {user_id} not found")
        self.cache.clear()
        return rows[0]

    async def upload_avatar(self, user_id: UUID, file: ImageFile) -> Profile:
        """Upload a new avatar and point the profile at it."""
        await self.get_profile(user_id)
        result = await self.uploads.upload(file, user_id, UploadPurpose.AVATAR)
        return await self.update_profile(user_id, ProfileUpdate(avatar_url=result.url))

    async def get_preferences(self, user_id: UUID) -> UserPreferences:
        """Get preferences, creating the default row on first access."""
        rows = await self.store.select(UserPreferences, {"user_id": user_id}, limit=1)
        if rows:
            return rows[0]

        await self.get_profile(user_id)
        try:
            return await self.store.insert(UserPreferences(user_id=user_id, **DEFAULT_PREFERENCES))
        except UniqueViolation:
            # Created concurrently by another request
            rows = await self.store.select(UserPreferences, {"user_id": user_id}, limit=1)
            return rows[0]

    async def update_preferences(self, user_id: UUID, data: PreferencesUpdate) -> UserPreferences:
        """Update only the preference keys that were sent."""
        await self.get_preferences(user_id)
        patch = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        patch["updated_at"] = datetime.now(UTC)
        rows = await self.store.update(UserPreferences, {"user_id": user_id}, patch)
        return rows[0]
