"""Tests for profiles, avatars and preferences."""

from uuid import uuid4

import pytest

from quill.exceptions import InvalidFile, NotFound
from quill.models import Profile, UserPreferences
from quill.schemas.profile import PreferencesUpdate, ProfileUpdate
from quill.services.profile_service import ProfileService

from tests.conftest import InMemoryObjectStorage, InMemoryStore, make_image_file


class TestProfile:
    async def test_get_missing_profile(self, profile_service: ProfileService) -> None:
        with pytest.raises(NotFound):
            await profile_service.get_profile(uuid4())

    async def test_update_profile(self, profile_service: ProfileService, author: Profile) -> None:
        profile_service.cache.set("posts_{}", [])

        updated = await profile_service.update_profile(
            author.id, ProfileUpdate(full_name="  Ana M. Santos ", bio="   ")
        )

        assert updated.full_name == "Ana M. Santos"
        assert updated.bio is None
        assert len(profile_service.cache) == 0

    async def test_upload_avatar(
        self, profile_service: ProfileService, storage: InMemoryObjectStorage, author: Profile
    ) -> None:
        updated = await profile_service.upload_avatar(author.id, make_image_file("me.png", "image/png", fmt="PNG"))

        key = storage.put_calls[0]
        assert key.startswith(f"{author.id}/avatar/")
        assert key.endswith(".png")
        assert updated.avatar_url == f"https://cdn.example.test/images/{key}"

    async def test_invalid_avatar(
        self, profile_service: ProfileService, storage: InMemoryObjectStorage, author: Profile
    ) -> None:
        with pytest.raises(InvalidFile):
            await profile_service.upload_avatar(author.id, make_image_file("me.bmp", "image/bmp"))
        assert storage.put_calls == []


class TestPreferences:
    async def test_defaults_created_once(
        self, profile_service: ProfileService, store: InMemoryStore, author: Profile
    ) -> None:
        prefs = await profile_service.get_preferences(author.id)
        again = await profile_service.get_preferences(author.id)

        assert prefs.theme == "system"
        assert prefs.language == "en"
        assert prefs.timezone == "UTC"
        assert again is prefs
        assert len(store.tables[UserPreferences]) == 1

    async def test_partial_update(self, profile_service: ProfileService, author: Profile) -> None:
        prefs = await profile_service.update_preferences(
            author.id, PreferencesUpdate(theme="dark", email_notifications=False)
        )

        assert prefs.theme == "dark"
        assert prefs.email_notifications is False
        assert prefs.language == "en"

    async def test_preferences_for_unknown_user(self, profile_service: ProfileService) -> None:
        with pytest.raises(NotFound):
            await profile_service.get_preferences(uuid4())
