"""Shared fixtures: in-memory store and object storage, a manual clock, test images."""

import asyncio
import io
import itertools
from collections import defaultdict
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

import pytest
from PIL import Image

from quill.config import Settings
from quill.db.base import StoredObject
from quill.exceptions import ObjectExists, StoreError, UniqueViolation, UploadFailed
from quill.models import (
    Category,
    Comment,
    Like,
    Post,
    Profile,
    ReadingListEntry,
    UserPreferences,
)
from quill.services.cache import QueryCache
from quill.services.engagement_service import EngagementService
from quill.services.image_service import ImageFile, ImageProcessor
from quill.services.post_service import PostService
from quill.services.profile_service import ProfileService
from quill.services.upload_service import UploadService

UNIQUE_COLUMNS: dict[type, list[tuple[str, ...]]] = {
    Post: [("slug",)],
    Category: [("name",), ("slug",)],
    Profile: [("email",)],
    Like: [("user_id", "post_id")],
    ReadingListEntry: [("user_id", "post_id")],
    UserPreferences: [("user_id",)],
}

CASCADE_ON_POST_DELETE = (Like, Comment, ReadingListEntry)


def _matches(row: Any, filters: Mapping[str, Any] | None) -> bool:
    for name, expected in (filters or {}).items():
        value = getattr(row, name)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


class InMemoryStore:
    """
    Store fake enforcing the same unique constraints as the real schema.

    Every call yields to the event loop first so concurrent callers interleave
    the way they would against a network database.
    """

    def __init__(self):
        self.tables: dict[type, list[Any]] = defaultdict(list)
        self.calls: list[tuple[str, str]] = []

    def add(self, *records: Any) -> None:
        for record in records:
            self.tables[type(record)].append(record)

    async def select(
        self,
        model,
        filters=None,
        *,
        order_by=None,
        descending=False,
        limit=None,
        offset=0,
    ):
        await asyncio.sleep(0)
        self.calls.append(("select", model.__tablename__))
        rows = [row for row in self.tables[model] if _matches(row, filters)]
        if order_by:
            rows.sort(key=lambda row: getattr(row, order_by), reverse=descending)
        rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def count(self, model, filters=None) -> int:
        await asyncio.sleep(0)
        self.calls.append(("count", model.__tablename__))
        return sum(1 for row in self.tables[model] if _matches(row, filters))

    async def insert(self, record):
        await asyncio.sleep(0)
        model = type(record)
        self.calls.append(("insert", model.__tablename__))
        for columns in UNIQUE_COLUMNS.get(model, []):
            key = tuple(getattr(record, c) for c in columns)
            if any(tuple(getattr(row, c) for c in columns) == key for row in self.tables[model]):
                raise UniqueViolation(f"duplicate key value violates unique constraint on {columns}")
        self.tables[model].append(record)
        return record

    async def update(self, model, filters, patch):
        await asyncio.sleep(0)
        self.calls.append(("update", model.__tablename__))
        rows = [row for row in self.tables[model] if _matches(row, filters)]
        for row in rows:
            for name, value in patch.items():
                setattr(row, name, value)
        return rows

    async def delete(self, model, filters) -> int:
        await asyncio.sleep(0)
        self.calls.append(("delete", model.__tablename__))
        doomed = [row for row in self.tables[model] if _matches(row, filters)]
        self.tables[model] = [row for row in self.tables[model] if row not in doomed]
        if model is Post:
            post_ids = {row.id for row in doomed}
            for child in CASCADE_ON_POST_DELETE:
                self.tables[child] = [r for r in self.tables[child] if r.post_id not in post_ids]
        return len(doomed)

    def writes(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] != "select" and call[0] != "count"]


@dataclass
class Blob:
    data: bytes
    content_type: str
    created_at: datetime


class InMemoryObjectStorage:
    """ObjectStorage fake that records calls and can be told to fail."""

    def __init__(self, base_url: str = "https://cdn.example.test/images"):
        self.base_url = base_url
        self.objects: dict[str, Blob] = {}
        self.put_calls: list[str] = []
        self.removed: list[str] = []
        self.fail_puts = False
        self.fail_lists = False
        self._ticks = itertools.count()
        self._epoch = datetime(2024, 1, 1, tzinfo=UTC)

    def seed(self, key: str, created_at: datetime | None = None) -> None:
        self.objects[key] = Blob(b"old", "image/jpeg", created_at or self._next_time())

    def _next_time(self) -> datetime:
        return self._epoch + timedelta(seconds=next(self._ticks))

    async def put_object(self, key, data, *, content_type, overwrite=False):
        await asyncio.sleep(0)
        self.put_calls.append(key)
        if self.fail_puts:
            raise UploadFailed("storage offline")
        if not overwrite and key in self.objects:
            raise ObjectExists(f"Object already exists: {key}")
        self.objects[key] = Blob(data, content_type, self._next_time())

    async def list_objects(self, prefix, *, limit=100):
        await asyncio.sleep(0)
        if self.fail_lists:
            raise StoreError("listing failed")
        folder = prefix.rstrip("/") + "/"
        found = [
            StoredObject(name=key[len(folder):], created_at=blob.created_at)
            for key, blob in self.objects.items()
            if key.startswith(folder) and "/" not in key[len(folder):]
        ]
        found.sort(key=lambda obj: obj.created_at, reverse=True)
        return found[:limit]

    async def remove_objects(self, keys: Sequence[str]):
        await asyncio.sleep(0)
        for key in keys:
            self.objects.pop(key, None)
            self.removed.append(key)

    def get_public_url(self, key: str) -> str:
        return f"{self.base_url}/{key}"


class ManualClock:
    """Clock whose time only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_image_bytes(fmt: str = "JPEG", size: tuple[int, int] = (64, 48), mode: str = "RGB") -> bytes:
    """Render a solid-colour image in the requested format."""
    color = (200, 40, 40, 128) if mode == "RGBA" else (200, 40, 40)
    image = Image.new(mode, size, color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def make_image_file(
    filename: str = "photo.jpg",
    content_type: str = "image/jpeg",
    fmt: str = "JPEG",
    size: tuple[int, int] = (64, 48),
    mode: str = "RGB",
) -> ImageFile:
    return ImageFile(
        filename=filename,
        content_type=content_type,
        data=make_image_bytes(fmt, size, mode),
    )


@pytest.fixture
def settings() -> Settings:
    """Default thresholds, isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cache(clock: ManualClock) -> QueryCache:
    return QueryCache(ttl_seconds=300, max_entries=50, clock=clock)


@pytest.fixture
async def uploads(storage: InMemoryObjectStorage, settings: Settings):
    service = UploadService(storage, ImageProcessor(settings), settings)
    yield service
    await UploadService.wait_for_cleanup()


@pytest.fixture
def post_service(store, cache, uploads, settings) -> PostService:
    return PostService(store, cache, uploads, settings)


@pytest.fixture
def engagement_service(store, cache) -> EngagementService:
    return EngagementService(store, cache)


@pytest.fixture
def profile_service(store, cache, uploads) -> ProfileService:
    return ProfileService(store, cache, uploads)


@pytest.fixture
def author(store: InMemoryStore) -> Profile:
    profile = Profile(id=uuid4(), email="ana@example.edu", full_name="Ana Santos")
    store.add(profile)
    return profile


@pytest.fixture
def reader(store: InMemoryStore) -> Profile:
    profile = Profile(id=uuid4(), email="ben@example.edu", full_name="Ben Cruz")
    store.add(profile)
    return profile


def make_post(author_id: UUID, slug: str, published: bool = True, **fields: Any) -> Post:
    defaults = {
        "title": slug.replace("-", " ").title(),
        "content": f"Content of {slug}",
    }
    defaults.update(fields)
    return Post(author_id=author_id, slug=slug, published=published, **defaults)
