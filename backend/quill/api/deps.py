"""Dependency providers shared by the v1 routers."""

from functools import lru_cache
from uuid import UUID

from fastapi import Depends, Header, HTTPException, UploadFile, status

from quill.config import get_settings
from quill.db.base import ObjectStorage, Store
from quill.exceptions import InvalidFile
from quill.services.cache import QueryCache
from quill.services.engagement_service import EngagementService
from quill.services.image_service import ImageFile
from quill.services.post_service import PostService
from quill.services.profile_service import ProfileService
from quill.services.upload_service import UploadService


@lru_cache
def get_store() -> Store:
    """Process-wide SQL store."""
    from quill.db.postgres import SQLStore

    return SQLStore()


@lru_cache
def get_object_storage() -> ObjectStorage:
    """Process-wide S3 storage client."""
    from quill.db.object_storage import S3ObjectStorage

    return S3ObjectStorage()


@lru_cache
def get_cache() -> QueryCache:
    """The single query cache shared by every request."""
    return QueryCache()


def get_upload_service(storage: ObjectStorage = Depends(get_object_storage)) -> UploadService:
    return UploadService(storage)


def get_post_service(
    store: Store = Depends(get_store),
    cache: QueryCache = Depends(get_cache),
    uploads: UploadService = Depends(get_upload_service),
) -> PostService:
    return PostService(store, cache, uploads)


def get_engagement_service(
    store: Store = Depends(get_store),
    cache: QueryCache = Depends(get_cache),
) -> EngagementService:
    return EngagementService(store, cache)


def get_profile_service(
    store: Store = Depends(get_store),
    cache: QueryCache = Depends(get_cache),
    uploads: UploadService = Depends(get_upload_service),
) -> ProfileService:
    return ProfileService(store, cache, uploads)


async def get_current_user_id(x_user_id: UUID | None = Header(default=None)) -> UUID:
    """
    Acting user, as asserted by the upstream auth layer.

    Session issuance lives in the auth provider; requests reach this service with
    the verified user id in the ``X-User-Id`` header.
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_user_id


async def read_image(file: UploadFile, max_bytes: int | None = None) -> ImageFile:
    """Read a multipart upload into memory, never buffering past the size limit."""
    limit = get_settings().max_upload_bytes if max_bytes is None else max_bytes
    data = await file.read(limit + 1)
    if len(data) > limit:
        raise InvalidFile(f"File too large. Maximum size is {limit / (1024 * 1024):g}MB")
    return ImageFile(
        filename=file.filename or "upload",
        content_type=file.content_type or "application/octet-stream",
        data=data,
    )
