"""Upload service - validates, processes and stores user images."""

import asyncio
import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from uuid import UUID

from quill.config import Settings, get_settings
from quill.db.base import ObjectStorage
from quill.exceptions import CleanupFailed, InvalidFile, StoreError, UploadFailed
from quill.services.image_service import ImageFile, ImageProcessor

logger = logging.getLogger(__name__)


class UploadPurpose(str, Enum):
    """What an upload is for; decides the key prefix and retention."""

    AVATAR = "avatar"
    COVER = "cover"
    POST = "post"


class UploadStatus(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class UploadProgress:
    percentage: float
    status: UploadStatus
    message: str | None = None


@dataclass(frozen=True)
class UploadResult:
    url: str
    key: str


ProgressCallback = Callable[[UploadProgress], None]

# Detached cleanup tasks, referenced here until they finish
_pending_cleanups: set[asyncio.Task] = set()


def _ignore_progress(progress: UploadProgress) -> None:
    pass


class UploadService:
    """
    Orchestrates image validation, processing and the storage put.

    After a successful upload a detached cleanup task trims the user's older
    uploads for the same purpose. Cleanup errors are logged and never reach the
    caller.
    """

    def __init__(
        self,
        storage: ObjectStorage,
        processor: ImageProcessor | None = None,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.storage = storage
        self.settings = settings or get_settings()
        self.processor = processor or ImageProcessor(self.settings)
        self._clock = clock

    async def upload(
        self,
        file: ImageFile,
        user_id: UUID | str,
        purpose: UploadPurpose,
        on_progress: ProgressCallback | None = None,
    ) -> UploadResult:
        """
        Validate, process and store an image, returning its public URL.

        Raises InvalidFile before any storage call when validation fails, and
        UploadFailed when storage rejects the write (including an existing key).
        """
        report = on_progress or _ignore_progress
        report(UploadProgress(0, UploadStatus.IDLE))

        validation = self.processor.validate(file)
        if not validation.valid:
            report(UploadProgress(0, UploadStatus.ERROR, validation.error))
            raise InvalidFile(validation.error)

        try:
            report(UploadProgress(10, UploadStatus.UPLOADING, "Preparing upload..."))
            report(UploadProgress(10, UploadStatus.PROCESSING, "Processing image..."))
            processed = await self.processor.process(file)

            report(UploadProgress(50, UploadStatus.UPLOADING, "Uploading to server..."))
            key = self.build_key(user_id, purpose, processed.filename)
            await self.storage.put_object(
                key, processed.data, content_type=processed.content_type, overwrite=False
            )

            report(UploadProgress(90, UploadStatus.UPLOADING, "Finalizing..."))
            url = self.storage.get_public_url(key)
        except UploadFailed as e:
            logger.error("Upload of %s for user %s failed: %s", file.filename, user_id, e)
            report(UploadProgress(0, UploadStatus.ERROR, "Upload failed"))
            raise
        except Exception as e:
            logger.exception("Unexpected error uploading %s", file.filename)
            report(UploadProgress(0, UploadStatus.ERROR, "Upload failed"))
            raise UploadFailed(f"Upload failed: {e}") from e

        report(UploadProgress(100, UploadStatus.SUCCESS, "Upload complete!"))
        self._schedule_cleanup(str(user_id), purpose)
        return UploadResult(url=url, key=key)

    def build_key(self, user_id: UUID | str, purpose: UploadPurpose, filename: str) -> str:
        """``{user}/{purpose}/{timestamp}-{random}.{ext}``, unique per attempt."""
        timestamp = int(self._clock() * 1000)
        suffix = secrets.token_hex(4)
        return f"{user_id}/{purpose.value}/{timestamp}-{suffix}.{self.file_extension(filename)}"

    @staticmethod
    def file_extension(filename: str) -> str:
        extension = PurePosixPath(filename or "").suffix.lower().lstrip(".")
        if extension == "jpeg":
            return "jpg"
        return extension or "jpg"

    def retention_for(self, purpose: UploadPurpose) -> int:
        if purpose is UploadPurpose.AVATAR:
            return self.settings.avatar_upload_retention
        return self.settings.upload_retention

    async def cleanup_old_files(self, user_id: str, purpose: UploadPurpose) -> list[str]:
        """Delete all but the newest uploads under ``{user}/{purpose}``.

        Returns the removed keys. Raises CleanupFailed on storage errors.
        """
        prefix = f"{user_id}/{purpose.value}"
        try:
            objects = await self.storage.list_objects(
                prefix, limit=self.settings.cleanup_list_limit
            )
            newest_first = sorted(objects, key=lambda obj: obj.created_at, reverse=True)
            stale = [f"{prefix}/{obj.name}" for obj in newest_first[self.retention_for(purpose):]]
            if stale:
                await self.storage.remove_objects(stale)
        except Exception as e:
            raise CleanupFailed(f"Cleanup of {prefix} failed: {e}") from e

        if stale:
            logger.info("Removed %d old uploads under %s", len(stale), prefix)
        return stale

    def _schedule_cleanup(self, user_id: str, purpose: UploadPurpose) -> asyncio.Task:
        task = asyncio.create_task(self.cleanup_old_files(user_id, purpose))
        _pending_cleanups.add(task)
        task.add_done_callback(self._on_cleanup_done)
        return task

    def _on_cleanup_done(self, task: asyncio.Task) -> None:
        _pending_cleanups.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("%s", error)

    @staticmethod
    async def wait_for_cleanup() -> None:
        """Wait for pending cleanup tasks (used on shutdown and in tests)."""
        if _pending_cleanups:
            await asyncio.gather(*_pending_cleanups, return_exceptions=True)

    async def delete_file(self, key: str) -> bool:
        """Remove a single stored object. Returns False instead of raising."""
        try:
            await self.storage.remove_objects([key])
        except StoreError as e:
            logger.error("Delete of %s failed: %s", key, e)
            return False
        return True
