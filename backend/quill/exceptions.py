"""Centralized exceptions for the Quill backend.

Every error carries a stable ``kind`` so callers (and the API layer) can branch on
it without string matching on messages.
"""


class QuillError(Exception):
    """Base exception for all Quill errors."""

    kind = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__ or self.kind)
        self.message = message or str(self.args[0])

    def __str__(self) -> str:
        return self.message


class ValidationFailed(QuillError):
    """Input failed local validation."""

    kind = "validation_failed"


class InvalidFile(ValidationFailed):
    """Uploaded file has an unsupported type or is too large."""

    kind = "invalid_file"


class ProcessingFailed(QuillError):
    """Image could not be decoded or re-encoded.

    The image processor always falls back to the original bytes, so this is only
    raised by callers that explicitly opt out of the fallback.
    """

    kind = "processing_failed"


class UploadFailed(QuillError):
    """Object storage rejected the write."""

    kind = "upload_failed"


class ObjectExists(UploadFailed):
    """A non-overwriting put hit an existing key."""

    kind = "object_exists"


class CleanupFailed(QuillError):
    """Removing old uploads failed. Logged, never surfaced."""

    kind = "cleanup_failed"


class StoreError(QuillError):
    """The persistence or storage layer returned an error."""

    kind = "store_error"


class UniqueViolation(StoreError):
    """An insert hit a unique constraint."""

    kind = "unique_violation"


class SlugExhausted(QuillError):
    """No free slug was found within the attempt cap."""

    kind = "slug_exhausted"


class PublishFailed(QuillError):
    """Creating the post failed."""

    kind = "publish_failed"


class NotFound(QuillError):
    """Requested row does not exist."""

    kind = "not_found"


class PermissionDenied(QuillError):
    """Acting user does not own the row."""

    kind = "permission_denied"
