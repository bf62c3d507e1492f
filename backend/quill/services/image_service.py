"""Image validation and client-side style recompression before upload.

Pure with respect to the rest of the system: knows nothing about storage keys
or users.
"""

import asyncio
import io
import logging
from dataclasses import dataclass

from PIL import Image

from quill.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageFile:
    """An uploaded image held in memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None


def fit_within(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Scale (width, height) down so neither side exceeds ``max_dimension``.

    Aspect ratio is preserved; sizes already within bounds are returned as-is.
    """
    if width <= max_dimension and height <= max_dimension:
        return width, height
    ratio = min(max_dimension / width, max_dimension / height)
    return max(1, int(width * ratio)), max(1, int(height * ratio))


class ImageProcessor:
    """Validates uploads and shrinks large images."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def validate(self, file: ImageFile | None) -> ValidationResult:
        """Check MIME type and size. Never touches the network."""
        if file is None or not file.data:
            return ValidationResult(False, "No file selected")

        max_bytes = self.settings.max_upload_bytes
        if file.size > max_bytes:
            limit_mb = max_bytes / (1024 * 1024)
            return ValidationResult(False, f"File too large. Maximum size is {limit_mb:g}MB")

        if file.content_type not in self.settings.allowed_image_types:
            return ValidationResult(False, "Invalid file type. Please use JPEG, PNG, WebP, or GIF")

        return ValidationResult(True)

    async def process(self, file: ImageFile, quality: float | None = None) -> ImageFile:
        """Resize and re-encode large images.

        Files at or below the compression threshold pass through untouched. Any
        decode or encode failure falls back to the original file.
        """
        if file.size <= self.settings.compress_threshold_bytes:
            return file

        quality = self.settings.image_quality if quality is None else quality
        try:
            processed = await asyncio.to_thread(self._recompress, file, quality)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            logger.warning("Could not process %s, uploading original: %s", file.filename, e)
            return file

        logger.debug(
            "Processed %s: %d -> %d bytes", file.filename, file.size, processed.size
        )
        return processed

    def _recompress(self, file: ImageFile, quality: float) -> ImageFile:
        output_type = "image/png" if file.content_type == "image/png" else "image/jpeg"
        buffer = io.BytesIO()

        with Image.open(io.BytesIO(file.data)) as source:
            source.load()
            size = fit_within(*source.size, self.settings.max_image_dimension)
            image = source.resize(size, Image.Resampling.LANCZOS) if size != source.size else source

            if output_type == "image/png":
                image.save(buffer, format="PNG", optimize=True)
            else:
                if image.mode not in ("RGB", "L"):
                    image = image.convert("RGB")
                image.save(buffer, format="JPEG", quality=round(quality * 100), optimize=True)

        return ImageFile(filename=file.filename, content_type=output_type, data=buffer.getvalue())
