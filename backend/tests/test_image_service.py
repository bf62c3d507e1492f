"""Tests for image validation and recompression."""

import io

import pytest
from PIL import Image

from quill.config import Settings
from quill.services.image_service import ImageFile, ImageProcessor, fit_within

from tests.conftest import make_image_file


@pytest.fixture
def eager_processor() -> ImageProcessor:
    """Processor that recompresses every file and caps images at 32px."""
    return ImageProcessor(
        Settings(_env_file=None, compress_threshold_bytes=0, max_image_dimension=32)
    )


class TestValidate:
    """Type and size checks happen locally."""

    def test_accepts_supported_image(self, settings: Settings) -> None:
        result = ImageProcessor(settings).validate(make_image_file())
        assert result.valid
        assert result.error is None

    def test_rejects_missing_file(self, settings: Settings) -> None:
        result = ImageProcessor(settings).validate(None)
        assert not result.valid
        assert result.error == "No file selected"

    def test_rejects_oversized_file(self, settings: Settings) -> None:
        big = ImageFile("huge.jpg", "image/jpeg", b"\xff" * (6 * 1024 * 1024))
        result = ImageProcessor(settings).validate(big)
        assert not result.valid
        assert "5MB" in result.error

    def test_rejects_unsupported_type(self, settings: Settings) -> None:
        result = ImageProcessor(settings).validate(ImageFile("doc.pdf", "application/pdf", b"%PDF-1.7"))
        assert not result.valid
        assert "Invalid file type" in result.error


class TestFitWithin:
    """Aspect-preserving downscale."""

    def test_small_image_unchanged(self) -> None:
        assert fit_within(800, 600, 1920) == (800, 600)

    def test_landscape(self) -> None:
        assert fit_within(3840, 2160, 1920) == (1920, 1080)

    def test_portrait(self) -> None:
        assert fit_within(1000, 4000, 1920) == (480, 1920)


class TestProcess:
    """Recompression and its fallbacks."""

    async def test_small_file_passes_through(self, settings: Settings) -> None:
        file = make_image_file()
        processed = await ImageProcessor(settings).process(file)
        assert processed is file

    async def test_large_jpeg_is_resized(self, eager_processor: ImageProcessor) -> None:
        file = make_image_file(size=(128, 64))
        processed = await eager_processor.process(file)

        assert processed.filename == "photo.jpg"
        assert processed.content_type == "image/jpeg"
        with Image.open(io.BytesIO(processed.data)) as image:
            assert image.size == (32, 16)
            assert image.format == "JPEG"

    async def test_png_stays_png(self, eager_processor: ImageProcessor) -> None:
        file = make_image_file("logo.png", "image/png", fmt="PNG", size=(64, 64), mode="RGBA")
        processed = await eager_processor.process(file)

        assert processed.content_type == "image/png"
        with Image.open(io.BytesIO(processed.data)) as image:
            assert image.format == "PNG"
            assert image.size == (32, 32)

    async def test_webp_with_alpha_becomes_jpeg(self, eager_processor: ImageProcessor) -> None:
        file = make_image_file("art.webp", "image/webp", fmt="WEBP", size=(40, 40), mode="RGBA")
        processed = await eager_processor.process(file)

        assert processed.filename == "art.webp"
        assert processed.content_type == "image/jpeg"
        with Image.open(io.BytesIO(processed.data)) as image:
            assert image.format == "JPEG"
            assert image.mode == "RGB"

    async def test_undecodable_file_falls_back(self, eager_processor: ImageProcessor) -> None:
        file = ImageFile("broken.jpg", "image/jpeg", b"definitely not a jpeg" * 10)
        processed = await eager_processor.process(file)
        assert processed is file
