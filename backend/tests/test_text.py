"""Tests for slug and excerpt helpers."""

import pytest

from quill.utils.text import (
    FALLBACK_SLUG,
    extract_excerpt,
    reading_time,
    sanitize_slug,
    slugify,
    truncate_text,
    validate_slug,
)


class TestSlugify:
    """slugify() turns titles into URL-safe identifiers."""

    def test_strips_punctuation(self) -> None:
        assert slugify("Hello, World!") == "hello-world"

    def test_empty_title_falls_back(self) -> None:
        assert slugify("") == FALLBACK_SLUG
        assert slugify("   ---   ") == FALLBACK_SLUG
        assert slugify("!!!???") == FALLBACK_SLUG

    def test_non_string_falls_back(self) -> None:
        assert slugify(None) == FALLBACK_SLUG  # type: ignore[arg-type]
        assert slugify(42) == FALLBACK_SLUG  # type: ignore[arg-type]

    def test_collapses_whitespace_and_hyphens(self) -> None:
        assert slugify("  My   First -- Post  ") == "my-first-post"
        assert slugify("a\t\nb") == "a-b"

    def test_keeps_digits(self) -> None:
        assert slugify("Top 10 Study Tips for 2024") == "top-10-study-tips-for-2024"

    def test_drops_non_ascii_letters(self) -> None:
        assert slugify("Café Crème") == "caf-crme"

    @pytest.mark.parametrize(
        "title",
        ["Hello, World!", "", "  --a--b--  ", "Already-a-slug", "Ünïcödé & symbols #1", "x" * 300],
    )
    def test_idempotent(self, title: str) -> None:
        once = slugify(title)
        assert slugify(once) == once


class TestSlugValidation:
    """validate_slug() and sanitize_slug() agree on canonical form."""

    def test_valid_slug(self) -> None:
        assert validate_slug("my-first-post")
        assert validate_slug("post-2")

    @pytest.mark.parametrize("slug", ["", "-lead", "trail-", "double--hyphen", "Upper", "sp ace", "x" * 101])
    def test_invalid_slug(self, slug: str) -> None:
        assert not validate_slug(slug)

    def test_sanitize_cuts_and_trims(self) -> None:
        slug = sanitize_slug("a" * 99 + "-bcd")
        assert slug == "a" * 99
        assert validate_slug(slug)

    def test_sanitize_falls_back(self) -> None:
        assert sanitize_slug("---") == FALLBACK_SLUG


class TestExcerpt:
    """extract_excerpt() strips markdown and truncates."""

    def test_strips_markdown(self) -> None:
        excerpt = extract_excerpt("# Title\n\nSome **bold** text", 100)
        assert "#" not in excerpt
        assert "**" not in excerpt
        assert excerpt == "Title Some bold text"
        assert len(excerpt) <= 103

    def test_links_keep_text(self) -> None:
        content = "Read [the guide](https://example.com/guide) and `run it` *now*"
        assert extract_excerpt(content, 200) == "Read the guide and run it now"

    def test_truncates_with_ellipsis(self) -> None:
        content = "word " * 100
        excerpt = extract_excerpt(content, 20)
        assert excerpt.endswith("...")
        assert len(excerpt) <= 23

    def test_plain_text_untouched(self) -> None:
        content = "Hello there, this is my first article."
        assert extract_excerpt(content, 200) == content

    def test_empty_input(self) -> None:
        assert extract_excerpt("", 100) == ""
        assert extract_excerpt(None, 100) == ""  # type: ignore[arg-type]


class TestTextHelpers:
    """truncate_text() and reading_time()."""

    def test_truncate(self) -> None:
        assert truncate_text("short", 10) == "short"
        assert truncate_text("hello world", 6) == "hello..."
        assert truncate_text("anything", 0) == ""

    def test_reading_time(self) -> None:
        assert reading_time("") == 0
        assert reading_time("one two three") == 1
        assert reading_time("word " * 401) == 3
