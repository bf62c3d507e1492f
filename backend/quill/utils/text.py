"""Slug and excerpt helpers.

These functions never raise: bad input degrades to a fallback value so that the
publishing flow is never interrupted by a formatting problem.
"""

import logging
import math
import re

logger = logging.getLogger(__name__)

FALLBACK_SLUG = "untitled-post"
MAX_SLUG_LENGTH = 100
WORDS_PER_MINUTE = 200

_SLUG_INVALID = re.compile(r"[^a-z0-9\s-]")
_SLUG_STRICT_INVALID = re.compile(r"[^a-z0-9-]")
_SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")

_MD_HEADING = re.compile(r"#{1,6}\s+")
_MD_BOLD = re.compile(r"\*\*(.*?)\*\*")
_MD_ITALIC = re.compile(r"\*(.*?)\*")
_MD_CODE = re.compile(r"`(.*?)`")
_MD_LINK = re.compile(r"!?\[([^\]]+)\]\([^)]+\)")
_NEWLINES = re.compile(r"\n+")


def slugify(title: str) -> str:
    """Turn a post title into a URL-safe, lowercase, hyphenated slug.

    >>> slugify("Hello, World!")
    'hello-world'
    >>> slugify("   ---   ")
    'untitled-post'
    """
    if not title or not isinstance(title, str):
        return FALLBACK_SLUG

    try:
        slug = _SLUG_INVALID.sub("", title.lower().strip())
        slug = _WHITESPACE.sub(" ", slug).replace(" ", "-")
        slug = _HYPHENS.sub("-", slug).strip("-")
    except Exception:
        logger.exception("Error generating slug for %r", title)
        return FALLBACK_SLUG
    return slug or FALLBACK_SLUG


def validate_slug(slug: str) -> bool:
    """Check that a slug is already in canonical form."""
    if not slug or not isinstance(slug, str):
        return False
    if len(slug) > MAX_SLUG_LENGTH:
        return False
    if slug.startswith("-") or slug.endswith("-") or "--" in slug:
        return False
    return bool(_SLUG_PATTERN.match(slug))


def sanitize_slug(slug: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Force a user-supplied slug into canonical form, cut to ``max_length``."""
    if not slug or not isinstance(slug, str):
        return FALLBACK_SLUG

    cleaned = _SLUG_STRICT_INVALID.sub("", slug.lower().strip())
    cleaned = _HYPHENS.sub("-", cleaned).strip("-")
    # Cutting can leave a dangling hyphen at the end
    cleaned = cleaned[:max_length].rstrip("-")
    return cleaned or FALLBACK_SLUG


def truncate_text(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters, marking the cut with an ellipsis."""
    if not text or not isinstance(text, str) or max_length <= 0:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length].rstrip() + "..."


def extract_excerpt(content: str, max_length: int = 200) -> str:
    """Build a plain-text summary from markdown-flavoured content.

    Heading markers, bold/italic markers, inline code backticks and link syntax
    are stripped (links keep their text), newlines collapse to spaces and the
    result is truncated with :func:`truncate_text`.
    """
    if not content or not isinstance(content, str):
        return ""

    try:
        plain = _MD_HEADING.sub("", content)
        plain = _MD_BOLD.sub(r"\1", plain)
        plain = _MD_ITALIC.sub(r"\1", plain)
        plain = _MD_CODE.sub(r"\1", plain)
        plain = _MD_LINK.sub(r"\1", plain)
        plain = _NEWLINES.sub(" ", plain).strip()
    except Exception:
        logger.exception("Error extracting excerpt")
        return ""
    return truncate_text(plain, max_length)


def reading_time(content: str) -> int:
    """Estimated minutes to read ``content`` (at least 1 for non-empty text)."""
    if not content or not isinstance(content, str):
        return 0
    words = len(content.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))
