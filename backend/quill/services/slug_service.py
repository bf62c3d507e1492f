"""Slug uniqueness resolution against stored posts."""

import logging

from quill.db.base import Store
from quill.exceptions import SlugExhausted
from quill.models import Post
from quill.utils.text import MAX_SLUG_LENGTH

logger = logging.getLogger(__name__)


class SlugResolver:
    """Finds a free slug by appending ``-1``, ``-2``... to the original candidate.

    Suffixed slugs are cut so they never exceed ``max_length``.

    Check-then-insert is not atomic: two concurrent publishers can both be handed
    the same slug. The store's unique constraint catches that case and the post
    service retries once.
    """

    def __init__(self, store: Store, max_attempts: int = 10_000, max_length: int = MAX_SLUG_LENGTH):
        self.store = store
        self.max_attempts = max_attempts
        self.max_length = max_length

    async def exists(self, slug: str) -> bool:
        rows = await self.store.select(Post, {"slug": slug}, limit=1)
        return bool(rows)

    def with_suffix(self, candidate: str, counter: int) -> str:
        """``candidate-N``, shortening the candidate to keep within ``max_length``."""
        suffix = f"-{counter}"
        base = candidate[: self.max_length - len(suffix)].rstrip("-")
        return f"{base}{suffix}"

    async def resolve(self, candidate: str) -> str:
        """Return ``candidate`` or the first free ``candidate-N``."""
        if not await self.exists(candidate):
            return candidate

        for counter in range(1, self.max_attempts + 1):
            slug = self.with_suffix(candidate, counter)
            if not await self.exists(slug):
                logger.debug("Slug %s taken, using %s", candidate, slug)
                return slug

        raise SlugExhausted(
            f"No free slug for '{candidate}' after {self.max_attempts} attempts"
        )
