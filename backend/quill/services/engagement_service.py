"""Engagement service - likes, reading list and comments."""

import logging
from uuid import UUID

from quill.db.base import Store
from quill.exceptions import NotFound, UniqueViolation, ValidationFailed
from quill.models import Comment, Like, Post, ReadingListEntry
from quill.schemas.comment import CommentResponse
from quill.schemas.post import PostResponse
from quill.services.cache import QueryCache
from quill.services.post_service import attach_stats

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 2000


class EngagementService:
    """Service for reader interactions with posts. Every write clears the cache."""

    def __init__(self, store: Store, cache: QueryCache):
        self.store = store
        self.cache = cache

    async def toggle_like(self, post_id: UUID, user_id: UUID) -> bool:
        """Like or unlike a post. Returns True when the post is now liked."""
        return await self._toggle(Like, post_id, user_id)

    async def toggle_save(self, post_id: UUID, user_id: UUID) -> bool:
        """Add a post to or remove it from the reading list. True when now saved."""
        return await self._toggle(ReadingListEntry, post_id, user_id)

    async def get_reading_list(self, user_id: UUID) -> list[PostResponse]:
        """Saved posts, most recently saved first."""
        entries = await self.store.select(
            ReadingListEntry, {"user_id": user_id}, order_by="created_at", descending=True
        )
        if not entries:
            return []

        posts = await self.store.select(Post, {"id": [e.post_id for e in entries]})
        by_id = {post.id: post for post in posts}
        return await attach_stats(self.store, [by_id[e.post_id] for e in entries if e.post_id in by_id])

    async def add_comment(
        self,
        post_id: UUID,
        user_id: UUID,
        content: str,
        parent_id: UUID | None = None,
    ) -> CommentResponse:
        """
        Comment on a post, or reply to a top-level comment.

        Replies only go one level deep: replying to a reply is rejected.
        """
        content = (content or "").strip()
        if not content:
            raise ValidationFailed("Comment cannot be empty")
        if len(content) > MAX_COMMENT_LENGTH:
            raise ValidationFailed(f"Comment must be less than {MAX_COMMENT_LENGTH} characters")

        await self._require_post(post_id)

        if parent_id is not None:
            parents = await self.store.select(Comment, {"id": parent_id}, limit=1)
            if not parents:
                raise NotFound(f"Comment {parent_id} not found")
            parent = parents[0]
            if parent.post_id != post_id:
                raise ValidationFailed("Reply must belong to the same post as its parent")
            if parent.parent_id is not None:
                raise ValidationFailed("Replies can only be one level deep")

        comment = await self.store.insert(
            Comment(post_id=post_id, author_id=user_id, content=content, parent_id=parent_id)
        )
        self.cache.clear()
        return CommentResponse.model_validate(comment)

    async def get_comments(self, post_id: UUID) -> list[CommentResponse]:
        """Top-level comments oldest first, each with its replies attached."""
        comments = await self.store.select(Comment, {"post_id": post_id}, order_by="created_at")

        threads: dict[UUID, CommentResponse] = {}
        replies: list[Comment] = []
        for comment in comments:
            if comment.parent_id is None:
                threads[comment.id] = CommentResponse.model_validate(comment)
            else:
                replies.append(comment)

        for reply in replies:
            thread = threads.get(reply.parent_id)
            if thread is not None:
                thread.replies.append(CommentResponse.model_validate(reply))
        return list(threads.values())

    async def _toggle(self, model: type[Like] | type[ReadingListEntry], post_id: UUID, user_id: UUID) -> bool:
        filters = {"user_id": user_id, "post_id": post_id}
        existing = await self.store.select(model, filters, limit=1)

        if existing:
            await self.store.delete(model, filters)
            active = False
        else:
            await self._require_post(post_id)
            try:
                await self.store.insert(model(user_id=user_id, post_id=post_id))
            except UniqueViolation:
                # A concurrent toggle already inserted the row
                logger.debug("%s for %s/%s already present", model.__tablename__, user_id, post_id)
            active = True

        self.cache.clear()
        return active

    async def _require_post(self, post_id: UUID) -> None:
        if not await self.store.select(Post, {"id": post_id}, limit=1):
            raise NotFound(f"Post {post_id} not found")
