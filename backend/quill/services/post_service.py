"""Post service - publishing pipeline, edits and cached reads."""

import asyncio
import logging
from collections import Counter
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from tenacity import before_sleep_log, retry, retry_if_exception_type, stop_after_attempt

from quill.config import Settings, get_settings
from quill.db.base import Store
from quill.exceptions import (
    NotFound,
    PermissionDenied,
    PublishFailed,
    QuillError,
    UniqueViolation,
    ValidationFailed,
)
from quill.models import Category, Comment, Like, Post
from quill.schemas.post import CategoryResponse, PostCreate, PostListOptions, PostResponse, PostUpdate
from quill.services.cache import QueryCache
from quill.services.image_service import ImageFile
from quill.services.slug_service import SlugResolver
from quill.services.upload_service import UploadPurpose, UploadService
from quill.utils.text import extract_excerpt, reading_time, sanitize_slug, slugify

logger = logging.getLogger(__name__)


class PostService:
    """Service for creating, editing and reading posts.

    Every write clears the query cache before returning.
    """

    def __init__(
        self,
        store: Store,
        cache: QueryCache,
        uploads: UploadService,
        settings: Settings | None = None,
    ):
        self.store = store
        self.cache = cache
        self.uploads = uploads
        self.settings = settings or get_settings()
        self.slugs = SlugResolver(
            store,
            max_attempts=self.settings.slug_max_attempts,
            max_length=self.settings.slug_max_length,
        )

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def publish(
        self,
        data: PostCreate,
        author_id: UUID,
        cover_image: ImageFile | None = None,
    ) -> PostResponse:
        """
        Create a post, either as a draft or published.

        Steps run strictly in order: validate, upload the cover (if any), derive
        and resolve the slug, derive the excerpt, insert, clear the cache. A failed
        cover upload aborts the publish with the upload's own error.
        """
        title, content = self._validate_title_and_content(data.title, data.content)
        excerpt = self._clean_excerpt(data.excerpt)

        cover_image_url = None
        if cover_image is not None:
            result = await self.uploads.upload(cover_image, author_id, UploadPurpose.COVER)
            cover_image_url = result.url

        base_slug = sanitize_slug(slugify(title), self.settings.slug_max_length)
        if not excerpt:
            excerpt = extract_excerpt(content, self.settings.auto_excerpt_length)

        fields = {
            "title": title,
            "content": content,
            "excerpt": excerpt or None,
            "cover_image_url": cover_image_url,
            "author_id": author_id,
            "category_id": data.category_id,
            "published": data.published,
        }
        try:
            post = await self._insert_with_unique_slug(base_slug, fields)
        except UniqueViolation as e:
            raise PublishFailed(f"Could not reserve a unique slug for '{title}': {e}") from e
        except QuillError:
            raise
        except Exception as e:
            logger.exception("Unexpected error creating post '%s'", title)
            raise PublishFailed(f"Failed to create post: {e}") from e

        self.cache.clear()
        logger.info(
            "Post %s created as %s (slug=%s)",
            post.id,
            "published" if post.published else "draft",
            post.slug,
        )
        return to_response(post)

    @retry(
        retry=retry_if_exception_type(UniqueViolation),
        stop=stop_after_attempt(2),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _insert_with_unique_slug(self, base_slug: str, fields: dict[str, Any]) -> Post:
        # A unique violation here means another publisher claimed the slug between
        # the check and the insert; resolving again picks the next free suffix.
        slug = await self.slugs.resolve(base_slug)
        return await self.store.insert(Post(slug=slug, **fields))

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    async def update_post(self, post_id: UUID, user_id: UUID, data: PostUpdate) -> PostResponse:
        """Edit an owned post. The slug is immutable and is never re-derived."""
        current = await self._get_owned_post(post_id, user_id)

        patch = data.model_dump(exclude_unset=True)
        # Explicit nulls only make sense for nullable columns
        if "published" in patch and patch["published"] is None:
            del patch["published"]
        if "title" in patch or "content" in patch:
            title, content = self._validate_title_and_content(
                patch.get("title", current.title), patch.get("content", current.content)
            )
            patch["title"], patch["content"] = title, content
        if "excerpt" in patch:
            patch["excerpt"] = self._clean_excerpt(patch["excerpt"]) or None
        if patch.get("cover_image_url") is not None:
            patch["cover_image_url"] = str(patch["cover_image_url"])
        patch["updated_at"] = datetime.now(UTC)

        rows = await self.store.update(Post, {"id": post_id}, patch)
        self.cache.clear()
        return await self._with_stats(rows[0])

    async def set_published(self, post_id: UUID, user_id: UUID, published: bool) -> PostResponse:
        return await self.update_post(post_id, user_id, PostUpdate(published=published))

    async def delete_post(self, post_id: UUID, user_id: UUID) -> None:
        """Delete an owned post. Likes, comments and saves cascade in the store."""
        await self._get_owned_post(post_id, user_id)
        await self.store.delete(Post, {"id": post_id})
        self.cache.clear()
        logger.info("Post %s deleted by %s", post_id, user_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_posts(self, options: PostListOptions | None = None) -> list[PostResponse]:
        """List posts newest first, with like and comment counts."""
        options = options or PostListOptions()
        cache_key = QueryCache.make_key("posts", options)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        filters: dict[str, Any] = {}
        if options.published_only:
            filters["published"] = True
        if options.author_id:
            filters["author_id"] = options.author_id
        if options.category_id:
            filters["category_id"] = options.category_id

        posts = await self.store.select(
            Post,
            filters,
            order_by="created_at",
            descending=True,
            limit=options.limit,
            offset=options.offset,
        )
        result = await attach_stats(self.store, posts)
        self.cache.set(cache_key, result)
        return result

    async def get_post_by_slug(self, slug: str) -> PostResponse | None:
        """Get a published post by slug. Drafts are never returned here."""
        cache_key = f"post_{slug}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        rows = await self.store.select(Post, {"slug": slug, "published": True}, limit=1)
        if not rows:
            return None

        result = await self._with_stats(rows[0])
        self.cache.set(cache_key, result)
        return result

    async def get_post_for_owner(self, post_id: UUID, user_id: UUID) -> PostResponse:
        """Get any post (drafts included) for its author, e.g. for editing."""
        post = await self._get_owned_post(post_id, user_id)
        return await self._with_stats(post)

    async def list_categories(self) -> list[CategoryResponse]:
        cached = self.cache.get("categories")
        if cached is not None:
            return cached

        categories = await self.store.select(Category, order_by="name")
        result = [CategoryResponse.model_validate(c) for c in categories]
        self.cache.set("categories", result)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate_title_and_content(self, title: str | None, content: str | None) -> tuple[str, str]:
        title = (title or "").strip()
        content = (content or "").strip()

        if not title:
            raise ValidationFailed("Title is required")
        if len(title) > self.settings.title_max_length:
            raise ValidationFailed(
                f"Title must be less than {self.settings.title_max_length} characters"
            )
        if not content:
            raise ValidationFailed("Content is required")
        if len(content) < self.settings.content_min_length:
            raise ValidationFailed(
                f"Content must be at least {self.settings.content_min_length} characters"
            )
        return title, content

    def _clean_excerpt(self, excerpt: str | None) -> str:
        excerpt = (excerpt or "").strip()
        if len(excerpt) > self.settings.excerpt_max_length:
            raise ValidationFailed(
                f"Excerpt must be less than {self.settings.excerpt_max_length} characters"
            )
        return excerpt

    async def _get_owned_post(self, post_id: UUID, user_id: UUID) -> Post:
        rows = await self.store.select(Post, {"id": post_id}, limit=1)
        if not rows:
            raise NotFound(f"Post {post_id} not found")
        post = rows[0]
        if post.author_id != user_id:
            raise PermissionDenied("Only the author can change this post")
        return post

    async def _with_stats(self, post: Post) -> PostResponse:
        likes, comments = await asyncio.gather(
            self.store.count(Like, {"post_id": post.id}),
            self.store.count(Comment, {"post_id": post.id}),
        )
        return to_response(post, likes, comments)


def to_response(post: Post, likes: int = 0, comments: int = 0) -> PostResponse:
    return PostResponse(
        **post.model_dump(),
        likes_count=likes,
        comments_count=comments,
        reading_time=reading_time(post.content),
    )


async def attach_stats(store: Store, posts: list[Post]) -> list[PostResponse]:
    """Attach counts using one query per table instead of one per post."""
    if not posts:
        return []

    post_ids = [p.id for p in posts]
    likes, comments = await asyncio.gather(
        store.select(Like, {"post_id": post_ids}),
        store.select(Comment, {"post_id": post_ids}),
    )
    like_counts = Counter(like.post_id for like in likes)
    comment_counts = Counter(comment.post_id for comment in comments)
    return [to_response(p, like_counts[p.id], comment_counts[p.id]) for p in posts]
