"""Posts API endpoints: listing, reading, publishing and editing."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from quill.api.deps import get_current_user_id, get_post_service, read_image
from quill.schemas.post import (
    PostCreate,
    PostListOptions,
    PostListResponse,
    PostResponse,
    PostUpdate,
)
from quill.services.post_service import PostService

router = APIRouter()


@router.get("", response_model=PostListResponse)
async def list_posts(
    category_id: UUID | None = None,
    author_id: UUID | None = None,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    service: PostService = Depends(get_post_service),
) -> PostListResponse:
    """
    List published posts, newest first.

    - category_id: Filter by category
    - author_id: Filter by author
    """
    options = PostListOptions(
        limit=limit, offset=offset, author_id=author_id, category_id=category_id
    )
    posts = await service.list_posts(options)
    return PostListResponse(posts=posts, total=len(posts), limit=limit, offset=offset)


@router.get("/mine", response_model=PostListResponse)
async def list_my_posts(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user_id: UUID = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
) -> PostListResponse:
    """List the current user's posts, drafts included (dashboard view)."""
    options = PostListOptions(limit=limit, offset=offset, author_id=user_id, published_only=False)
    posts = await service.list_posts(options)
    return PostListResponse(posts=posts, total=len(posts), limit=limit, offset=offset)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    title: str = Form(...),
    content: str = Form(...),
    excerpt: str | None = Form(default=None),
    category_id: UUID | None = Form(default=None),
    published: bool = Form(default=False),
    cover_image: UploadFile | None = File(default=None),
    user_id: UUID = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """
    Publish a post or save it as a draft.

    The slug is derived from the title and made unique; a blank excerpt is
    generated from the content.
    """
    image = await read_image(cover_image) if cover_image is not None else None
    data = PostCreate(
        title=title,
        content=content,
        excerpt=excerpt,
        category_id=category_id,
        published=published,
    )
    return await service.publish(data, user_id, cover_image=image)


@router.get("/{slug}", response_model=PostResponse)
async def get_post(slug: str, service: PostService = Depends(get_post_service)) -> PostResponse:
    """Get a published post by slug."""
    post = await service.get_post_by_slug(slug)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.get("/{post_id}/edit", response_model=PostResponse)
async def get_post_for_edit(
    post_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """Get an owned post, drafts included."""
    return await service.get_post_for_owner(post_id, user_id)


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: UUID,
    post_in: PostUpdate,
    user_id: UUID = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """Edit a post or flip its published flag. The slug never changes."""
    return await service.update_post(post_id, user_id, post_in)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
) -> None:
    """Delete a post along with its likes, comments and saves."""
    await service.delete_post(post_id, user_id)
