"""Feed API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from starlette.concurrency import run_in_threadpool

from src.api.dependencies import get_current_user_id, get_feed_service
from src.schemas.post import (
    CreatorResponse,
    MessageResponse,
    PostCreatedResponse,
    PostEnvelope,
    PostListResponse,
    PostResponse,
)
from src.schemas.status import BoundedStatusInput, StatusResponse, StatusUpdate
from src.services.feed_service import FeedService

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("/posts", response_model=PostListResponse)
def get_posts(
    current_user_id: Annotated[int, Depends(get_current_user_id)],
    feed_service: Annotated[FeedService, Depends(get_feed_service)],
    page: str | None = Query(default=None, description="1-based page number"),
):
    """Get one page of the feed, newest first."""
    posts, total = feed_service.list_posts(page)
    return PostListResponse(
        posts=[PostResponse.model_validate(post) for post in posts],
        total_items=total,
    )


@router.post("/post", response_model=PostCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    current_user_id: Annotated[int, Depends(get_current_user_id)],
    feed_service: Annotated[FeedService, Depends(get_feed_service)],
    title: Annotated[str | None, Form()] = None,
    content: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
):
    """Create a post with an uploaded image."""
    image_url = await feed_service.image_store.save(image) if image else None
    try:
        post = await run_in_threadpool(
            feed_service.create_post, current_user_id, title, content, image_url
        )
    except Exception:
        feed_service.image_store.release(image_url)
        raise

    return PostCreatedResponse(
        post=PostResponse.model_validate(post),
        user=CreatorResponse.model_validate(post.creator),
    )


@router.get("/post/{post_id}", response_model=PostEnvelope)
def get_post(
    post_id: str,
    current_user_id: Annotated[int, Depends(get_current_user_id)],
    feed_service: Annotated[FeedService, Depends(get_feed_service)],
):
    """Get a single post."""
    post = feed_service.get_post(post_id)
    return PostEnvelope(message="Post fetched.", post=PostResponse.model_validate(post))


@router.put("/post/{post_id}", response_model=PostEnvelope)
async def update_post(
    post_id: str,
    current_user_id: Annotated[int, Depends(get_current_user_id)],
    feed_service: Annotated[FeedService, Depends(get_feed_service)],
    title: Annotated[str | None, Form()] = None,
    content: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | str | None, File()] = None,
):
    """Update a post (creator only).

    ``image`` is either a new upload or the reference of an already stored
    image. Without one the current image is kept.
    """
    if isinstance(image, str):
        uploaded, image_url = None, image
    else:
        uploaded = await feed_service.image_store.save(image) if image else None
        image_url = uploaded
    try:
        post = await run_in_threadpool(
            feed_service.update_post, post_id, current_user_id, title, content, image_url
        )
    except Exception:
        feed_service.image_store.release(uploaded)
        raise
    return PostEnvelope(message="Post updated.", post=PostResponse.model_validate(post))


@router.delete("/post/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: str,
    current_user_id: Annotated[int, Depends(get_current_user_id)],
    feed_service: Annotated[FeedService, Depends(get_feed_service)],
):
    """Delete a post (creator only)."""
    feed_service.delete_post(post_id, current_user_id)
    return MessageResponse(message="Deleted post.")


@router.get("/status", response_model=StatusResponse)
def get_status(
    current_user_id: Annotated[int, Depends(get_current_user_id)],
    feed_service: Annotated[FeedService, Depends(get_feed_service)],
):
    """Get the current user's status."""
    return StatusResponse(message="Status found.", status=feed_service.get_status(current_user_id))


@router.put("/status", response_model=StatusResponse)
def update_status(
    status_data: StatusUpdate,
    current_user_id: Annotated[int, Depends(get_current_user_id)],
    feed_service: Annotated[FeedService, Depends(get_feed_service)],
):
    """Replace the current user's status (1-20 characters)."""
    user = feed_service.set_status(
        current_user_id, status_data.updated_status, schema=BoundedStatusInput
    )
    return StatusResponse(message="Status updated.", status=user.status, user_id=str(user.id))
