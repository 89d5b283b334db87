"""Standalone image upload, used by GraphQL clients before createPost/updatePost."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.concurrency import run_in_threadpool

from src.api.dependencies import get_current_user_id, get_feed_service
from src.schemas.post import ImageUploadResponse
from src.services.feed_service import FeedService

router = APIRouter(tags=["images"])


@router.put("/post-image", response_model=ImageUploadResponse)
async def upload_post_image(
    current_user_id: Annotated[int, Depends(get_current_user_id)],
    feed_service: Annotated[FeedService, Depends(get_feed_service)],
    image: Annotated[UploadFile | None, File()] = None,
    old_path: Annotated[str | None, Form(alias="oldPath")] = None,
):
    """Store an image and return its reference.

    ``oldPath`` is released when one of the caller's own posts shows it; an
    image shown by another user's post is refused with 403.
    """
    if image is None:
        return ImageUploadResponse(message="No file provided!")

    file_path = await feed_service.image_store.save(image)
    if old_path:
        try:
            await run_in_threadpool(
                feed_service.release_replaced_image, current_user_id, old_path
            )
        except Exception:
            feed_service.image_store.release(file_path)
            raise
    return ImageUploadResponse(message="File stored.", file_path=file_path)
