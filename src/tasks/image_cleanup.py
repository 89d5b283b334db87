"""Celery tasks for reconciling stored images with posts."""

import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from src.celery_app import app as celery_app
from src.config import get_settings
from src.database import SessionLocal
from src.models import Post
from src.services.storage import ImageStore

logger = logging.getLogger(__name__)


def sweep_orphaned_images(
    db: Session, image_store: ImageStore, grace: timedelta | None = None
) -> list[str]:
    """Release stored images that no post references.

    Post deletes and image replacements release files only after the database
    commit, so a crash in between leaves orphans behind. ``grace`` skips files
    younger than the given age, which covers uploads not yet attached to a post.

    Returns:
        References of the released images
    """
    referenced = {image_url for (image_url,) in db.query(Post.image_url).all()}
    orphans = sorted(image_store.stored_refs(older_than=grace) - referenced)
    for ref in orphans:
        image_store.release(ref)
    if orphans:
        logger.info(f"Released {len(orphans)} orphaned images")
    return orphans


@celery_app.task
def sweep_images() -> dict:
    """Periodic sweep, scheduled via celery-beat.

    Returns:
        dict with the number of released images
    """
    settings = get_settings()
    db: Session = SessionLocal()
    try:
        released = sweep_orphaned_images(
            db,
            ImageStore(settings.upload_dir),
            grace=timedelta(minutes=settings.image_sweep_interval_minutes),
        )
        return {"released": len(released)}
    finally:
        db.close()
