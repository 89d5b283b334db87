"""Local image storage for post images."""

import logging
import time
import uuid
from datetime import timedelta
from pathlib import Path

from fastapi import UploadFile

from src.config import get_settings

logger = logging.getLogger(__name__)

# Stored images are served from this URL prefix (see src.main)
IMAGE_URL_PREFIX = "images"


class ImageStore:
    """Stores uploaded image bytes on disk and hands back a URL-style reference."""

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = Path(root or get_settings().upload_dir)

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    async def save(self, file: UploadFile) -> str:
        """Write an uploaded file to the store and return its reference."""
        ext = Path(file.filename or "").suffix.lower()
        name = f"{uuid.uuid4()}{ext}"
        final_path = self.ensure_root() / name

        with final_path.open("wb") as handle:
            while True:
                chunk = await file.read(1024 * 1024)
                if not chunk:
                    break
                handle.write(chunk)
        await file.close()
        logger.debug(f"Stored image {name}")
        return self.ref_for(name)

    def ref_for(self, ref: str) -> str:
        """Canonical reference for a stored image, whatever prefix the caller sent."""
        return f"{IMAGE_URL_PREFIX}/{Path(ref).name}"

    def path_for(self, ref: str) -> Path:
        # Only the final component is trusted; references never address subdirectories
        return self.root / Path(ref).name

    def release(self, ref: str | None) -> None:
        """Delete a stored image. Failures are logged, never raised."""
        if not ref:
            return
        try:
            self.path_for(ref).unlink(missing_ok=True)
            logger.debug(f"Released image {ref}")
        except OSError as e:
            logger.error(f"Failed to release image {ref}: {e}")

    def stored_refs(self, older_than: timedelta | None = None) -> set[str]:
        """References of images currently on disk, optionally only those older than ``older_than``."""
        if not self.root.exists():
            return set()
        cutoff = time.time() - older_than.total_seconds() if older_than else None
        refs = set()
        for path in self.root.iterdir():
            if not path.is_file():
                continue
            if cutoff is not None and path.stat().st_mtime > cutoff:
                continue
            refs.add(self.ref_for(path.name))
        return refs


def get_image_store() -> ImageStore:
    """Get the image store for the configured upload directory."""
    return ImageStore()
