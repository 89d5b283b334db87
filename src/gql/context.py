"""Per-request GraphQL context."""

import asyncio
from collections.abc import Callable
from functools import cached_property
from typing import Annotated, Any, TypeVar

from fastapi import Depends, Header
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from strawberry.fastapi import BaseContext

from src.database import get_db
from src.errors import Unauthenticated
from src.services.auth import authenticate_header
from src.services.feed_service import FeedService
from src.services.storage import ImageStore, get_image_store

T = TypeVar("T")


class FeedContext(BaseContext):
    """Authentication state resolved once per request, shared by every resolver.

    A missing or invalid token does not reject the request; resolvers that need
    an identity call ``require_user_id`` and fail individually.
    """

    def __init__(self, db: Session, image_store: ImageStore, user_id: int | None = None):
        super().__init__()
        self.db = db
        self.image_store = image_store
        self.user_id = user_id
        self._session_lock = asyncio.Lock()

    @property
    def is_auth(self) -> bool:
        return self.user_id is not None

    def require_user_id(self) -> int:
        if self.user_id is None:
            raise Unauthenticated("Not authenticated.")
        return self.user_id

    @cached_property
    def feed_service(self) -> FeedService:
        return FeedService(self.db, self.image_store)

    async def run(self, func: Callable[..., T], *args: Any) -> T:
        """Run blocking session work in the threadpool.

        Sibling query fields resolve concurrently but share one session, so
        calls are serialized per request.
        """
        async with self._session_lock:
            return await run_in_threadpool(func, *args)


async def get_context(
    db: Annotated[Session, Depends(get_db)],
    image_store: Annotated[ImageStore, Depends(get_image_store)],
    authorization: Annotated[str | None, Header()] = None,
) -> FeedContext:
    try:
        user_id = authenticate_header(authorization).user_id
    except Unauthenticated:
        user_id = None
    return FeedContext(db, image_store, user_id)
