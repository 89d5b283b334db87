"""Feed service: post CRUD, pagination, ownership and user status."""

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from src.config import get_settings
from src.errors import Forbidden, NotFound
from src.models import Post, User
from src.schemas.post import PostInput, PostResponse
from src.schemas.status import StatusInput
from src.services.realtime import PostEventType, publish_post_event
from src.services.storage import ImageStore
from src.services.validation import validate

logger = logging.getLogger(__name__)


def resolve_page(page: Any) -> int:
    """Normalize a requested page number.

    Missing, non-numeric and non-positive values all fall back to page 1.
    """
    try:
        number = int(page)
    except (TypeError, ValueError):
        return 1
    return number if number > 0 else 1


def parse_post_id(post_id: int | str) -> int:
    """Post ids arrive as path segments or GraphQL IDs; anything non-numeric matches no post."""
    try:
        return int(post_id)
    except (TypeError, ValueError):
        raise NotFound("Post not found.") from None


def assert_owner(post: Post, user_id: int) -> None:
    """Raise Forbidden unless ``user_id`` created ``post``."""
    if post.creator_id != user_id:
        raise Forbidden("Not authorized!")


def serialize_post(post: Post) -> dict:
    """JSON-ready post payload, as sent to REST clients and subscribers."""
    return PostResponse.model_validate(post).model_dump(mode="json", by_alias=True)


class FeedService:
    """Service for post and status operations on behalf of an authenticated user."""

    def __init__(self, db: Session, image_store: ImageStore | None = None):
        self.db = db
        self.image_store = image_store or ImageStore()
        self.settings = get_settings()

    def _get_user(self, user_id: int, missing: type[NotFound] | type[Forbidden]) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise missing("User not found.")
        return user

    def _find_post(self, post_id: int | str) -> Post:
        post = (
            self.db.query(Post)
            .options(joinedload(Post.creator))
            .filter(Post.id == parse_post_id(post_id))
            .first()
        )
        if not post:
            raise NotFound("Post not found.")
        return post

    def _image_owners(self, ref: str) -> set[int]:
        rows = self.db.query(Post.creator_id).filter(Post.image_url == ref).all()
        return {creator_id for (creator_id,) in rows}

    def _release_unused(self, ref: str | None) -> None:
        # Several posts may show the same stored image
        if ref and not self._image_owners(ref):
            self.image_store.release(ref)

    def _image_ref(self, image_url: str | None) -> str | None:
        return self.image_store.ref_for(image_url) if image_url else None

    def list_posts(self, page: Any = None) -> tuple[list[Post], int]:
        """Return one page of posts, newest first, and the total post count."""
        per_page = self.settings.posts_per_page
        current_page = resolve_page(page)

        total = self.db.query(func.count(Post.id)).scalar() or 0
        posts = (
            self.db.query(Post)
            .options(joinedload(Post.creator))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset((current_page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return posts, total

    def get_post(self, post_id: int | str) -> Post:
        return self._find_post(post_id)

    def create_post(
        self, user_id: int, title: str | None, content: str | None, image_url: str | None
    ) -> Post:
        """Create a post owned by ``user_id`` and notify subscribers.

        Raises:
            ValidationFailed: on short title/content or a missing image
            NotFound: if the acting user no longer exists
        """
        data = validate(
            PostInput, title=title, content=content, image_url=self._image_ref(image_url)
        )
        user = self._get_user(user_id, NotFound)

        post = Post(
            title=data.title,
            content=data.content,
            image_url=data.image_url,
            creator=user,
        )
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        logger.info(f"User {user_id} created post {post.id}")

        publish_post_event(PostEventType.CREATE, serialize_post(post))
        return post

    def update_post(
        self,
        post_id: int | str,
        user_id: int,
        title: str | None,
        content: str | None,
        image_url: str | None = None,
    ) -> Post:
        """Update a post's title, content and image. Without a new image the old one is kept.

        Raises:
            NotFound: if the post does not exist
            Forbidden: if ``user_id`` is not the creator
            ValidationFailed: on short title/content
        """
        post = self._find_post(post_id)
        assert_owner(post, user_id)
        data = validate(
            PostInput,
            title=title,
            content=content,
            image_url=self._image_ref(image_url) or post.image_url,
        )

        old_image = post.image_url
        post.title = data.title
        post.content = data.content
        post.image_url = data.image_url
        self.db.commit()
        self.db.refresh(post)
        logger.info(f"User {user_id} updated post {post.id}")

        if data.image_url != old_image:
            self._release_unused(old_image)
        publish_post_event(PostEventType.UPDATE, serialize_post(post))
        return post

    def delete_post(self, post_id: int | str, user_id: int) -> None:
        """Delete a post, release its image and notify subscribers.

        The image is released after the row is gone; a failed release leaves an
        orphaned file for the image sweep task to reclaim.
        """
        post = self._find_post(post_id)
        assert_owner(post, user_id)

        deleted_id = post.id
        image_url = post.image_url
        self.db.delete(post)
        self.db.commit()
        logger.info(f"User {user_id} deleted post {deleted_id}")

        self._release_unused(image_url)
        publish_post_event(PostEventType.DELETE, deleted_id)

    def release_replaced_image(self, user_id: int, ref: str) -> None:
        """Release an image the acting user is replacing through the upload endpoint.

        Only an image shown by one of the user's own posts is released. An image
        no post shows yet is left for the sweep.

        Raises:
            Forbidden: if a post of another user shows the image
        """
        ref = self.image_store.ref_for(ref)
        owners = self._image_owners(ref)
        if owners - {user_id}:
            raise Forbidden("Not authorized!")
        if user_id in owners:
            self.image_store.release(ref)
            logger.info(f"User {user_id} released image {ref}")

    def get_user(self, user_id: int) -> User:
        """The acting user. Forbidden if the account vanished after the token was issued."""
        return self._get_user(user_id, Forbidden)

    def get_status(self, user_id: int) -> str:
        return self.get_user(user_id).status

    def set_status(
        self, user_id: int, status: str | None, schema: type[StatusInput] = StatusInput
    ) -> User:
        """Replace the acting user's status text."""
        data = validate(schema, status=status)
        user = self.get_user(user_id)
        user.status = data.status
        self.db.commit()
        self.db.refresh(user)
        return user
