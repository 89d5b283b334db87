"""Post change notifications over Redis pub/sub."""

import json
import logging
from datetime import UTC, datetime
from enum import StrEnum

import redis

from src.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

POSTS_CHANNEL = "posts"


class PostEventType(StrEnum):
    """Actions published on the posts channel."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


# Synchronous Redis client for use in API endpoints
_sync_redis: redis.Redis | None = None


def get_sync_redis() -> redis.Redis:
    """Get synchronous Redis client for publishing from API endpoints."""
    global _sync_redis
    if _sync_redis is None:
        _sync_redis = redis.from_url(settings.redis_url)
    return _sync_redis


def publish_post_event(action: PostEventType, post: dict | int) -> None:
    """Publish a post change to subscribers.

    Fire-and-forget: a broken Redis connection is logged and never fails the
    request that triggered the event.

    Args:
        action: create, update or delete
        post: serialized post for create/update, the post id for delete
    """
    try:
        redis_client = get_sync_redis()
        message = {
            "action": action,
            "timestamp": datetime.now(UTC).isoformat(),
            "post": post,
        }
        redis_client.publish(POSTS_CHANNEL, json.dumps(message, default=str))
        logger.debug(f"Published {action} to {POSTS_CHANNEL}")
    except Exception as e:
        # Don't fail the request if pub/sub fails
        logger.error(f"Failed to publish post event: {e}")
