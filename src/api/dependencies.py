"""FastAPI dependencies for authentication and services."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from src.database import get_db
from src.services.auth import TokenClaims, authenticate_header
from src.services.feed_service import FeedService
from src.services.storage import ImageStore, get_image_store


def get_token_claims(
    authorization: Annotated[str | None, Header()] = None,
) -> TokenClaims:
    """Authentication gate: verify the bearer token or raise Unauthenticated.

    Errors other than a failed verification propagate and surface as 500.
    """
    return authenticate_header(authorization)


def get_current_user_id(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
) -> int:
    """Get the id of the user the request acts for."""
    return claims.user_id


def get_feed_service(
    db: Annotated[Session, Depends(get_db)],
    image_store: Annotated[ImageStore, Depends(get_image_store)],
) -> FeedService:
    """Get feed service with dependencies."""
    return FeedService(db, image_store)
