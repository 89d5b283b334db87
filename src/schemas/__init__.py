"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import AuthResponse, SignupResponse, UserLogin, UserSignup
from src.schemas.post import (
    CreatorResponse,
    ImageUploadResponse,
    MessageResponse,
    PostCreatedResponse,
    PostEnvelope,
    PostInput,
    PostListResponse,
    PostResponse,
)
from src.schemas.status import BoundedStatusInput, StatusInput, StatusResponse, StatusUpdate

__all__ = [
    "UserSignup",
    "UserLogin",
    "SignupResponse",
    "AuthResponse",
    "PostInput",
    "PostResponse",
    "CreatorResponse",
    "PostListResponse",
    "PostCreatedResponse",
    "PostEnvelope",
    "MessageResponse",
    "ImageUploadResponse",
    "StatusInput",
    "BoundedStatusInput",
    "StatusUpdate",
    "StatusResponse",
]
