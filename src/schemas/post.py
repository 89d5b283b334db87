"""Post schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class PostInput(BaseModel):
    """Post fields checked on create and update."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=5, max_length=255)
    content: str = Field(..., min_length=5)
    image_url: str = Field(..., min_length=1)


class CreatorResponse(BaseModel):
    """Public view of a post's creator."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str

    @field_serializer("id")
    def serialize_id(self, value: int) -> str:
        return str(value)


class PostResponse(BaseModel):
    """Post response."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str
    content: str
    image_url: str
    creator: CreatorResponse
    created_at: datetime
    updated_at: datetime

    @field_serializer("id")
    def serialize_id(self, value: int) -> str:
        return str(value)


class PostListResponse(BaseModel):
    """One page of the feed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str = "Fetched posts successfully."
    posts: list[PostResponse]
    total_items: int


class PostCreatedResponse(BaseModel):
    message: str = "Post created successfully!"
    post: PostResponse
    user: CreatorResponse


class PostEnvelope(BaseModel):
    message: str
    post: PostResponse


class MessageResponse(BaseModel):
    message: str


class ImageUploadResponse(BaseModel):
    """Result of a standalone image upload."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str
    file_path: str | None = None
