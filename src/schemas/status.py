"""User status schemas."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StatusInput(BaseModel):
    """Status text; must not be empty."""

    model_config = ConfigDict(str_strip_whitespace=True)

    status: str = Field(..., min_length=1, max_length=255)


class BoundedStatusInput(StatusInput):
    """Status text as accepted by the REST surface."""

    status: str = Field(..., min_length=1, max_length=20)


class StatusUpdate(BaseModel):
    """REST status update request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    updated_status: str | None = None


class StatusResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str
    status: str
    user_id: str | None = None
