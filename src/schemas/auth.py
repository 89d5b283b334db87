"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class UserSignup(BaseModel):
    """User signup request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=5, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)


class UserLogin(BaseModel):
    """User login request."""

    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=128)


class SignupResponse(BaseModel):
    """Signup response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str
    user_id: str


class AuthResponse(BaseModel):
    """Login response with a bearer token."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str
    user_id: str
