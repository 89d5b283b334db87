"""Declarative input validation.

Inputs are checked against the pydantic schemas in ``src.schemas``. Every
violation is collected (never fail-fast) and reported as an ordered list of
``{"field": ..., "message": ...}`` entries carried by ``ValidationFailed``.
"""

from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.errors import ValidationFailed

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# User-facing messages, by (field, pydantic error type) first, then by field
ERROR_MESSAGES: dict[tuple[str, str], str] = {
    ("title", "string_too_long"): "Title is too long.",
    ("status", "string_too_long"): "Status is too long.",
    ("image_url", "missing"): "No image provided.",
}

FIELD_MESSAGES: dict[str, str] = {
    "email": "Please enter a valid email.",
    "password": "Password is too short.",
    "name": "Name can't be empty.",
    "title": "Title is too short.",
    "content": "Content is too short.",
    "image_url": "No image provided.",
    "status": "Status can't be empty.",
}


def violations_from(errors: Sequence[Any]) -> list[dict[str, str]]:
    """Translate pydantic error dicts into the ordered violation list."""
    violations = []
    for error in errors:
        field = str(error["loc"][-1]) if error["loc"] else "input"
        message = ERROR_MESSAGES.get((field, error["type"])) or FIELD_MESSAGES.get(
            field, error["msg"]
        )
        violations.append({"field": field, "message": message})
    return violations


def validate(schema: type[SchemaT], **values: Any) -> SchemaT:
    """Validate keyword values against ``schema``.

    ``None`` values are treated as absent, so a missing form field and an
    explicit null produce the same violation.
    """
    present = {key: value for key, value in values.items() if value is not None}
    try:
        return schema.model_validate(present)
    except PydanticValidationError as exc:
        raise ValidationFailed(data=violations_from(exc.errors())) from exc
