"""Domain errors shared by the REST and GraphQL transports.

Every failure the service layer can report is one of the classes below. They are
raised where the problem is detected and travel unchanged to the transport
boundary, which maps ``status_code`` (REST) or ``code`` (GraphQL) onto the wire.
"""

from typing import Any


class FeedError(Exception):
    """Base class for classified failures."""

    status_code: int = 500
    code: str = "Internal"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, data: list[dict[str, Any]] | None = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    @property
    def extensions(self) -> dict[str, Any]:
        """GraphQL error extensions (picked up by graphql-core from the original error)."""
        extensions: dict[str, Any] = {"code": self.code}
        if self.data is not None:
            extensions["data"] = self.data
        return extensions

    def to_dict(self) -> dict[str, Any]:
        """REST error body: ``{statusCode, message}`` plus ``data`` when present."""
        body: dict[str, Any] = {"statusCode": self.status_code, "message": self.message}
        if self.data is not None:
            body["data"] = self.data
        return body


class ValidationFailed(FeedError):
    """One or more input fields violated their constraints."""

    status_code = 422
    code = "ValidationFailed"
    default_message = "Validation failed."

    @property
    def first_message(self) -> str:
        """Message of the first violation, shown on its own by the REST transport."""
        if self.data:
            return self.data[0]["message"]
        return self.message


class Unauthenticated(FeedError):
    status_code = 401
    code = "Unauthenticated"
    default_message = "Not authenticated."


class Forbidden(FeedError):
    status_code = 403
    code = "Forbidden"
    default_message = "Not authorized."


class NotFound(FeedError):
    status_code = 404
    code = "NotFound"
    default_message = "Not found."


class Conflict(FeedError):
    status_code = 409
    code = "Conflict"
    default_message = "Resource already exists."


class Internal(FeedError):
    pass


class InvalidToken(Exception):
    """A bearer token was malformed, badly signed, or expired."""
