"""Map domain errors onto REST responses of the form ``{statusCode, message, data?}``."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.errors import FeedError, Internal, Unauthenticated, ValidationFailed
from src.services.validation import violations_from

logger = logging.getLogger(__name__)


def feed_error_response(exc: FeedError) -> JSONResponse:
    body = exc.to_dict()
    if isinstance(exc, ValidationFailed):
        # REST clients get the first violation as the message; the full list stays in data
        body["message"] = exc.first_message
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


async def handle_feed_error(request: Request, exc: FeedError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return feed_error_response(exc)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return feed_error_response(ValidationFailed(data=violations_from(exc.errors())))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return feed_error_response(Internal())


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers on ``app``."""
    app.add_exception_handler(FeedError, handle_feed_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
