"""Error taxonomy and its HTTP rendering.

Every failure a caller can see is one of these. The HTTP layer renders them as
``{"detail": "<message>"}`` — a message naming the general category, no codes.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class IndieReelsError(Exception):
    """Base class for all errors surfaced to callers."""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotAuthenticatedError(IndieReelsError):
    """Operation attempted without a resolvable user."""

    status_code = 401
    default_message = "User not authenticated"


class ValidationError(IndieReelsError):
    """Caller-side precondition violated. Raised before any store call."""

    status_code = 400
    default_message = "Invalid request"


class PermissionDeniedError(IndieReelsError):
    status_code = 403
    default_message = "You are not allowed to do that"


class NotFoundError(IndieReelsError):
    status_code = 404
    default_message = "Not found"


class StoreError(IndieReelsError):
    """The database or hosted backend rejected or could not serve a request."""

    status_code = 502
    default_message = "The backend could not complete the request"


async def _handle_indiereels_error(request: Request, exc: IndieReelsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the error renderer on *app*."""
    app.add_exception_handler(IndieReelsError, _handle_indiereels_error)
