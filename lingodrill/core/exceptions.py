import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LingodrillError(Exception):
    """Base error for domain failures that map to a 4xx response."""

    status_code = 400
    default_message = "Bad request"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(LingodrillError):
    status_code = 404
    default_message = "Resource not found"


class ForbiddenError(LingodrillError):
    status_code = 403
    default_message = "Forbidden"


class ConflictError(LingodrillError):
    status_code = 409
    default_message = "Conflict"


class BadRequestError(LingodrillError):
    status_code = 400


async def lingodrill_error_handler(request: Request, exc: LingodrillError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LingodrillError, lingodrill_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
