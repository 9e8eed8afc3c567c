"""Error taxonomy and the global exception handlers.

Every failure leaves the API as ``{"error": "<message>"}`` with the status
code of the matching ``ApiError`` subclass. Anything unexpected is logged with
its traceback and reported as a bare 500.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InternalError(ApiError):
    pass


class ServiceUnavailable(ApiError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "db not ready"


INVALID_BODY = "Invalid request body."


def error_body(message: str) -> dict:
    return {"error": message}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("Invalid request body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(INVALID_BODY),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(InternalError.default_message),
        )
