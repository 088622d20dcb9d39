"""
Error taxonomy and FastAPI exception handlers.

Every failure a handler can produce is one of the classes below. Each class
carries the HTTP status and a stable machine-readable `error` code, so the
mobile client can tell retryable failures (502/504) from terminal ones.

Response body for all of them:
    {"error": "<code>", "detail": "<human readable message>"}
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger("companion.errors")


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "internal_error"
    message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        error: Optional[str] = None,
        detail: Any = None,
    ):
        self.message = message or self.message
        if error:
            self.error = error
        self.detail = detail
        super().__init__(self.message)

    def to_body(self) -> dict:
        return {"error": self.error, "detail": self.detail if self.detail is not None else self.message}


class ClientError(AppError):
    """Malformed or missing input."""
    status_code = status.HTTP_400_BAD_REQUEST
    error = "bad_request"
    message = "Bad request"


class AuthError(AppError):
    """Missing, invalid or expired credential."""
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "unauthorized"
    message = "Not authenticated"


class MissingCredential(AuthError):
    error = "no_user"
    message = "No user"


class InvalidCredential(AuthError):
    error = "invalid_session"
    message = "Could not validate session"


class SessionExpired(AuthError):
    error = "session_expired"
    message = "Session expired"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "forbidden"
    message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"
    message = "Not found"


class UpstreamError(AppError):
    """A third-party provider failed or rejected the call."""
    status_code = status.HTTP_502_BAD_GATEWAY
    error = "upstream_error"
    message = "Upstream provider error"


class UpstreamTimeout(AppError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error = "upstream_timeout"
    message = "Upstream provider timed out"


class InternalError(AppError):
    pass


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register handlers that turn exceptions into JSON error bodies.

    - AppError subclasses → their own status and code
    - RequestValidationError → 400 invalid_request
    - anything else → 500 internal_error, traceback logged, nothing leaked
    """

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            f"{request.method} {request.url.path} -> {exc.status_code} {exc.error}: {exc.message}"
        )
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(exc.to_body()),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(f"{request.method} {request.url.path} -> 400 invalid_request")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder({"error": "invalid_request", "detail": exc.errors()}),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            f"Unhandled exception on {request.method} {request.url.path}: "
            f"{type(exc).__name__}: {exc}"
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": InternalError.error, "detail": InternalError.message},
        )
