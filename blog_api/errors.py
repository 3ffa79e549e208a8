"""
Error taxonomy and the FastAPI handlers that render it.

Every failure reaches the client as ``{"error": "<message>"}`` with one
generic message per failure; field names and underlying causes are only
ever logged, never returned.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class InvalidToken(Exception):
    """Raised by the token decoder; mapped to ``Unauthenticated`` by the auth gate."""


class APIError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationFailed(APIError):
    status_code = 400
    message = "Validation failed"


class Unauthenticated(APIError):
    status_code = 401
    message = "Please authenticate"


class InvalidCredentials(APIError):
    status_code = 401
    message = "Invalid credentials"


class NotFound(APIError):
    status_code = 404
    message = "Not found"


class InternalFailure(APIError):
    status_code = 500
    message = "Internal server error"


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Flatten FastAPI's 422 detail into a generic error.

    A path parameter that fails to parse can never name an existing
    record, so it is reported as 404; body and query problems are 400.
    """
    logger.debug("Request validation failed on %s %s: %s", request.method, request.url.path, exc.errors())
    if any(err.get("loc", ())[:1] == ("path",) for err in exc.errors()):
        return _error_response(NotFound.status_code, NotFound.message)
    return _error_response(ValidationFailed.status_code, ValidationFailed.message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(InternalFailure.status_code, InternalFailure.message)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
