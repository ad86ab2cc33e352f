from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from edufund.schemas.common import ErrorResponse


logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error rendered as `{success: false, message[, error]}`."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, error: str | None = None) -> None:
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        body = ErrorResponse(message=self.message, error=self.error)
        return JSONResponse(status_code=self.status_code, content=body.model_dump(exclude_none=True))


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class InvalidInput(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


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
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def describe_validation_errors(errors) -> str:
    parts: list[str] = []
    for err in errors or []:
        # Drop the "body" prefix and positional indexes (e.g. JSON decode offsets).
        loc = ".".join(p for p in err.get("loc", ()) if isinstance(p, str) and p != "body")
        msg = err.get("msg") or "invalid value"
        parts.append(f"{loc}: {msg}" if loc else str(msg))
    return "; ".join(parts) or "Invalid request body"


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return exc.to_response()


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("request.failed path=%s", request.url.path, exc_info=exc)
    return InternalError("Internal server error", error=str(exc)).to_response()


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = describe_validation_errors(exc.errors())
    logger.info("request.invalid path=%s detail=%s", request.url.path, message)
    return InvalidInput(message).to_response()


def register_error_handlers(application: FastAPI) -> None:
    application.add_exception_handler(ApiError, _api_error_handler)
    application.add_exception_handler(RequestValidationError, _validation_error_handler)
    application.add_exception_handler(Exception, _unhandled_error_handler)
