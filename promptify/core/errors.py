"""Error taxonomy and the FastAPI handlers that render it.

Every error leaves the API in the same envelope::

    {"success": false, "message": "...", "error": {"code": "...", "message": "...", "details": ...}}

Operational errors (``AppError`` with ``is_operational=True``) are shown to
clients as-is. Anything else is logged with its traceback and, in
production, masked behind a generic 500.
"""

import logging
import traceback
from enum import Enum
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from promptify.core.config import settings

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    VALIDATION = "VALIDATION_ERROR"
    AUTHENTICATION = "AUTHENTICATION_ERROR"
    AUTHORIZATION = "AUTHORIZATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE_ERROR"
    RATE_LIMIT = "RATE_LIMIT_ERROR"
    PAYMENT = "PAYMENT_ERROR"
    EXTERNAL_API = "EXTERNAL_API_ERROR"
    DATABASE = "DATABASE_ERROR"
    SERVER = "SERVER_ERROR"


class AppError(Exception):
    """Expected, user-facing error."""

    status_code: int = 500
    code: ErrorCode = ErrorCode.SERVER

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: ErrorCode | None = None,
        details: Any = None,
        is_operational: bool = True,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details
        self.is_operational = is_operational


class ValidationError(AppError):
    status_code = 400
    code = ErrorCode.VALIDATION


class AuthenticationError(AppError):
    status_code = 401
    code = ErrorCode.AUTHENTICATION

    def __init__(self, message: str = "Authentication required", **kwargs: Any):
        super().__init__(message, **kwargs)


class AuthorizationError(AppError):
    status_code = 403
    code = ErrorCode.AUTHORIZATION

    def __init__(self, message: str = "Access denied", **kwargs: Any):
        super().__init__(message, **kwargs)


class NotFoundError(AppError):
    status_code = 404
    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str = "Resource", **kwargs: Any):
        super().__init__(f"{resource} not found", **kwargs)


class DuplicateError(AppError):
    status_code = 400
    code = ErrorCode.DUPLICATE


class RateLimitError(AppError):
    status_code = 429
    code = ErrorCode.RATE_LIMIT

    def __init__(self, message: str = "Too many requests, please try again later.", **kwargs: Any):
        super().__init__(message, **kwargs)


class PaymentError(AppError):
    status_code = 400
    code = ErrorCode.PAYMENT


class ExternalAPIError(AppError):
    status_code = 502
    code = ErrorCode.EXTERNAL_API

    def __init__(self, service: str, message: str, **kwargs: Any):
        super().__init__(f"{service} API error: {message}", **kwargs)
        self.service = service


class DatabaseError(AppError):
    status_code = 500
    code = ErrorCode.DATABASE

    def __init__(self, message: str = "Database operation failed", **kwargs: Any):
        super().__init__(message, **kwargs)


_STATUS_CODES = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTHENTICATION,
    403: ErrorCode.AUTHORIZATION,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.VALIDATION,
    409: ErrorCode.DUPLICATE,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    502: ErrorCode.EXTERNAL_API,
}


def code_for_status(status_code: int) -> ErrorCode:
    if status_code in _STATUS_CODES:
        return _STATUS_CODES[status_code]
    return ErrorCode.VALIDATION if status_code < 500 else ErrorCode.SERVER


def error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    details: Any = None,
    stack: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    error: dict[str, Any] = {"code": code.value, "message": message}
    if details is not None:
        error["details"] = details
    content: dict[str, Any] = {"success": False, "message": message, "error": error}
    if stack and not settings.is_production:
        content["stack"] = stack
    return JSONResponse(
        status_code=status_code, content=jsonable_encoder(content), headers=headers
    )


def _format_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(err.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": ".".join(loc), "message": message})
    return details


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.is_operational:
        if exc.status_code >= 500:
            logger.error(f"{exc.code.value} on {request.method} {request.url.path}: {exc.message}")
        return error_response(exc.status_code, exc.code, exc.message, exc.details)
    return await unhandled_error_handler(request, exc)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = _format_validation_errors(exc.errors())
    joined = ". ".join(
        f"{d['field']}: {d['message']}" if d["field"] else d["message"] for d in details
    )
    return error_response(400, ErrorCode.VALIDATION, f"Invalid input data. {joined}", details)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return error_response(
        400, ErrorCode.DUPLICATE, "Duplicate field value. Please use another value!"
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    message = "Something went wrong!" if settings.is_production else f"Database error: {exc}"
    return error_response(500, ErrorCode.DATABASE, message)


async def expired_token_handler(request: Request, exc: ExpiredSignatureError) -> JSONResponse:
    return error_response(
        401, ErrorCode.AUTHENTICATION, "Your token has expired! Please log in again."
    )


async def invalid_token_handler(request: Request, exc: InvalidTokenError) -> JSONResponse:
    return error_response(401, ErrorCode.AUTHENTICATION, "Invalid token. Please log in again!")


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "API endpoint not found"
    details = exc.detail if not isinstance(exc.detail, str) else None
    return error_response(
        exc.status_code,
        code_for_status(exc.status_code),
        message,
        details,
        headers=getattr(exc, "headers", None),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded for {request.client.host if request.client else '?'}")
    return error_response(
        429,
        ErrorCode.RATE_LIMIT,
        "Too many requests from this IP, please try again later.",
        {"limit": str(exc.detail)},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc
    )
    if settings.is_production:
        return error_response(500, ErrorCode.SERVER, "Something went wrong!")
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return error_response(500, ErrorCode.SERVER, str(exc) or exc.__class__.__name__, stack=stack)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(ExpiredSignatureError, expired_token_handler)
    app.add_exception_handler(InvalidTokenError, invalid_token_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
