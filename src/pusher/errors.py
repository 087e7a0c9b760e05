"""
Error Hierarchy

Domain exceptions and the FastAPI handlers that render them.

Every response uses the envelope {code, message, data?}; code is one of
ErrorCodes. Delivery-level errors never reach the handlers: the push engine
turns them into failed delivery results.
"""
import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("pusher.errors")


class ErrorCodes:
    """Numeric error codes returned in the response envelope"""
    MISSING_TITLE = 40001
    INVALID_PARAM = 40002
    INVALID_CHANNEL_CONFIG = 40003
    INVALID_SENDKEY = 40101
    FORBIDDEN = 40301
    MESSAGE_NOT_FOUND = 40401
    CHANNEL_NOT_FOUND = 40402
    ACCOUNT_NOT_FOUND = 40403
    RATE_LIMIT_EXCEEDED = 42901
    INTERNAL_ERROR = 50001


class PusherError(Exception):
    """Base exception for all application errors."""

    status_code = 500
    error_code = ErrorCodes.INTERNAL_ERROR

    def __init__(
        self,
        message: str = "Internal server error",
        *,
        error_code: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        self.data = data
        self.headers = headers or {}


class AuthError(PusherError):
    """Missing, malformed or unknown SendKey (401)."""

    status_code = 401
    error_code = ErrorCodes.INVALID_SENDKEY

    def __init__(self, message: str = "Invalid SendKey"):
        super().__init__(message)


class ForbiddenError(PusherError):
    """Operation not permitted for this caller (403)."""

    status_code = 403
    error_code = ErrorCodes.FORBIDDEN


class RateLimitError(PusherError):
    """Per-account quota exceeded (429)."""

    status_code = 429
    error_code = ErrorCodes.RATE_LIMIT_EXCEEDED

    def __init__(self, limit: int, reset_at: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            "Rate limit exceeded. Please try again later.",
            data={"limit": limit, "remaining": 0, "resetAt": reset_at},
            headers=headers,
        )
        self.limit = limit
        self.reset_at = reset_at


class ValidationError(PusherError):
    """Missing or malformed input (400)."""

    status_code = 400
    error_code = ErrorCodes.INVALID_PARAM


class NotFoundError(PusherError):
    """Resource absent or not owned by the caller (404)."""

    status_code = 404
    error_code = ErrorCodes.MESSAGE_NOT_FOUND


class UnsupportedChannelError(PusherError):
    """No adapter registered for a channel type."""

    status_code = 400
    error_code = ErrorCodes.INVALID_CHANNEL_CONFIG

    def __init__(self, channel_type: str):
        super().__init__(f"Unsupported channel type: {channel_type}")
        self.channel_type = channel_type


class ChannelDeliveryError(PusherError):
    """A provider rejected or failed a delivery attempt."""

    status_code = 502

    def __init__(self, channel_type: str, message: str, provider_code: Optional[int] = None):
        super().__init__(message)
        self.channel_type = channel_type
        self.provider_code = provider_code


def error_response(
    status_code: int,
    code: int,
    message: str,
    data: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build a response in the standard envelope."""
    body: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        body["data"] = data
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(PusherError)
    async def handle_pusher_error(request: Request, exc: PusherError):
        if exc.status_code >= 500:
            logger.error("API error [%s] on %s: %s", exc.error_code, request.url.path, exc.message)
        else:
            logger.info("Request rejected [%s] on %s: %s", exc.error_code, request.url.path, exc.message)
        headers = {**getattr(request.state, "rate_limit_headers", {}), **exc.headers}
        return error_response(exc.status_code, exc.error_code, exc.message, exc.data, headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid parameter {location}: {first.get('msg', 'invalid')}" if location else "Invalid request"
        logger.info("Request validation failed on %s: %s", request.url.path, message)
        return error_response(
            400, ErrorCodes.INVALID_PARAM, message,
            headers=getattr(request.state, "rate_limit_headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.critical(
            "Unhandled exception on %s: %s\n%s",
            request.url.path, exc, traceback.format_exc(),
        )
        return error_response(500, ErrorCodes.INTERNAL_ERROR, "Internal server error")
