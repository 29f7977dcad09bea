"""
Global Exception Handling

Defines the error kinds raised by the pipeline stages and the FastAPI
handlers that turn them into short plain-text responses.

Every error is terminal for the current invocation. The `message` carries
the internal detail and is only logged; callers receive `public_message`.
"""

import traceback
from typing import Optional, Dict, Any

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from cutout.core.logging import get_logger, request_id_var

logger = get_logger(__name__)


# =============================================================================
# Custom Exceptions
# =============================================================================

class CutoutBaseException(Exception):
    """Base exception for the Cutout pipeline."""

    default_public_message = "Internal Server Error"

    def __init__(
        self,
        message: str,
        code: int = 500,
        request_id: Optional[str] = None,
        stage: Optional[str] = None,
        public_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.request_id = request_id or request_id_var.get()
        self.stage = stage
        self.public_message = public_message or self.default_public_message
        self.details = details or {}
        super().__init__(self.message)


class DecodeError(CutoutBaseException):
    """Raised when a base64-encoded inbound body cannot be decoded."""

    default_public_message = "Bad Request: invalid base64"

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code=400, **kwargs)


class ParseError(CutoutBaseException):
    """
    Raised when a JSON document cannot be parsed.

    Inbound bodies fail with 400; downstream responses fail with 500.
    """

    def __init__(self, message: str, code: int = 400, **kwargs):
        if "public_message" not in kwargs or kwargs["public_message"] is None:
            kwargs["public_message"] = "Bad Request" if code == 400 else "Internal Server Error"
        super().__init__(message, code=code, **kwargs)


class ConfigError(CutoutBaseException):
    """Raised when required configuration is missing."""

    default_public_message = "Server configuration error"

    def __init__(self, message: str, setting: Optional[str] = None, **kwargs):
        super().__init__(message, code=500, **kwargs)
        if setting:
            self.details["setting"] = setting


class NetworkError(CutoutBaseException):
    """Raised when a downstream API cannot be reached or read."""

    def __init__(
        self,
        message: str,
        service: str,
        http_status: Optional[int] = None,
        **kwargs
    ):
        super().__init__(message, code=500, **kwargs)
        self.details["service"] = service
        self.details["http_status"] = http_status


class StorageError(CutoutBaseException):
    """Raised when an object storage upload fails."""

    default_public_message = "Error uploading image to S3"

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code=500, **kwargs)


# =============================================================================
# FastAPI Exception Handlers
# =============================================================================

def register_exception_handlers(app: FastAPI):
    """Register custom exception handlers with FastAPI app."""

    @app.exception_handler(CutoutBaseException)
    async def cutout_exception_handler(request: Request, exc: CutoutBaseException):
        logger.error(
            "cutout_exception",
            error=exc.message,
            code=exc.code,
            stage=exc.stage,
            details=exc.details
        )

        return PlainTextResponse(exc.public_message, status_code=exc.code)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
            traceback=traceback.format_exc()
        )

        return PlainTextResponse("Internal Server Error", status_code=500)
