"""Error handling module for the Contract Storage API."""

from .api_errors import (
    ErrorResponse,
    ApiError,
    InvalidParameterError,
    InvalidCursorError,
    CursorParameterMismatchError,
    InternalError,
    StorageError,
    UpstreamError,
    ServiceUnavailableError,
    create_error_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ErrorResponse",
    "ApiError",
    "InvalidParameterError",
    "InvalidCursorError",
    "CursorParameterMismatchError",
    "InternalError",
    "StorageError",
    "UpstreamError",
    "ServiceUnavailableError",
    "create_error_response",
    "register_exception_handlers"
]
