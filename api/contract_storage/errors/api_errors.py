"""Error taxonomy for the Contract Storage API.

Every error that reaches a client is rendered as ``{"error": "<message>"}``
with the status code carried by the exception.
"""

from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""
    
    error: str = Field(description="A human-readable explanation of the failure")


class ApiError(Exception):
    """Base exception for errors surfaced to API clients."""
    
    status: int = 500
    
    def __init__(self, detail: str, status: Optional[int] = None):
        if status is not None:
            self.status = status
        self.detail = detail
        super().__init__(detail)
    
    def to_response(self) -> JSONResponse:
        """Convert to a JSONResponse with the error body."""
        return create_error_response(self.status, self.detail)


class InvalidParameterError(ApiError):
    """400 for a malformed or out-of-range request parameter."""
    
    status = 400


class InvalidCursorError(ApiError):
    """400 for a cursor that cannot be decoded or fails validation."""
    
    status = 400


class CursorParameterMismatchError(ApiError):
    """400 when a cursor was issued under different request parameters."""
    
    status = 400
    
    def __init__(self, field: str, query_value: Any, cursor_value: Any):
        self.field = field
        self.query_value = query_value
        self.cursor_value = cursor_value
        super().__init__(
            f'Cursor parameter mismatch for field "{field}": '
            f'query value="{query_value}" but cursor value="{cursor_value}". '
            "Pagination parameters must be consistent across requests."
        )


class InternalError(ApiError):
    """500 for a violated internal invariant."""
    
    status = 500
    
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(detail)


class StorageError(ApiError):
    """500 for a failed query against the storage backend.
    
    The detail is deliberately generic; the cause is chained and logged.
    """
    
    status = 500
    
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(detail)


class UpstreamError(ApiError):
    """502 for a failed call to an upstream network service."""
    
    status = 502
    
    def __init__(self, detail: str = "Upstream service unavailable"):
        super().__init__(detail)


class ServiceUnavailableError(ApiError):
    """503 Service Unavailable error."""
    
    status = 503
    
    def __init__(self, detail: str = "Service temporarily unavailable"):
        super().__init__(detail)


def create_error_response(status: int, detail: str) -> JSONResponse:
    """Create an error response."""
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(error=detail).model_dump()
    )
