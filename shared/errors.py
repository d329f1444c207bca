"""
Shared error handling for the Access Layer policy reader.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class AccessLayerException(Exception):
    """Base exception for Access Layer components."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class DSLError(AccessLayerException):
    """Signals errors that occur while reading an authorization DSL."""

    def __init__(self, message: str = "Invalid authorization DSL", details: Optional[Dict[str, Any]] = None,
                 code: str = "DSL_ERROR"):
        super().__init__(code, message, details)


class DSLSyntaxError(DSLError):
    """Signals errors in the syntax of an authorization DSL."""

    def __init__(self, message: str = "Illegal DSL syntax", source: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if source is not None:
            details["source"] = source
            message = f"{source}: {message}"
        self.source = source
        super().__init__(message, details, code="DSL_SYNTAX_ERROR")
