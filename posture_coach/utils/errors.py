"""
Error taxonomy for the Posture Coach backend.

Every failure the service layer reports is a ServiceError tagged with an
ErrorCode. Routes never inspect exception types: the exception handler in
main.py looks the code up in HTTP_STATUS_BY_CODE, so adding a code without
a status mapping is caught by the test suite.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to clients in the `code` field."""

    # Caller input
    VALIDATION_ERROR = "VALIDATION_ERROR"
    EXERCISES_NOT_FOUND = "EXERCISES_NOT_FOUND"
    NOT_FOUND = "NOT_FOUND"

    # Data / internal
    CATALOG_UNAVAILABLE = "DATA_NOT_LOADED"
    NO_RESULTS_RESOLVED = "NO_RESULTS_RESOLVED"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Upstream LLM
    LLM_TIMEOUT = "LLM_TIMEOUT"
    LLM_RATE_LIMIT = "LLM_RATE_LIMIT"
    LLM_INVALID_RESPONSE = "LLM_INVALID_RESPONSE"
    LLM_HTTP_ERROR = "LLM_HTTP_ERROR"
    LLM_RETRY_EXHAUSTED = "LLM_RETRY_EXHAUSTED"

    @property
    def is_llm_failure(self) -> bool:
        """True for failures raised by the LLM gateway."""
        return self.value.startswith("LLM_")


HTTP_STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.EXERCISES_NOT_FOUND: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CATALOG_UNAVAILABLE: 500,
    ErrorCode.NO_RESULTS_RESOLVED: 500,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.LLM_TIMEOUT: 503,
    ErrorCode.LLM_RATE_LIMIT: 503,
    ErrorCode.LLM_INVALID_RESPONSE: 503,
    ErrorCode.LLM_HTTP_ERROR: 503,
    ErrorCode.LLM_RETRY_EXHAUSTED: 503,
}


class ServiceError(Exception):
    """
    A failure reported by the service layer.

    Attributes:
        code: ErrorCode discriminating the failure
        message: Human-readable message, safe to return to clients
        details: Optional JSON-serializable payload (raw LLM content,
                 unresolved names, upstream status...)
    """

    def __init__(self, code: ErrorCode, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CODE[self.code]

    def __repr__(self) -> str:
        return f"ServiceError(code={self.code.value!r}, message={self.message!r})"


class CatalogLoadError(Exception):
    """
    Raised when a catalog file cannot be loaded at startup.

    This is never mapped to an HTTP response: the process must not serve
    traffic without its catalogs.
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to load catalog from {path}: {reason}")
        self.path = path
        self.reason = reason
