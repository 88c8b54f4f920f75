"""
Centralized error handling for the Reformat API.

This module provides the exception types raised by file intake and dispatch,
their error codes, and the standardized JSON error responses built from them.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional, Union
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for consistent error handling."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    NOT_FOUND = "NOT_FOUND"

    # Intake errors
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    NO_FILE_SELECTED = "NO_FILE_SELECTED"

    # Conversion errors
    FORMAT_NOT_ALLOWED = "FORMAT_NOT_ALLOWED"
    CONVERSION_FAILED = "CONVERSION_FAILED"


class ErrorSeverity(str, Enum):
    """Error severity levels for logging and response handling."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Error code to HTTP status code mapping
ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    # 4xx Client Errors
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.NO_FILE_SELECTED: 400,
    ErrorCode.FORMAT_NOT_ALLOWED: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.FILE_TOO_LARGE: 413,
    ErrorCode.UNSUPPORTED_TYPE: 415,

    # 5xx Server Errors
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.CONVERSION_FAILED: 502,
}

# Error code to severity mapping
ERROR_SEVERITY_MAP: Dict[ErrorCode, ErrorSeverity] = {
    ErrorCode.INTERNAL_ERROR: ErrorSeverity.CRITICAL,
    ErrorCode.CONVERSION_FAILED: ErrorSeverity.HIGH,
    ErrorCode.INVALID_REQUEST: ErrorSeverity.MEDIUM,
    ErrorCode.FORMAT_NOT_ALLOWED: ErrorSeverity.LOW,
    ErrorCode.NO_FILE_SELECTED: ErrorSeverity.LOW,
    ErrorCode.FILE_TOO_LARGE: ErrorSeverity.LOW,
    ErrorCode.UNSUPPORTED_TYPE: ErrorSeverity.LOW,
    ErrorCode.NOT_FOUND: ErrorSeverity.LOW,
}


class ReformatError(Exception):
    """Base class for errors that end the current conversion step."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_MAP.get(self.error_code, 500)


class FileTooLargeError(ReformatError):
    """Raised when an upload exceeds the configured size ceiling."""
    error_code = ErrorCode.FILE_TOO_LARGE


class UnsupportedTypeError(ReformatError):
    """Raised when an upload cannot be resolved to a known type."""
    error_code = ErrorCode.UNSUPPORTED_TYPE


class FormatNotAllowedError(ReformatError):
    """Raised when the requested output format is not legal for the input type."""
    error_code = ErrorCode.FORMAT_NOT_ALLOWED


class ConversionFailedError(ReformatError):
    """Raised when the remote conversion did not produce a usable result."""
    error_code = ErrorCode.CONVERSION_FAILED

    def __init__(self, message: str, upstream_status: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.upstream_status = upstream_status


class NoFileSelectedError(ReformatError):
    """Raised when a conversion is requested before a file was accepted."""
    error_code = ErrorCode.NO_FILE_SELECTED


class NotFoundError(ReformatError):
    """Raised when a conversion attempt or download does not exist."""
    error_code = ErrorCode.NOT_FOUND


def create_error_response(
    error_code: Union[ErrorCode, str],
    details: Optional[str] = None,
    status_code: Optional[int] = None,
    **kwargs
) -> JSONResponse:
    """
    Create a consistent JSON error response across all endpoints.

    Args:
        error_code: Error code from ErrorCode enum or custom string
        details: Additional error details (will be truncated to 1000 chars)
        status_code: Override the default HTTP status code
        **kwargs: Additional fields to include in the error response

    Returns:
        JSONResponse with standardized error format
    """
    if isinstance(error_code, ErrorCode):
        error_type = error_code.value
        if status_code is None:
            status_code = ERROR_STATUS_MAP.get(error_code, 500)
        severity = ERROR_SEVERITY_MAP.get(error_code, ErrorSeverity.MEDIUM)
    else:
        error_type = str(error_code)
        if status_code is None:
            status_code = 500
        severity = ErrorSeverity.MEDIUM

    error_data = {
        "error": error_type,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "status_code": status_code,
        "severity": severity.value
    }

    if details:
        error_data["details"] = str(details)[:1000]

    error_data.update(kwargs)

    log_message = f"Error response: {error_data}"
    if severity == ErrorSeverity.CRITICAL:
        logger.critical(log_message)
    elif severity == ErrorSeverity.HIGH:
        logger.error(log_message)
    elif severity == ErrorSeverity.MEDIUM:
        logger.warning(log_message)
    else:
        logger.info(log_message)

    return JSONResponse(status_code=status_code, content=error_data)


def create_http_exception(
    error_code: Union[ErrorCode, str],
    details: Optional[str] = None,
    **kwargs
) -> HTTPException:
    """
    Create a FastAPI HTTPException with consistent error details.

    Args:
        error_code: Error code from ErrorCode enum or custom string
        details: Error details to include
        **kwargs: Additional data for the exception

    Returns:
        HTTPException with standardized error format
    """
    if isinstance(error_code, ErrorCode):
        status_code = ERROR_STATUS_MAP.get(error_code, 500)
    else:
        status_code = 500

    error_details = {
        "error": error_code.value if isinstance(error_code, ErrorCode) else str(error_code),
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    }

    if details:
        error_details["details"] = str(details)[:500]

    error_details.update(kwargs)

    return HTTPException(
        status_code=status_code,
        detail=error_details
    )


async def reformat_error_handler(request: Request, exc: ReformatError) -> JSONResponse:
    """FastAPI exception handler turning a ReformatError into a JSON error body."""
    return create_error_response(
        exc.error_code,
        details=exc.message,
        path=request.url.path,
        **exc.details
    )
