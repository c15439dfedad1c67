"""
Error management module.
"""
import asyncio
import logging
import traceback
from enum import Enum
from typing import Any, Dict, Optional


class ErrorType(Enum):
    """Error classification types."""
    INVALID_REFERENCE = "invalid_reference"
    NO_RESULTS = "no_results"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    GATEWAY_ERROR = "gateway_error"
    ALLOCATION_CONFLICT = "allocation_conflict"
    UNKNOWN = "unknown"


class RefSearchError(Exception):
    """Base exception for search service errors."""

    def __init__(self, message: str, error_type: ErrorType = ErrorType.UNKNOWN, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "error_type": self.error_type.value,
            "message": str(self),
            "details": self.details,
        }


class RemoteUnavailableError(RefSearchError):
    """The remote search backend failed, timed out or replied with an unusable payload."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorType.NETWORK_ERROR, details)


class AllocationConflictError(RefSearchError):
    """A Reference ID could not be allocated without colliding or overflowing its partition."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorType.ALLOCATION_CONFLICT, details)


def classify_error(error: Exception) -> ErrorType:
    """
    Classify error type from exception.

    Args:
        error: Exception instance

    Returns:
        ErrorType enum value
    """
    if isinstance(error, RefSearchError):
        return error.error_type

    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return ErrorType.TIMEOUT

    error_str = str(error).lower()
    error_type = type(error).__name__.lower()

    if "timeout" in error_str or "timeout" in error_type:
        return ErrorType.TIMEOUT

    if any(keyword in error_str or keyword in error_type for keyword in ["network", "connection", "http", "request"]):
        return ErrorType.NETWORK_ERROR

    if any(keyword in error_str for keyword in ["gateway", "collection", "store"]):
        return ErrorType.GATEWAY_ERROR

    return ErrorType.UNKNOWN


def log_error(
    error: Exception,
    logger: Optional[logging.Logger] = None,
    context: Optional[Dict[str, Any]] = None,
    level: str = "ERROR",
) -> Dict[str, Any]:
    """
    Log error with context and return error info.

    Args:
        error: Exception instance
        logger: Logger instance (if None, uses the package logger)
        context: Additional context information
        level: Logging level

    Returns:
        Dictionary with error information
    """
    if logger is None:
        logger = logging.getLogger("refsearch_server")

    error_type = classify_error(error)
    error_info = {
        "error_type": error_type.value,
        "error_class": type(error).__name__,
        "message": str(error),
        "context": context or {},
    }

    log_method = getattr(logger, level.lower(), logger.error)
    log_method(
        f"[{error_type.value}] {type(error).__name__}: {error}",
        extra={"error_info": error_info, "context": context},
    )

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Traceback:\n{traceback.format_exc()}")

    return error_info


def handle_error(
    error: Exception,
    logger: Optional[logging.Logger] = None,
    context: Optional[Dict[str, Any]] = None,
    raise_again: bool = False,
) -> Dict[str, Any]:
    """
    Handle error: classify, log, and optionally re-raise.

    Args:
        error: Exception instance
        logger: Logger instance
        context: Additional context
        raise_again: Whether to re-raise the exception

    Returns:
        Error information dictionary

    Raises:
        The original exception if raise_again is True
    """
    error_info = log_error(error, logger, context)

    if raise_again:
        raise error

    return error_info
