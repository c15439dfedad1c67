"""Core module: configuration, logging, error handling."""
from .config import (
    DEFAULT_GATEWAY_TIMEOUT,
    DEFAULT_MAX_RESULTS,
    DEFAULT_RELATED_LIMIT,
    DEFAULT_REMOTE_TIMEOUT,
    MAX_RESULTS_CAP,
    SUGGESTION_LIMIT,
    get_data_dir,
    get_log_config,
    get_remote_config,
    get_search_timeouts,
    normalize_max_results,
)
from .error import (
    AllocationConflictError,
    ErrorType,
    RefSearchError,
    RemoteUnavailableError,
    classify_error,
    handle_error,
    log_error,
)
from .logger import get_logger, setup_logger

__all__ = [
    # Config
    "DEFAULT_GATEWAY_TIMEOUT",
    "DEFAULT_MAX_RESULTS",
    "DEFAULT_RELATED_LIMIT",
    "DEFAULT_REMOTE_TIMEOUT",
    "MAX_RESULTS_CAP",
    "SUGGESTION_LIMIT",
    "get_data_dir",
    "get_log_config",
    "get_remote_config",
    "get_search_timeouts",
    "normalize_max_results",
    # Error handling
    "ErrorType",
    "RefSearchError",
    "RemoteUnavailableError",
    "AllocationConflictError",
    "classify_error",
    "handle_error",
    "log_error",
    # Logging
    "setup_logger",
    "get_logger",
]
