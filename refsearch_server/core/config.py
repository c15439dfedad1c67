import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

DEFAULT_MAX_RESULTS = 50
MAX_RESULTS_CAP = 200
SUGGESTION_LIMIT = 8
DEFAULT_RELATED_LIMIT = 10
RELATED_MATCH_SCORE = 5.0
# Score assigned to a direct Reference ID hit; no scored match can exceed it per signal.
REFERENCE_LOOKUP_SCORE = 10.0
# None means a full collection scan during local fan-out.
DEFAULT_SCAN_LIMIT: Optional[int] = None
RECENT_SEARCHES_CAPACITY = 10

DEFAULT_REMOTE_TIMEOUT = 5.0
DEFAULT_GATEWAY_TIMEOUT = 10.0
DEFAULT_PORT = 50001


def get_remote_config() -> Dict[str, Any]:
    """
    Remote search backend config is read from environment variables.
    - REFSEARCH_REMOTE_BASE_URL: base URL of the remote search backend; unset disables the remote tier
    - REFSEARCH_REMOTE_TIMEOUT: seconds per remote request (default 5)
    """
    remote_timeout, _gateway_timeout = get_search_timeouts()
    return {
        "base_url": (os.getenv("REFSEARCH_REMOTE_BASE_URL") or "").strip().rstrip("/") or None,
        "timeout": remote_timeout,
    }


def get_search_timeouts() -> Tuple[float, float]:
    """
    Get the remote call timeout and the per-collection timeout for local fan-out.
    - REFSEARCH_REMOTE_TIMEOUT: seconds per remote backend call (default 5)
    - REFSEARCH_GATEWAY_TIMEOUT: seconds per collection query (default 10)
    """
    remote_timeout = _float_env("REFSEARCH_REMOTE_TIMEOUT", DEFAULT_REMOTE_TIMEOUT)
    gateway_timeout = _float_env("REFSEARCH_GATEWAY_TIMEOUT", DEFAULT_GATEWAY_TIMEOUT)
    return max(0.5, remote_timeout), max(0.5, gateway_timeout)


def get_data_dir() -> Path:
    """
    Get the directory holding the `<collection>.json` record files.
    - REFSEARCH_DATA_DIR: base directory for entity records
    Defaults to ./data under the current working directory.
    """
    data_dir = os.getenv("REFSEARCH_DATA_DIR")
    if data_dir:
        return Path(data_dir)
    return Path.cwd() / "data"


def get_log_config() -> Dict[str, Any]:
    """
    - REFSEARCH_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default INFO)
    - REFSEARCH_LOG_FILE: optional log file path
    """
    log_file = (os.getenv("REFSEARCH_LOG_FILE") or "").strip()
    return {
        "level": (os.getenv("REFSEARCH_LOG_LEVEL") or "INFO").strip().upper(),
        "log_file": Path(log_file) if log_file else None,
    }


def normalize_max_results(
    max_results: Any,
    default: int = DEFAULT_MAX_RESULTS,
    cap: int = MAX_RESULTS_CAP,
) -> int:
    """
    Normalize a requested result budget to a valid range.

    Args:
        max_results: Requested number of results
        default: Value used when max_results is missing or invalid
        cap: Maximum allowed value

    Returns:
        Normalized result budget
    """
    if isinstance(max_results, bool) or not isinstance(max_results, int) or max_results < 1:
        return default
    return min(max_results, cap)


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default
