"""
Two-tier execution: try the remote tier, fall back to the local tier.

Both tiers are coroutine factories awaited under their own timeout. Neither
tier's ordinary failure propagates to the caller.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Tuple, TypeVar

from ..core.error import log_error
from ..core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

TIER_REMOTE = "remote"
TIER_LOCAL = "local"
TIER_NONE = "none"


@dataclass
class FallbackOutcome(Generic[T]):
    value: T
    tier: str
    errors: Dict[str, str] = field(default_factory=dict)


async def attempt(
    call: Callable[[], Awaitable[T]],
    *,
    timeout: Optional[float],
    label: str,
) -> Tuple[Optional[T], Optional[Exception]]:
    """
    Await call() under timeout.

    Returns:
        (value, None) on success, (None, error) on failure or timeout
    """
    try:
        value = await asyncio.wait_for(call(), timeout=timeout)
        return value, None
    except asyncio.TimeoutError as e:
        logger.warning(f"{label} timed out after {timeout}s")
        return None, e
    except Exception as e:
        log_error(e, logger, context={"tier": label}, level="WARNING")
        return None, e


async def run_with_fallback(
    remote: Optional[Callable[[], Awaitable[T]]],
    local: Callable[[], Awaitable[T]],
    *,
    remote_timeout: Optional[float],
    local_timeout: Optional[float],
    label: str,
    default_factory: Callable[[], T] = list,
) -> FallbackOutcome[T]:
    """
    attempt(remote) orElse attempt(local).

    A remote reply that arrives without error is returned as-is. When no
    remote tier is configured the local tier runs directly. If both fail,
    default_factory() is returned with tier "none".
    """
    errors: Dict[str, str] = {}

    if remote is not None:
        value, error = await attempt(remote, timeout=remote_timeout, label=f"{label}:remote")
        if error is None:
            return FallbackOutcome(value=value, tier=TIER_REMOTE, errors=errors)
        errors[TIER_REMOTE] = _describe(error, remote_timeout)
        logger.info(f"{label}: remote tier unavailable, using local tier")

    value, error = await attempt(local, timeout=local_timeout, label=f"{label}:local")
    if error is None:
        return FallbackOutcome(value=value, tier=TIER_LOCAL, errors=errors)
    errors[TIER_LOCAL] = _describe(error, local_timeout)

    logger.error(f"{label}: all tiers failed ({errors})")
    return FallbackOutcome(value=default_factory(), tier=TIER_NONE, errors=errors)


def _describe(error: Exception, timeout: Optional[float]) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return f"timed out after {timeout}s"
    return str(error) or type(error).__name__
