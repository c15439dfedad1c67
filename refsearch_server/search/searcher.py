"""
Search execution module: parallel collection queries.
"""
import asyncio
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..core.config import DEFAULT_GATEWAY_TIMEOUT
from ..core.error import log_error
from ..core.logger import get_logger
from ..models.schema import EntityKind, EntityRecord
from ..retrievers.base import CollectionGateway
from .router import plan_fanout

logger = get_logger(__name__)


def error_message(error: BaseException) -> str:
    return str(error) or type(error).__name__


async def call_gateway(
    func: Callable[..., Any],
    *args: Any,
    timeout: Optional[float] = DEFAULT_GATEWAY_TIMEOUT,
) -> Any:
    """
    Run a blocking gateway call in the default executor under a timeout.

    Raises:
        asyncio.TimeoutError: the call did not finish within timeout seconds
    """
    loop = asyncio.get_event_loop()
    return await asyncio.wait_for(loop.run_in_executor(None, func, *args), timeout=timeout)


async def _scan_single_collection(
    kind: EntityKind,
    gateway: CollectionGateway,
    scan_limit: Optional[int],
    timeout: Optional[float],
) -> Tuple[EntityKind, List[EntityRecord], Optional[Exception]]:
    """
    Scan one collection asynchronously.

    Returns:
        Tuple of (kind, records, error)
    """
    try:
        records = await call_gateway(gateway.scan_all, scan_limit, timeout=timeout)
        return kind, list(records or []), None
    except Exception as e:
        log_error(e, logger, context={"collection": kind.collection}, level="WARNING")
        return kind, [], e


async def scan_collections_parallel_with_errors(
    *,
    gateways: Mapping[EntityKind, CollectionGateway],
    scan_limit: Optional[int] = None,
    timeout: Optional[float] = DEFAULT_GATEWAY_TIMEOUT,
) -> Tuple[Dict[EntityKind, List[EntityRecord]], Dict[str, str]]:
    """
    Scan every wired collection in parallel and return both records and errors.

    A failing or slow collection contributes no records; the others are
    unaffected.

    Returns:
        (records, errors)
        - records maps kind -> records (possibly empty), in collection enumeration order
        - errors maps collection name -> error message (only for failed collections)
    """
    plan = plan_fanout(gateways)
    if not plan:
        return {}, {}

    tasks = [
        _scan_single_collection(kind, gateway, scan_limit, timeout)
        for kind, gateway in plan
    ]
    # gather keeps task order, so the merge below follows enumeration order
    # rather than completion order.
    gathered = await asyncio.gather(*tasks, return_exceptions=True)

    records: Dict[EntityKind, List[EntityRecord]] = {}
    errors: Dict[str, str] = {}
    for (kind, _gateway), item in zip(plan, gathered):
        if isinstance(item, BaseException):
            logger.error(f"Task for {kind.collection} failed with exception: {item}")
            records[kind] = []
            errors[kind.collection] = error_message(item)
            continue

        _kind, collection_records, error = item
        records[kind] = collection_records
        if error:
            errors[kind.collection] = error_message(error)

    return records, errors
