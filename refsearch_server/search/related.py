"""
Related items: neighbours of a resolved entity by category, brand and district.
"""
import asyncio
from functools import partial
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from ..core.config import (
    DEFAULT_GATEWAY_TIMEOUT,
    DEFAULT_RELATED_LIMIT,
    DEFAULT_REMOTE_TIMEOUT,
    RELATED_MATCH_SCORE,
)
from ..core.logger import get_logger
from ..models.schema import EntityKind, SearchResult, result_from_record
from ..reference.codec import entity_type_of, is_valid
from ..retrievers.base import CollectionGateway
from .fallback import run_with_fallback
from .remote import RemoteSearchClient
from .router import index_gateways, select_gateway
from .searcher import call_gateway, error_message

logger = get_logger(__name__)


def related_filters(origin: Mapping[str, Any], kind: EntityKind) -> List[Tuple[str, Any]]:
    """
    Equality filters for the origin, in union order: category, brand, district.
    Brand is only used for kinds that carry one.
    """
    filters: List[Tuple[str, Any]] = []
    if origin.get("category"):
        filters.append(("category", origin["category"]))
    if kind.has_brand and origin.get("brand"):
        filters.append(("brand", origin["brand"]))
    if origin.get("district"):
        filters.append(("district", origin["district"]))
    return filters


class RelatedItemResolver:
    def __init__(
        self,
        gateways,
        remote: Optional[RemoteSearchClient] = None,
        *,
        remote_timeout: float = DEFAULT_REMOTE_TIMEOUT,
        gateway_timeout: float = DEFAULT_GATEWAY_TIMEOUT,
    ) -> None:
        self.gateways: Dict[EntityKind, CollectionGateway] = index_gateways(gateways)
        self.remote = remote
        self.remote_timeout = remote_timeout
        self.gateway_timeout = gateway_timeout

    @staticmethod
    def _origin_kind(origin: Mapping[str, Any]) -> Optional[EntityKind]:
        kind = EntityKind.parse(origin.get("kind"))
        if kind is None:
            kind = entity_type_of(origin.get("reference_id"))
        return kind

    async def related_to(self, origin: Mapping[str, Any], limit: int = DEFAULT_RELATED_LIMIT) -> List[SearchResult]:
        """
        Items related to origin (a search result), never including origin itself.

        Tries the remote related endpoint first, then the local filters.
        Never raises for collaborator failures.
        """
        reference_id = origin.get("reference_id")
        if not reference_id or limit < 1:
            return []

        remote_call = None
        if self.remote is not None:
            remote_call = partial(call_gateway, self.remote.related, reference_id, limit, timeout=None)

        outcome = await run_with_fallback(
            remote_call,
            partial(self.local_related, origin, limit),
            remote_timeout=self.remote_timeout,
            local_timeout=self.gateway_timeout * 2,
            label="related",
        )
        # The origin must never be listed as related to itself, whichever tier answered.
        results = [r for r in (outcome.value or []) if r.get("reference_id") != reference_id]
        return results[:limit]

    async def local_related(self, origin: Mapping[str, Any], limit: int = DEFAULT_RELATED_LIMIT) -> List[SearchResult]:
        kind = self._origin_kind(origin)
        if kind is None:
            logger.warning(f"Cannot determine entity kind for {origin.get('reference_id')}")
            return []
        gateway = select_gateway(self.gateways, kind)
        if gateway is None:
            return []

        reference_id = origin.get("reference_id")
        filters = related_filters(origin, kind)
        if not filters:
            return []

        # One extra row per filter so dropping the origin still leaves `limit` candidates.
        tasks = [
            call_gateway(gateway.query_by_field, field, value, limit + 1, timeout=self.gateway_timeout)
            for field, value in filters
        ]
        gathered = await asyncio.gather(*tasks, return_exceptions=True)

        seen: Set[str] = {reference_id}
        results: List[SearchResult] = []
        for (field, _value), item in zip(filters, gathered):
            if isinstance(item, BaseException):
                logger.warning(f"Related query on {kind.collection}.{field} failed: {error_message(item)}")
                continue
            taken = 0
            for record in item:
                if taken >= limit:
                    break
                ref = record.get("reference_id")
                if ref == reference_id:
                    continue
                taken += 1
                key = ref if is_valid(ref) else f"{record.get('kind')}:{record.get('id')}"
                if key in seen:
                    continue
                seen.add(key)
                results.append(result_from_record(record, match_score=RELATED_MATCH_SCORE, match_type="related"))
        return results[:limit]
