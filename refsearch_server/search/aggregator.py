"""
Search aggregation: Reference ID short-circuit, remote tier, local fan-out.
"""
import math
import time
from functools import partial
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from ..core.config import (
    DEFAULT_GATEWAY_TIMEOUT,
    DEFAULT_MAX_RESULTS,
    DEFAULT_REMOTE_TIMEOUT,
    DEFAULT_SCAN_LIMIT,
    REFERENCE_LOOKUP_SCORE,
    normalize_max_results,
)
from ..core.error import log_error
from ..core.logger import get_logger
from ..models.schema import (
    EntityKind,
    EntityRecord,
    Location,
    SearchResponse,
    SearchResult,
    build_response,
    result_from_record,
)
from ..reference.codec import is_valid
from ..retrievers.base import CollectionGateway
from .fallback import TIER_LOCAL, TIER_NONE, run_with_fallback
from .ranker import match_type_of, rank_results, score_result
from .remote import RemoteSearchClient
from .router import index_gateways, route_reference_id
from .searcher import call_gateway, scan_collections_parallel_with_errors

logger = get_logger(__name__)

TIER_REFERENCE = "reference"
EARTH_RADIUS_KM = 6371.0


def haversine_km(origin: Location, target: Location) -> float:
    """Great-circle distance in kilometres."""
    lat1, lng1 = math.radians(origin["lat"]), math.radians(origin["lng"])
    lat2, lng2 = math.radians(target["lat"]), math.radians(target["lng"])
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def _distance_to(record: EntityRecord, location: Optional[Location]) -> Optional[float]:
    if not location or not record.get("location"):
        return None
    return round(haversine_km(location, record["location"]), 3)


def _dedup_key(record: EntityRecord) -> str:
    ref = record.get("reference_id") or ""
    if is_valid(ref):
        return ref
    # Placeholder ids are not unique, fall back to the store key.
    return f"{record.get('kind')}:{record.get('id')}"


def score_records(
    records_by_kind: Mapping[EntityKind, List[EntityRecord]],
    term: str,
    location: Optional[Location] = None,
) -> List[Tuple[float, SearchResult]]:
    """
    Score records in encounter order: collection enumeration order first, then
    each collection's own iteration order. Duplicate reference ids keep their
    first occurrence.
    """
    scored: List[Tuple[float, SearchResult]] = []
    seen: Set[str] = set()
    for records in records_by_kind.values():
        for record in records:
            key = _dedup_key(record)
            if key in seen:
                continue
            seen.add(key)
            score = score_result(record, term)
            if score <= 0:
                continue
            scored.append((
                score,
                result_from_record(
                    record,
                    match_score=score,
                    match_type=match_type_of(record, term),
                    distance=_distance_to(record, location),
                ),
            ))
    return scored


class SearchAggregator:
    """
    Universal search over every entity collection.

    Flow:
    1. Reference ID: direct lookup in the one collection its prefix names
    2. Remote tier: pre-ranked results from the remote search backend
    3. Local tier: parallel scan of every collection, scored and ranked here
    """

    def __init__(
        self,
        gateways,
        remote: Optional[RemoteSearchClient] = None,
        *,
        max_results: int = DEFAULT_MAX_RESULTS,
        remote_timeout: float = DEFAULT_REMOTE_TIMEOUT,
        gateway_timeout: float = DEFAULT_GATEWAY_TIMEOUT,
        local_timeout: Optional[float] = None,
        scan_limit: Optional[int] = DEFAULT_SCAN_LIMIT,
    ) -> None:
        self.gateways: Dict[EntityKind, CollectionGateway] = index_gateways(gateways)
        self.remote = remote
        self.max_results = normalize_max_results(max_results)
        self.remote_timeout = remote_timeout
        self.gateway_timeout = gateway_timeout
        # Per-collection timeouts already bound the fan-out; this caps the whole tier.
        self.local_timeout = local_timeout if local_timeout is not None else gateway_timeout * 2
        self.scan_limit = scan_limit

    async def lookup_reference(self, reference_id: str) -> Optional[SearchResult]:
        """
        Direct lookup of a well-formed Reference ID.

        Returns None when the id is malformed, unknown, or its collection fails.
        """
        routed = route_reference_id(self.gateways, reference_id)
        if routed is None:
            return None
        kind, gateway = routed
        try:
            record = await call_gateway(gateway.get_by_reference_id, reference_id, timeout=self.gateway_timeout)
        except Exception as e:
            log_error(e, logger, context={"collection": kind.collection, "reference_id": reference_id}, level="WARNING")
            return None
        if record is None:
            return None
        return result_from_record(record, match_score=REFERENCE_LOOKUP_SCORE, match_type="reference_id")

    async def local_search(
        self,
        term: str,
        location: Optional[Location] = None,
        max_results: Optional[int] = None,
    ) -> List[SearchResult]:
        results, _n_found, _errors = await self._local_search_with_errors(term, location, max_results)
        return results

    async def _local_search_with_errors(
        self,
        term: str,
        location: Optional[Location],
        max_results: Optional[int],
    ) -> Tuple[List[SearchResult], int, Dict[str, str]]:
        """
        Local fan-out.

        Returns:
            (ranked results, number of matches before truncation, per-collection errors)
        """
        limit = normalize_max_results(max_results, default=self.max_results)
        records_by_kind, errors = await scan_collections_parallel_with_errors(
            gateways=self.gateways,
            scan_limit=self.scan_limit,
            timeout=self.gateway_timeout,
        )
        if errors and len(errors) == len(records_by_kind):
            logger.error(f"Every collection failed during local search: {errors}")
        scored = score_records(records_by_kind, term.strip().lower(), location)
        n_found = len(scored)
        return rank_results(scored, limit), n_found, errors

    async def search(
        self,
        term: str,
        location: Optional[Location] = None,
        max_results: Optional[int] = None,
    ) -> List[SearchResult]:
        """
        Best-effort universal search; never raises for collaborator failures.

        Args:
            term: Raw query string
            location: Optional {"lat", "lng"} used to fill the distance field
            max_results: Result budget (defaults to the aggregator's cap)

        Returns:
            Results sorted by match_score, highest first
        """
        response = await self.search_with_details(term, location, max_results)
        return response["results"]

    async def search_with_details(
        self,
        term: str,
        location: Optional[Location] = None,
        max_results: Optional[int] = None,
    ) -> SearchResponse:
        t0 = time.perf_counter()
        query = (term or "").strip()
        if not query:
            return build_response(n_found=0, returned=0, tier=TIER_NONE, query_used="", results=[])

        candidate = query.upper()
        if is_valid(candidate):
            direct = await self.lookup_reference(candidate)
            if direct is not None:
                logger.info(f"Reference ID hit: {candidate}")
                return build_response(
                    n_found=1,
                    returned=1,
                    tier=TIER_REFERENCE,
                    query_used=candidate,
                    results=[direct],
                    search_time_ms=(time.perf_counter() - t0) * 1000,
                )
            logger.info(f"Reference ID {candidate} not found, running keyword search")

        limit = normalize_max_results(max_results, default=self.max_results)
        local_stats: Dict[str, Any] = {"n_found": 0, "errors": {}}

        async def _local() -> List[SearchResult]:
            results, n_found, errors = await self._local_search_with_errors(query, location, limit)
            local_stats["n_found"] = n_found
            local_stats["errors"] = errors
            return results

        remote_call = None
        if self.remote is not None:
            remote_call = partial(call_gateway, self.remote.universal, query, location, timeout=None)

        outcome = await run_with_fallback(
            remote_call,
            _local,
            remote_timeout=self.remote_timeout,
            local_timeout=self.local_timeout,
            label="search",
        )
        results = list(outcome.value or [])
        errors = dict(outcome.errors)
        errors.update(local_stats["errors"])
        n_found = local_stats["n_found"] if outcome.tier == TIER_LOCAL else len(results)

        logger.info(f"Search '{query}': {len(results)} results via {outcome.tier} tier")
        return build_response(
            n_found=n_found,
            returned=len(results),
            tier=outcome.tier,
            query_used=query,
            results=results,
            errors=errors,
            search_time_ms=(time.perf_counter() - t0) * 1000,
        )
