"""
SearchService: one object wiring gateways, the remote backend and the search components.
"""
from pathlib import Path
from typing import List, Optional, Union

from ..core.config import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_RELATED_LIMIT,
    get_search_timeouts,
)
from ..core.logger import get_logger
from ..models.schema import Location, SearchResponse, SearchResult, Suggestion
from ..reference.codec import is_valid
from ..retrievers.jsonfile import build_json_gateways
from .aggregator import SearchAggregator
from .recent import RecentSearches
from .related import RelatedItemResolver
from .remote import RemoteSearchClient
from .suggestions import SuggestionProvider, location_suggestions

logger = get_logger(__name__)


class SearchService:
    def __init__(
        self,
        gateways,
        remote: Optional[RemoteSearchClient] = None,
        *,
        max_results: int = DEFAULT_MAX_RESULTS,
        remote_timeout: Optional[float] = None,
        gateway_timeout: Optional[float] = None,
    ) -> None:
        env_remote, env_gateway = get_search_timeouts()
        remote_timeout = remote_timeout if remote_timeout is not None else env_remote
        gateway_timeout = gateway_timeout if gateway_timeout is not None else env_gateway

        self.aggregator = SearchAggregator(
            gateways,
            remote,
            max_results=max_results,
            remote_timeout=remote_timeout,
            gateway_timeout=gateway_timeout,
        )
        self.related = RelatedItemResolver(
            self.aggregator.gateways,
            remote,
            remote_timeout=remote_timeout,
            gateway_timeout=gateway_timeout,
        )
        self.suggestions = SuggestionProvider(self.aggregator, remote, remote_timeout=remote_timeout)

    @property
    def remote(self) -> Optional[RemoteSearchClient]:
        return self.aggregator.remote

    async def search(
        self,
        term: str,
        location: Optional[Location] = None,
        max_results: Optional[int] = None,
        recent: Optional[RecentSearches] = None,
    ) -> SearchResponse:
        """
        Universal search. The query is recorded only into the caller's own
        recent-searches buffer; the service itself keeps no per-caller state.
        """
        response = await self.aggregator.search_with_details(term, location, max_results)
        if recent is not None and response["query_used"]:
            recent.add(response["query_used"], response["returned"])
        return response

    async def suggest(self, term: str) -> List[Suggestion]:
        return await self.suggestions.suggest(term)

    def location_suggestions(self, location: Optional[Location]) -> List[str]:
        return location_suggestions(location)

    async def related_items(self, reference_id: str, limit: int = DEFAULT_RELATED_LIMIT) -> List[SearchResult]:
        """
        Related items for a Reference ID. Malformed or unknown ids give [].
        """
        candidate = (reference_id or "").strip().upper()
        if not is_valid(candidate):
            return []
        origin = await self.aggregator.lookup_reference(candidate)
        if origin is None:
            logger.info(f"Related lookup: {candidate} not found")
            return []
        return await self.related.related_to(origin, limit)


def build_search_service(
    data_dir: Optional[Union[str, Path]] = None,
    remote: Optional[RemoteSearchClient] = None,
) -> SearchService:
    """
    Service over JSON-file collections in data_dir, with the remote backend
    taken from the environment unless one is passed in.
    """
    gateways = build_json_gateways(Path(data_dir) if data_dir else None)
    if remote is None:
        remote = RemoteSearchClient.from_env()
    if remote is None:
        logger.info("No remote search backend configured, serving from local collections only")
    else:
        logger.info(f"Remote search backend: {remote.base_url}")
    return SearchService(gateways, remote)
