"""Search module: scoring, routing, fan-out, fallback, and the search components."""
from .aggregator import SearchAggregator, haversine_km, score_records
from .fallback import FallbackOutcome, run_with_fallback
from .ranker import match_type_of, rank_results, score_result
from .recent import RecentSearches
from .related import RelatedItemResolver
from .remote import RemoteSearchClient
from .router import index_gateways, plan_fanout, route_reference_id, select_gateway
from .searcher import scan_collections_parallel_with_errors
from .service import SearchService, build_search_service
from .suggestions import SuggestionProvider, local_suggestions, location_suggestions

__all__ = [
    "SearchAggregator",
    "RelatedItemResolver",
    "SuggestionProvider",
    "SearchService",
    "build_search_service",
    "RemoteSearchClient",
    "RecentSearches",
    "FallbackOutcome",
    "run_with_fallback",
    "scan_collections_parallel_with_errors",
    "index_gateways",
    "plan_fanout",
    "route_reference_id",
    "select_gateway",
    "rank_results",
    "score_result",
    "match_type_of",
    "score_records",
    "haversine_km",
    "local_suggestions",
    "location_suggestions",
]
