"""
Type-ahead suggestions: Reference ID short-circuit, remote endpoint, curated catalog.
"""
from functools import partial
from typing import List, Optional, Sequence

from ..core.config import DEFAULT_REMOTE_TIMEOUT, SUGGESTION_LIMIT
from ..core.logger import get_logger
from ..models.schema import Location, Suggestion
from ..reference.codec import is_valid
from .aggregator import SearchAggregator
from .fallback import run_with_fallback
from .remote import RemoteSearchClient
from .searcher import call_gateway

logger = get_logger(__name__)

SUGGESTION_CATALOG: Sequence[Suggestion] = (
    # Food items
    {"text": "pizza", "type": "menu", "category": "Italian", "icon": "🍕"},
    {"text": "biryani", "type": "menu", "category": "Indian", "icon": "🍛"},
    {"text": "burger", "type": "menu", "category": "Fast Food", "icon": "🍔"},
    {"text": "dosa", "type": "menu", "category": "South Indian", "icon": "🥞"},
    {"text": "pasta", "type": "menu", "category": "Italian", "icon": "🍝"},
    {"text": "sandwich", "type": "menu", "category": "Snacks", "icon": "🥪"},
    # General products
    {"text": "rice चावल", "type": "item", "category": "Grocery", "icon": "🌾"},
    {"text": "milk दूध", "type": "item", "category": "Dairy", "icon": "🥛"},
    {"text": "bread रोटी", "type": "item", "category": "Bakery", "icon": "🍞"},
    {"text": "oil तेल", "type": "item", "category": "Grocery", "icon": "🛢️"},
    {"text": "sugar चीनी", "type": "item", "category": "Grocery", "icon": "🍯"},
    {"text": "flour आटा", "type": "item", "category": "Grocery", "icon": "🌾"},
    {"text": "medicine दवा", "type": "item", "category": "Health", "icon": "💊"},
    {"text": "mobile मोबाइल", "type": "item", "category": "Electronics", "icon": "📱"},
    # Services
    {"text": "haircut", "type": "service", "category": "Beauty", "icon": "✂️"},
    {"text": "repair", "type": "service", "category": "Technical", "icon": "🔧"},
    {"text": "doctor", "type": "service", "category": "Health", "icon": "👨‍⚕️"},
    {"text": "massage", "type": "service", "category": "Wellness", "icon": "💆"},
    {"text": "cleaning", "type": "service", "category": "Home", "icon": "🧹"},
    # Offices
    {"text": "government office", "type": "office", "category": "Government", "icon": "🏛️"},
    {"text": "private office", "type": "office", "category": "Private", "icon": "🏢"},
    {"text": "bank", "type": "office", "category": "Financial", "icon": "🏦"},
    {"text": "post office", "type": "office", "category": "Government", "icon": "📮"},
    {"text": "police station", "type": "office", "category": "Government", "icon": "🚔"},
    # Shops
    {"text": "grocery store", "type": "shop", "category": "Shopping", "icon": "🏪"},
    {"text": "restaurant", "type": "shop", "category": "Food", "icon": "🍽️"},
    {"text": "pharmacy", "type": "shop", "category": "Health", "icon": "💊"},
    {"text": "salon", "type": "shop", "category": "Beauty", "icon": "💇"},
    {"text": "electronics shop", "type": "shop", "category": "Electronics", "icon": "📱"},
    {"text": "office", "type": "shop", "category": "Office", "icon": "🏢"},
    # Categories
    {"text": "grocery", "type": "category", "category": "Shopping", "icon": "🛒"},
    {"text": "food", "type": "category", "category": "Food", "icon": "🍽️"},
    {"text": "health", "type": "category", "category": "Health", "icon": "🏥"},
    {"text": "beauty", "type": "category", "category": "Beauty", "icon": "💄"},
    # Location-based
    {"text": "near me", "type": "location", "category": "Location", "icon": "📍"},
    {"text": "nearby shops", "type": "location", "category": "Location", "icon": "🗺️"},
    {"text": "closest restaurant", "type": "location", "category": "Location", "icon": "🧭"},
)

LOCATION_SUGGESTIONS = (
    "restaurants near me",
    "grocery stores nearby",
    "pharmacies near me",
    "salons nearby",
    "electronics shops near me",
    "cafes nearby",
)


def local_suggestions(
    term: str,
    catalog: Sequence[Suggestion] = SUGGESTION_CATALOG,
    limit: int = SUGGESTION_LIMIT,
) -> List[Suggestion]:
    """
    Filter the curated catalog against term.

    An entry matches when its text contains the term, when any word of the
    term occurs in its text, or when its category contains the term. Matches
    that start with the term come first, then shorter texts.
    """
    q = (term or "").strip().lower()
    if not q:
        return []
    words = q.split()

    def _matches(s: Suggestion) -> bool:
        text = s["text"].lower()
        category = (s.get("category") or "").lower()
        return q in text or any(w in text for w in words) or q in category

    matched = [dict(s) for s in catalog if _matches(s)]
    matched.sort(key=lambda s: (not s["text"].lower().startswith(q), len(s["text"])))
    return matched[:limit]


def location_suggestions(location: Optional[Location]) -> List[str]:
    if not location:
        return []
    return list(LOCATION_SUGGESTIONS)


class SuggestionProvider:
    def __init__(
        self,
        aggregator: SearchAggregator,
        remote: Optional[RemoteSearchClient] = None,
        *,
        remote_timeout: float = DEFAULT_REMOTE_TIMEOUT,
        limit: int = SUGGESTION_LIMIT,
    ) -> None:
        self.aggregator = aggregator
        self.remote = remote
        self.remote_timeout = remote_timeout
        self.limit = limit

    async def suggest(self, term: str) -> List[Suggestion]:
        """
        Suggestions for a partial query; never raises for collaborator failures.
        """
        query = (term or "").strip()
        if not query:
            return []

        candidate = query.upper()
        if is_valid(candidate):
            hit = await self.aggregator.lookup_reference(candidate)
            if hit is not None:
                suggestion: Suggestion = {
                    "text": f"{hit['reference_id']} - {hit['name']}",
                    "type": hit.get("kind") or "item",
                    "icon": "🔍",
                    "reference_id": hit["reference_id"],
                }
                if hit.get("category"):
                    suggestion["category"] = hit["category"]
                logger.debug(f"Suggestion resolved Reference ID {candidate}")
                return [suggestion]

        remote_call = None
        if self.remote is not None:
            remote_call = partial(call_gateway, self.remote.suggestions, query, timeout=None)

        async def _local() -> List[Suggestion]:
            return local_suggestions(query, limit=self.limit)

        outcome = await run_with_fallback(
            remote_call,
            _local,
            remote_timeout=self.remote_timeout,
            local_timeout=None,
            label="suggestions",
        )
        return list(outcome.value or [])[: self.limit]
