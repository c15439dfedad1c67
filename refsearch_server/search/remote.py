"""
Client for the remote search backend.

The backend owns its own index and ranking. Every call is best-effort: any
transport error, non-success status or unusable body raises
RemoteUnavailableError so callers can fall back to the local tier.
"""
from typing import Any, Dict, List, Mapping, Optional

import requests

from ..core.config import get_remote_config
from ..core.error import RemoteUnavailableError
from ..models.schema import Location, SearchResult, Suggestion, normalize_result

# camelCase keys the backend may send, mapped onto result fields.
_RESULT_KEY_ALIASES = {
    "referenceId": "reference_id",
    "type": "kind",
    "imageUrl": "image_url",
    "isFeatured": "is_featured",
    "matchScore": "match_score",
    "matchType": "match_type",
}

_RESULT_FIELDS = (
    "id",
    "reference_id",
    "kind",
    "name",
    "category",
    "brand",
    "tags",
    "district",
    "location",
    "price",
    "is_featured",
    "image_url",
    "description",
    "distance",
    "match_score",
    "match_type",
)


def _coerce_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def result_from_payload(item: Mapping[str, Any]) -> SearchResult:
    """Normalize one remote result item (camelCase or snake_case)."""
    fields: Dict[str, Any] = {}
    for key, value in item.items():
        target = _RESULT_KEY_ALIASES.get(key, key)
        if target in _RESULT_FIELDS and target not in fields:
            fields[target] = value
    if "name" not in fields:
        fields["name"] = item.get("shopName") or item.get("serviceName")
    if "brand" not in fields:
        fields["brand"] = item.get("brand_name")

    for numeric in ("price", "distance"):
        fields[numeric] = _coerce_number(fields.get(numeric))
    fields["match_score"] = _coerce_number(fields.get("match_score")) or 0.0
    if fields.get("id") is not None:
        fields["id"] = str(fields["id"])
    tags = fields.get("tags")
    fields["tags"] = [str(t) for t in tags] if isinstance(tags, list) else []
    location = fields.get("location")
    fields["location"] = location if isinstance(location, dict) else None
    return normalize_result(**fields)


def suggestion_from_payload(item: Any) -> Suggestion:
    if isinstance(item, str):
        return {"text": item, "type": "item"}
    suggestion: Suggestion = {
        "text": str(item.get("text") or ""),
        "type": str(item.get("type") or "item"),
    }
    for key in ("category", "icon"):
        if item.get(key):
            suggestion[key] = item[key]
    ref = item.get("referenceId") or item.get("reference_id")
    if ref:
        suggestion["reference_id"] = ref
    return suggestion


class RemoteSearchClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_env(cls) -> Optional["RemoteSearchClient"]:
        """Client configured from REFSEARCH_REMOTE_* variables, or None if no backend is set."""
        cfg = get_remote_config()
        if not cfg["base_url"]:
            return None
        return cls(cfg["base_url"], timeout=cfg["timeout"])

    def _get_list(self, path: str, params: Dict[str, Any]) -> List[Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise RemoteUnavailableError(
                f"Remote request failed: {exc}",
                details={"url": url},
            ) from exc
        if not isinstance(data, list):
            raise RemoteUnavailableError(
                f"Remote returned {type(data).__name__}, expected a list",
                details={"url": url},
            )
        return data

    def universal(self, term: str, location: Optional[Location] = None) -> List[SearchResult]:
        params: Dict[str, Any] = {"q": term}
        if location:
            params["lat"] = location["lat"]
            params["lng"] = location["lng"]
        data = self._get_list("/search/universal", params)
        return [result_from_payload(item) for item in data if isinstance(item, Mapping)]

    def suggestions(self, term: str) -> List[Suggestion]:
        data = self._get_list("/search/suggestions", {"q": term})
        return [suggestion_from_payload(item) for item in data if isinstance(item, (str, Mapping))]

    def related(self, reference_id: str, limit: int) -> List[SearchResult]:
        data = self._get_list("/search/related", {"referenceId": reference_id, "limit": limit})
        return [result_from_payload(item) for item in data if isinstance(item, Mapping)]
