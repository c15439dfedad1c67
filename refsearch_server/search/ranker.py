from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..models.schema import EntityKind

# Ordinal priority: reference id > exact name > name prefix > name substring
# > brand > category = tag > district > featured.
REFERENCE_ID_WEIGHT = 10.0
NAME_EXACT_WEIGHT = 8.0
NAME_PREFIX_WEIGHT = 6.0
NAME_CONTAINS_WEIGHT = 4.0
BRAND_WEIGHT = 3.0
CATEGORY_WEIGHT = 2.0
TAG_WEIGHT = 2.0
DISTRICT_WEIGHT = 1.0
FEATURED_BOOST = 0.5


def _lower(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ""


def _brand_applies(record: Mapping[str, Any]) -> bool:
    kind = EntityKind.parse(record.get("kind"))
    return kind is None or kind.has_brand


def score_signals(record: Mapping[str, Any], term: str) -> List[Tuple[str, float]]:
    """
    Every signal that fires for record against an already lower-cased term.

    Returns:
        (match_type, weight) pairs in priority order
    """
    if not term:
        return []
    signals: List[Tuple[str, float]] = []

    if term in _lower(record.get("reference_id")):
        signals.append(("reference_id", REFERENCE_ID_WEIGHT))

    name = _lower(record.get("name"))
    if name == term:
        signals.append(("name", NAME_EXACT_WEIGHT))
    if name.startswith(term):
        signals.append(("name", NAME_PREFIX_WEIGHT))
    if term in name:
        signals.append(("name", NAME_CONTAINS_WEIGHT))

    if _brand_applies(record) and term in _lower(record.get("brand")):
        signals.append(("brand", BRAND_WEIGHT))

    if term in _lower(record.get("category")):
        signals.append(("category", CATEGORY_WEIGHT))

    if any(term in _lower(tag) for tag in record.get("tags") or []):
        signals.append(("tag", TAG_WEIGHT))

    if term in _lower(record.get("district")):
        signals.append(("district", DISTRICT_WEIGHT))

    if record.get("is_featured"):
        signals.append(("featured", FEATURED_BOOST))

    return signals


def score_result(record: Mapping[str, Any], term: str) -> float:
    """Additive relevance score; 0 means the record does not match."""
    return sum(weight for _, weight in score_signals(record, term))


def match_type_of(record: Mapping[str, Any], term: str) -> Optional[str]:
    """Field that produced the strongest signal, or None for no match."""
    signals = score_signals(record, term)
    if not signals:
        return None
    return max(signals, key=lambda s: s[1])[0]


def rank_results(
    scored: Sequence[Tuple[float, Any]],
    max_results: Optional[int] = None,
) -> List[Any]:
    """
    Drop zero scores and sort by score, highest first.

    The sort is stable, so equal scores keep the order in which they were
    encountered.
    """
    kept = [(score, item) for score, item in scored if score > 0]
    kept.sort(key=lambda x: x[0], reverse=True)
    ranked = [item for _, item in kept]
    if max_results is not None:
        ranked = ranked[:max_results]
    return ranked
