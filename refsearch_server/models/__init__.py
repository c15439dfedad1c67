"""Models module: entity kinds, record and result schemas."""
from .schema import (
    ALL_ENTITY_KINDS,
    MATCH_TYPES,
    EntityKind,
    EntityRecord,
    Location,
    SearchResponse,
    SearchResult,
    Suggestion,
    build_response,
    normalize_result,
    result_from_record,
)

__all__ = [
    "ALL_ENTITY_KINDS",
    "MATCH_TYPES",
    "EntityKind",
    "EntityRecord",
    "Location",
    "SearchResult",
    "SearchResponse",
    "Suggestion",
    "normalize_result",
    "result_from_record",
    "build_response",
]
