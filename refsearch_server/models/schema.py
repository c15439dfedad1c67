from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict


class EntityKind(str, Enum):
    """Closed set of indexed entity kinds, in fixed collection enumeration order."""

    SHOP = "shop"
    PRODUCT = "product"
    MENU = "menu"
    SERVICE = "service"
    OFFICE = "office"

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]

    @property
    def collection(self) -> str:
        return _COLLECTIONS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def has_brand(self) -> bool:
        return self in (EntityKind.PRODUCT, EntityKind.MENU)

    @classmethod
    def from_prefix(cls, prefix: Any) -> Optional["EntityKind"]:
        if not isinstance(prefix, str):
            return None
        for kind, kind_prefix in _PREFIXES.items():
            if kind_prefix == prefix:
                return kind
        return None

    @classmethod
    def parse(cls, value: Any) -> Optional["EntityKind"]:
        """Accept a kind value, a prefix or a collection name (case-insensitive)."""
        if isinstance(value, EntityKind):
            return value
        if not isinstance(value, str):
            return None
        v = value.strip().lower()
        for kind in cls:
            if v in (kind.value, kind.prefix.lower(), kind.collection.lower()):
                return kind
        return None


_PREFIXES: Dict[EntityKind, str] = {
    EntityKind.SHOP: "SHP",
    EntityKind.PRODUCT: "PRD",
    EntityKind.MENU: "MNU",
    EntityKind.SERVICE: "SRV",
    EntityKind.OFFICE: "OFF",
}

_COLLECTIONS: Dict[EntityKind, str] = {
    EntityKind.SHOP: "shops",
    EntityKind.PRODUCT: "products",
    EntityKind.MENU: "menuItems",
    EntityKind.SERVICE: "services",
    EntityKind.OFFICE: "offices",
}

_LABELS: Dict[EntityKind, str] = {
    EntityKind.SHOP: "Shop",
    EntityKind.PRODUCT: "Product",
    EntityKind.MENU: "Menu Item",
    EntityKind.SERVICE: "Service",
    EntityKind.OFFICE: "Office",
}

ALL_ENTITY_KINDS: List[EntityKind] = list(EntityKind)

MATCH_TYPES = frozenset({
    "reference_id",
    "name",
    "brand",
    "category",
    "tag",
    "district",
    "featured",
    "description",
    "related",
})


class Location(TypedDict):
    lat: float
    lng: float


class EntityRecord(TypedDict):
    id: str
    reference_id: str
    kind: str
    name: str
    category: Optional[str]
    brand: Optional[str]
    tags: List[str]
    district: Optional[str]
    location: Optional[Location]
    price: Optional[float]
    is_featured: bool
    is_active: bool
    image_url: Optional[str]
    description: Optional[str]
    attributes: Dict[str, Any]


class SearchResult(TypedDict):
    id: Optional[str]
    reference_id: Optional[str]
    kind: Optional[str]
    name: Optional[str]
    category: Optional[str]
    brand: Optional[str]
    tags: List[str]
    district: Optional[str]
    location: Optional[Location]
    price: Optional[float]
    is_featured: bool
    image_url: Optional[str]
    description: Optional[str]
    distance: Optional[float]
    match_score: float
    match_type: Optional[str]


class Suggestion(TypedDict, total=False):
    text: str
    type: str
    category: Optional[str]
    icon: Optional[str]
    reference_id: Optional[str]


class SearchResponse(TypedDict):
    n_found: int
    returned: int
    tier: str
    query_used: str
    results: List[SearchResult]
    errors: Dict[str, str]
    search_time_ms: float


def normalize_result(
    *,
    id: Optional[str] = None,
    reference_id: Optional[str] = None,
    kind: Optional[str] = None,
    name: Optional[str] = None,
    category: Optional[str] = None,
    brand: Optional[str] = None,
    tags: Optional[List[str]] = None,
    district: Optional[str] = None,
    location: Optional[Location] = None,
    price: Optional[float] = None,
    is_featured: bool = False,
    image_url: Optional[str] = None,
    description: Optional[str] = None,
    distance: Optional[float] = None,
    match_score: float = 0.0,
    match_type: Optional[str] = None,
) -> SearchResult:
    return {
        "id": id or None,
        "reference_id": reference_id or None,
        "kind": kind or None,
        "name": name or None,
        "category": category or None,
        "brand": brand or None,
        "tags": list(tags or []),
        "district": district or None,
        "location": location or None,
        "price": price,
        "is_featured": bool(is_featured),
        "image_url": image_url or None,
        "description": description or None,
        "distance": distance,
        "match_score": float(match_score or 0.0),
        "match_type": match_type if match_type in MATCH_TYPES else None,
    }


def result_from_record(
    record: EntityRecord,
    *,
    match_score: float,
    match_type: Optional[str],
    distance: Optional[float] = None,
) -> SearchResult:
    """Project an entity record onto a search result."""
    return normalize_result(
        id=record.get("id"),
        reference_id=record.get("reference_id"),
        kind=record.get("kind"),
        name=record.get("name"),
        category=record.get("category"),
        brand=record.get("brand"),
        tags=record.get("tags"),
        district=record.get("district"),
        location=record.get("location"),
        price=record.get("price"),
        is_featured=record.get("is_featured", False),
        image_url=record.get("image_url"),
        description=record.get("description"),
        distance=distance,
        match_score=match_score,
        match_type=match_type,
    )


def build_response(
    *,
    n_found: int,
    returned: int,
    tier: str,
    query_used: str,
    results: List[SearchResult],
    errors: Optional[Dict[str, str]] = None,
    search_time_ms: float = 0.0,
) -> SearchResponse:
    return {
        "n_found": n_found,
        "returned": returned,
        "tier": tier,
        "query_used": query_used,
        "results": results,
        "errors": errors or {},
        "search_time_ms": round(search_time_ms, 2),
    }
