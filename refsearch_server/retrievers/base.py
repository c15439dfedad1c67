"""
Base gateway classes and protocol definitions.
"""
from typing import Any, Dict, List, Mapping, Optional, Protocol

from ..models.schema import EntityKind, EntityRecord, Location

# Raw document keys consumed by record normalization; everything else is opaque payload.
_NAME_KEYS = ("name", "shopName", "serviceName", "itemName", "facilityName")
_CATEGORY_KEYS = ("category", "facilityType", "type")
_BRAND_KEYS = ("brand", "brand_name", "brandName")
_CONSUMED_KEYS = frozenset(
    _NAME_KEYS
    + _CATEGORY_KEYS
    + _BRAND_KEYS
    + (
        "id",
        "referenceId",
        "reference_id",
        "tags",
        "district",
        "location",
        "price",
        "isFeatured",
        "is_featured",
        "isActive",
        "is_active",
        "imageUrl",
        "image_url",
        "description",
    )
)


class CollectionGateway(Protocol):
    """
    Protocol for read access to one entity collection.

    No ordering guarantee is assumed beyond what the implementation documents.
    """

    kind: EntityKind

    def get_by_reference_id(self, reference_id: str) -> Optional[EntityRecord]:
        ...

    def query_by_field(self, field: str, value: Any, limit: Optional[int] = None) -> List[EntityRecord]:
        ...

    def scan_all(self, limit: Optional[int] = None) -> List[EntityRecord]:
        ...


class BaseGateway:
    """
    Base class for gateways with common normalization helpers.
    """

    @staticmethod
    def _coerce_float(value: Any) -> Optional[float]:
        """
        Best-effort coercion to float for stored values.

        - None / "" / "N/A" / "na" / "null" -> None
        - int/float -> float
        - numeric strings -> float
        - anything else -> None
        """
        if value is None:
            return None
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            s = value.strip()
            if not s:
                return None
            if s.lower() in {"n/a", "na", "none", "null", "nan"}:
                return None
            try:
                return float(s)
            except ValueError:
                return None
        return None

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "y"}
        return False

    @staticmethod
    def _coerce_str(value: Any) -> Optional[str]:
        if value is None:
            return None
        s = str(value).strip()
        return s or None

    @staticmethod
    def _first(raw: Mapping[str, Any], keys) -> Any:
        for key in keys:
            value = raw.get(key)
            if value not in (None, ""):
                return value
        return None

    def _coerce_location(self, value: Any) -> Optional[Location]:
        if not isinstance(value, Mapping):
            return None
        lat = self._coerce_float(value.get("lat", value.get("latitude")))
        lng = self._coerce_float(value.get("lng", value.get("longitude")))
        if lat is None or lng is None:
            return None
        return {"lat": lat, "lng": lng}

    def _coerce_tags(self, value: Any) -> List[str]:
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            return []
        return [t for t in (self._coerce_str(v) for v in value) if t]

    @staticmethod
    def placeholder_reference_id(kind: EntityKind, key: str) -> str:
        """Display id for records stored before Reference IDs existed; never a valid id."""
        return f"{kind.prefix}-{(key or '')[:6].upper()}"

    def create_entity_record(self, kind: EntityKind, raw: Mapping[str, Any], key: Optional[str] = None) -> EntityRecord:
        """
        Normalize a raw store document into an EntityRecord.

        Args:
            kind: Entity kind of the collection the document came from
            raw: Raw document as stored (camelCase keys, aliases per kind)
            key: Store key; falls back to raw["id"]

        Returns:
            EntityRecord with kind-specific extras kept under "attributes"
        """
        store_key = self._coerce_str(key if key is not None else raw.get("id")) or ""
        reference_id = self._coerce_str(raw.get("referenceId") or raw.get("reference_id"))
        if not reference_id:
            reference_id = self.placeholder_reference_id(kind, store_key)

        brand = self._coerce_str(self._first(raw, _BRAND_KEYS)) if kind.has_brand else None
        is_active = raw.get("isActive", raw.get("is_active", True))

        return {
            "id": store_key,
            "reference_id": reference_id,
            "kind": kind.value,
            "name": self._coerce_str(self._first(raw, _NAME_KEYS)) or "",
            "category": self._coerce_str(self._first(raw, _CATEGORY_KEYS)),
            "brand": brand,
            "tags": self._coerce_tags(raw.get("tags")),
            "district": self._coerce_str(raw.get("district")),
            "location": self._coerce_location(raw.get("location")),
            "price": self._coerce_float(raw.get("price")),
            "is_featured": self._coerce_bool(raw.get("isFeatured", raw.get("is_featured"))),
            "is_active": self._coerce_bool(is_active),
            "image_url": self._coerce_str(raw.get("imageUrl") or raw.get("image_url")),
            "description": self._coerce_str(raw.get("description")),
            "attributes": {k: v for k, v in raw.items() if k not in _CONSUMED_KEYS},
        }
