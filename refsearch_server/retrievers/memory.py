from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..models.schema import EntityKind, EntityRecord
from .base import BaseGateway

_FIELD_ALIASES = {
    "referenceId": "reference_id",
    "isFeatured": "is_featured",
    "isActive": "is_active",
    "imageUrl": "image_url",
}


class InMemoryGateway(BaseGateway):
    """
    Collection gateway over records held in memory.

    Records are returned in insertion order.
    """

    def __init__(self, kind: EntityKind, documents: Iterable[Mapping[str, Any]] = ()) -> None:
        self.kind = kind
        self._records: List[EntityRecord] = []
        self._by_reference: Dict[str, EntityRecord] = {}
        for doc in documents:
            self.add(doc)

    def add(self, document: Mapping[str, Any], key: Optional[str] = None) -> EntityRecord:
        if key is None and document.get("id") is None:
            key = f"{self.kind.value}-{len(self._records) + 1}"
        record = self.create_entity_record(self.kind, document, key)
        self._records.append(record)
        self._by_reference.setdefault(record["reference_id"], record)
        return record

    def __len__(self) -> int:
        return len(self._records)

    def get_by_reference_id(self, reference_id: str) -> Optional[EntityRecord]:
        record = self._by_reference.get(reference_id)
        return dict(record) if record is not None else None

    def query_by_field(self, field: str, value: Any, limit: Optional[int] = None) -> List[EntityRecord]:
        field = _FIELD_ALIASES.get(field, field)
        out: List[EntityRecord] = []
        for record in self._records:
            current = record.get(field)
            if isinstance(current, list):
                matched = value in current
            else:
                matched = current == value
            if not matched:
                continue
            out.append(dict(record))
            if limit is not None and len(out) >= limit:
                break
        return out

    def scan_all(self, limit: Optional[int] = None) -> List[EntityRecord]:
        records = self._records if limit is None else self._records[:limit]
        return [dict(r) for r in records]
