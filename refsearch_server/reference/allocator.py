"""
Reference ID allocation: per-partition sequence counters.

Search never allocates; this is used at entity-creation time. Counters only
move forward, so numbers of deleted entities are never handed out again.
Sequence numbers are unique per partition but may have gaps.
"""
import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from ..core.error import AllocationConflictError, log_error
from ..core.logger import get_logger
from ..models.schema import ALL_ENTITY_KINDS, EntityKind
from ..retrievers.base import CollectionGateway
from .codec import MAX_SEQUENCE, resolve_kind, decode, district_code, encode, partition_key

logger = get_logger(__name__)


def next_reference_id(
    entity_type: Union[EntityKind, str],
    district: str,
    existing_records: Iterable[Mapping[str, Any]] = (),
) -> str:
    """
    Next Reference ID computed from already-loaded records.

    A record with a valid reference id counts only when that id names this
    kind and district code. Records without one (legacy data) are counted by
    their district, so callers should pass records of this kind only.
    """
    kind = resolve_kind(entity_type)
    code = district_code(district)
    count = 0
    for record in existing_records:
        parts = decode(record.get("reference_id") or record.get("referenceId"))
        if parts is not None:
            if parts.kind is kind and parts.district_code == code:
                count += 1
            continue
        rec_district = record.get("district")
        if rec_district and district_code(rec_district) == code:
            count += 1
    return encode(kind, district, count)


class ReferenceIdAllocator:
    """
    In-process counter store.

    The lock makes read-then-increment atomic within one process; a shared
    persistence layer must provide its own transactional increment.
    """

    def __init__(self, counters: Optional[Dict[str, int]] = None) -> None:
        self._counters: Dict[str, int] = dict(counters or {})
        self._updated: Dict[str, str] = {}
        self._lock = threading.Lock()

    def current(self, entity_type: Union[EntityKind, str], district: str) -> int:
        with self._lock:
            return self._counters.get(partition_key(entity_type, district), 0)

    def allocate(self, entity_type: Union[EntityKind, str], district: str) -> str:
        """
        Allocate the next Reference ID in the partition.

        Raises:
            AllocationConflictError: the partition has no sequence numbers left
        """
        kind = resolve_kind(entity_type)
        key = partition_key(kind, district)
        with self._lock:
            count = self._counters.get(key, 0)
            if count >= MAX_SEQUENCE:
                raise AllocationConflictError(
                    f"Partition {key} is exhausted",
                    details={"partition": key, "count": count},
                )
            reference_id = encode(kind, district, count)
            self._counters[key] = count + 1
            self._updated[key] = datetime.now(timezone.utc).isoformat()
        logger.info(f"Allocated {reference_id}")
        return reference_id

    def reserve(
        self,
        entity_type: Union[EntityKind, str],
        district: str,
        gateways: Mapping[EntityKind, CollectionGateway],
    ) -> str:
        """
        Allocate and verify that no stored record already carries the new id.

        Raises:
            AllocationConflictError: the id is already present in some collection
        """
        reference_id = self.allocate(entity_type, district)
        if reference_id_exists(reference_id, gateways):
            raise AllocationConflictError(
                f"Reference ID {reference_id} already exists",
                details={"reference_id": reference_id},
            )
        return reference_id

    def reconcile(self, gateways: Mapping[EntityKind, CollectionGateway]) -> Dict[str, Any]:
        """
        Raise counters to the highest sequence found in stored records.

        Returns:
            {"validated": int, "fixed": int, "errors": [str, ...]}
        """
        result: Dict[str, Any] = {"validated": 0, "fixed": 0, "errors": []}
        for kind in ALL_ENTITY_KINDS:
            gateway = gateways.get(kind)
            if gateway is None:
                continue
            try:
                records = gateway.scan_all()
            except Exception as e:
                log_error(e, logger, context={"collection": kind.collection}, level="WARNING")
                result["errors"].append(f"Error validating {kind.collection}: {e}")
                continue

            highest: Dict[str, int] = {}
            for record in records:
                parts = decode(record.get("reference_id"))
                if parts is None or parts.kind is not kind:
                    continue
                key = f"{kind.prefix}_{parts.district_code}"
                highest[key] = max(highest.get(key, 0), parts.sequence)

            with self._lock:
                for key, seen in highest.items():
                    if self._counters.get(key, 0) < seen:
                        self._counters[key] = seen
                        self._updated[key] = datetime.now(timezone.utc).isoformat()
                        result["fixed"] += 1
                    result["validated"] += 1
        return result

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            counters = dict(self._counters)
        by_prefix: Dict[str, int] = {kind.prefix: 0 for kind in ALL_ENTITY_KINDS}
        by_district: Dict[str, int] = {}
        for key, count in counters.items():
            prefix, code = key.split("_", 1)
            by_prefix[prefix] = by_prefix.get(prefix, 0) + count
            by_district[code] = by_district.get(code, 0) + count
        return {
            "total_counters": len(counters),
            "counters_by_prefix": by_prefix,
            "counters_by_district": by_district,
        }

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "updated": dict(self._updated),
            }

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.snapshot(), ensure_ascii=False, indent=2), encoding="utf-8")

    @classmethod
    def load_snapshot(cls, path: Path) -> "ReferenceIdAllocator":
        if not path.exists():
            return cls()
        data = json.loads(path.read_text(encoding="utf-8"))
        allocator = cls({str(k): int(v) for k, v in (data.get("counters") or {}).items()})
        allocator._updated = dict(data.get("updated") or {})
        return allocator


def reference_id_exists(reference_id: str, gateways: Mapping[EntityKind, CollectionGateway]) -> bool:
    """Check every collection for a record carrying reference_id."""
    for kind in ALL_ENTITY_KINDS:
        gateway = gateways.get(kind)
        if gateway is None:
            continue
        if gateway.get_by_reference_id(reference_id) is not None:
            return True
    return False
