"""
Reference ID codec: PREFIX-DISTRICTCODE-SEQ identifiers, e.g. PRD-MAN-024.

All functions here are pure. Malformed input never raises on the read side
(decode / is_valid / entity_type_of / route_path); encode raises ValueError
for arguments that cannot produce a well-formed identifier.
"""
import re
from typing import Any, Dict, NamedTuple, Optional, Union

from ..models.schema import ALL_ENTITY_KINDS, EntityKind

ROOT_PATH = "/"
MAX_SEQUENCE = 999

_PREFIX_ALTERNATION = "|".join(kind.prefix for kind in ALL_ENTITY_KINDS)
REFERENCE_ID_PATTERN = re.compile(rf"^({_PREFIX_ALTERNATION})-([A-Z]{{3}})-([0-9]{{3}})$")

COMMON_DISTRICTS = (
    "Mandsaur",
    "Bhanpura",
    "Garoth",
    "Malhargarh",
    "Sitamau",
    "Shamgarh",
    "Suwasra",
    "Daloda",
)

DISTRICT_MAPPINGS: Dict[str, str] = {d.lower(): d for d in COMMON_DISTRICTS}


class ReferenceIdParts(NamedTuple):
    kind: EntityKind
    district_code: str
    sequence: int

    @property
    def prefix(self) -> str:
        return self.kind.prefix


def normalize_district(district: str) -> str:
    """Map known spelling variants onto the canonical district name."""
    normalized = (district or "").strip().lower()
    return DISTRICT_MAPPINGS.get(normalized, district)


def district_code(district: str) -> str:
    """
    Derive the 3-letter district code.

    Non-letters are stripped first, then the first three letters are kept
    and the code is right-padded with X.
    """
    letters = re.sub(r"[^A-Z]", "", (district or "").upper())
    return letters[:3].ljust(3, "X")


def resolve_kind(entity_type: Union[EntityKind, str]) -> EntityKind:
    kind = entity_type if isinstance(entity_type, EntityKind) else EntityKind.from_prefix(entity_type)
    if kind is None:
        kind = EntityKind.parse(entity_type)
    if kind is None:
        raise ValueError(f"Unknown entity type: {entity_type!r}")
    return kind


def encode(entity_type: Union[EntityKind, str], district: str, current_count: int) -> str:
    """
    Build the Reference ID for the next entity in a partition.

    Args:
        entity_type: EntityKind, prefix ("PRD") or kind value ("product")
        district: District name, e.g. "Mandsaur"
        current_count: Number of entities already issued in the partition

    Returns:
        Canonical Reference ID, e.g. encode("PRD", "Mandsaur", 23) == "PRD-MAN-024"

    Raises:
        ValueError: unknown entity type, negative count, or exhausted partition
    """
    kind = resolve_kind(entity_type)
    if isinstance(current_count, bool) or not isinstance(current_count, int) or current_count < 0:
        raise ValueError(f"current_count must be a non-negative integer, got {current_count!r}")
    sequence = current_count + 1
    if sequence > MAX_SEQUENCE:
        raise ValueError(f"Partition {kind.prefix}-{district_code(district)} is exhausted")
    return f"{kind.prefix}-{district_code(district)}-{sequence:03d}"


def decode(raw: Any) -> Optional[ReferenceIdParts]:
    """Parse a Reference ID; returns None for anything that is not exactly well-formed."""
    if not isinstance(raw, str):
        return None
    match = REFERENCE_ID_PATTERN.fullmatch(raw)
    if not match:
        return None
    kind = EntityKind.from_prefix(match.group(1))
    if kind is None:
        return None
    return ReferenceIdParts(kind=kind, district_code=match.group(2), sequence=int(match.group(3)))


def is_valid(raw: Any) -> bool:
    return decode(raw) is not None


def entity_type_of(raw: Any) -> Optional[EntityKind]:
    parts = decode(raw)
    return parts.kind if parts else None


def route_path(raw: Any) -> str:
    """Canonical resource path (/<kind>/<reference id>); ROOT_PATH for invalid input."""
    parts = decode(raw)
    if parts is None:
        return ROOT_PATH
    return f"/{parts.kind.value}/{raw}"


def partition_key(entity_type: Union[EntityKind, str], district: str) -> str:
    """Counter key for a (prefix, district code) partition, e.g. PRD_MAN."""
    kind = resolve_kind(entity_type)
    return f"{kind.prefix}_{district_code(district)}"
