"""Reference module: Reference ID codec and sequence allocation."""
from .allocator import ReferenceIdAllocator, next_reference_id, reference_id_exists
from .codec import (
    COMMON_DISTRICTS,
    REFERENCE_ID_PATTERN,
    ROOT_PATH,
    ReferenceIdParts,
    decode,
    district_code,
    encode,
    entity_type_of,
    is_valid,
    normalize_district,
    partition_key,
    resolve_kind,
    route_path,
)

__all__ = [
    "COMMON_DISTRICTS",
    "REFERENCE_ID_PATTERN",
    "ROOT_PATH",
    "ReferenceIdParts",
    "ReferenceIdAllocator",
    "decode",
    "district_code",
    "encode",
    "entity_type_of",
    "is_valid",
    "next_reference_id",
    "normalize_district",
    "partition_key",
    "reference_id_exists",
    "resolve_kind",
    "route_path",
]
