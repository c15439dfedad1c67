"""
Router module: choosing which collection gateways a request touches.
"""
from typing import Dict, List, Mapping, Optional, Tuple

from ..core.logger import get_logger
from ..models.schema import ALL_ENTITY_KINDS, EntityKind
from ..reference.codec import decode
from ..retrievers.base import CollectionGateway

logger = get_logger(__name__)


def select_gateway(
    gateways: Mapping[EntityKind, CollectionGateway],
    kind: EntityKind,
) -> Optional[CollectionGateway]:
    """
    Gateway serving one entity kind, or None if that collection is not wired.
    """
    gateway = gateways.get(kind)
    if gateway is None:
        logger.warning(f"No gateway configured for {kind.collection}")
    return gateway


def route_reference_id(
    gateways: Mapping[EntityKind, CollectionGateway],
    reference_id: str,
) -> Optional[Tuple[EntityKind, CollectionGateway]]:
    """
    The single gateway a Reference ID can live in, derived from its prefix.

    Returns:
        (kind, gateway), or None if the id is malformed or the collection is not wired
    """
    parts = decode(reference_id)
    if parts is None:
        return None
    gateway = select_gateway(gateways, parts.kind)
    if gateway is None:
        return None
    return parts.kind, gateway


def plan_fanout(gateways: Mapping[EntityKind, CollectionGateway]) -> List[Tuple[EntityKind, CollectionGateway]]:
    """
    Gateways to query during local fan-out, in fixed collection enumeration
    order (shops, products, menu, services, offices), independent of the
    mapping's own ordering.
    """
    plan: List[Tuple[EntityKind, CollectionGateway]] = []
    for kind in ALL_ENTITY_KINDS:
        gateway = gateways.get(kind)
        if gateway is not None:
            plan.append((kind, gateway))
    return plan


def index_gateways(gateways) -> Dict[EntityKind, CollectionGateway]:
    """
    Accept either a mapping keyed by kind (or kind name) or an iterable of
    gateways exposing a `kind` attribute.
    """
    items = gateways.items() if isinstance(gateways, Mapping) else ((g.kind, g) for g in gateways)
    indexed: Dict[EntityKind, CollectionGateway] = {}
    for key, gateway in items:
        kind = EntityKind.parse(key)
        if kind is None:
            raise ValueError(f"Unknown entity kind for gateway: {key!r}")
        indexed[kind] = gateway
    return indexed
