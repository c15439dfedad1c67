"""
Pytest configuration and shared fixtures.
"""
import time
from typing import Any, Dict, List, Optional

import pytest

from refsearch_server.models.schema import EntityKind
from refsearch_server.retrievers.memory import InMemoryGateway
from refsearch_server.search.service import SearchService

SHOPS = [
    {
        "id": "s1",
        "referenceId": "SHP-MAN-001",
        "shopName": "Sharma General Store",
        "category": "Grocery",
        "district": "Mandsaur",
        "tags": ["rice", "atta"],
        "isFeatured": True,
        "location": {"lat": 24.0734, "lng": 75.0699},
        "openingHours": "9-21",
    },
    {
        "id": "s2",
        "referenceId": "SHP-MAN-002",
        "shopName": "Pizza Corner",
        "category": "Food",
        "district": "Mandsaur",
        "location": {"latitude": 24.0612, "longitude": 75.0811},
    },
]

PRODUCTS = [
    {
        "id": "p1",
        "referenceId": "PRD-MAN-001",
        "name": "Basmati Rice",
        "brand": "India Gate",
        "category": "Grocery",
        "district": "Mandsaur",
        "tags": ["rice"],
        "price": "120",
    },
    {
        "id": "p2",
        "referenceId": "PRD-MAN-002",
        "name": "Brown Rice",
        "brand": "India Gate",
        "category": "Grocery",
        "district": "Garoth",
        "price": "N/A",
    },
    {
        "id": "p3",
        "referenceId": "PRD-GAR-001",
        "name": "Sunflower Oil",
        "brand": "Fortune",
        "category": "Grocery",
        "district": "Garoth",
    },
]

MENU_ITEMS = [
    {
        "id": "m1",
        "referenceId": "MNU-MAN-001",
        "itemName": "Margherita Pizza",
        "category": "Italian",
        "brand": "Pizza Corner",
        "district": "Mandsaur",
    },
]

SERVICES = [
    {
        "id": "v1",
        "referenceId": "SRV-MAN-001",
        "serviceName": "Rice Mill Repair",
        "category": "Technical",
        "district": "Mandsaur",
    },
]

OFFICES = [
    {
        "id": "o1",
        "referenceId": "OFF-MAN-001",
        "facilityName": "Post Office",
        "facilityType": "Government",
        "district": "Mandsaur",
    },
]

SAMPLE_DOCUMENTS: Dict[EntityKind, List[Dict[str, Any]]] = {
    EntityKind.SHOP: SHOPS,
    EntityKind.PRODUCT: PRODUCTS,
    EntityKind.MENU: MENU_ITEMS,
    EntityKind.SERVICE: SERVICES,
    EntityKind.OFFICE: OFFICES,
}


class FailingGateway(InMemoryGateway):
    """Gateway whose store is unreachable."""

    def get_by_reference_id(self, reference_id: str):
        raise RuntimeError(f"{self.kind.collection} store unreachable")

    def query_by_field(self, field: str, value: Any, limit: Optional[int] = None):
        raise RuntimeError(f"{self.kind.collection} store unreachable")

    def scan_all(self, limit: Optional[int] = None):
        raise RuntimeError(f"{self.kind.collection} store unreachable")


class SlowGateway(InMemoryGateway):
    """Gateway that answers only after `delay` seconds."""

    def __init__(self, kind: EntityKind, documents=(), delay: float = 0.5) -> None:
        super().__init__(kind, documents)
        self.delay = delay

    def scan_all(self, limit: Optional[int] = None):
        time.sleep(self.delay)
        return super().scan_all(limit)


def make_gateways(overrides: Optional[Dict[EntityKind, Any]] = None) -> Dict[EntityKind, InMemoryGateway]:
    gateways = {kind: InMemoryGateway(kind, docs) for kind, docs in SAMPLE_DOCUMENTS.items()}
    gateways.update(overrides or {})
    return gateways


@pytest.fixture
def gateways():
    return make_gateways()


@pytest.fixture
def service(gateways):
    return SearchService(gateways, remote=None, remote_timeout=1.0, gateway_timeout=1.0)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every REFSEARCH_* variable for the duration of the test."""
    for var in [
        "REFSEARCH_REMOTE_BASE_URL",
        "REFSEARCH_REMOTE_TIMEOUT",
        "REFSEARCH_GATEWAY_TIMEOUT",
        "REFSEARCH_DATA_DIR",
        "REFSEARCH_LOG_LEVEL",
        "REFSEARCH_LOG_FILE",
    ]:
        monkeypatch.delenv(var, raising=False)
    yield
