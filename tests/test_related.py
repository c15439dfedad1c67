"""
Tests for related-item resolution.
"""
from unittest.mock import MagicMock

import pytest

from conftest import FailingGateway, make_gateways
from refsearch_server.core.error import RemoteUnavailableError
from refsearch_server.models.schema import EntityKind
from refsearch_server.retrievers.memory import InMemoryGateway
from refsearch_server.search.related import RelatedItemResolver, related_filters


class BrandFailingGateway(InMemoryGateway):
    def query_by_field(self, field, value, limit=None):
        if field == "brand":
            raise RuntimeError("brand index missing")
        return super().query_by_field(field, value, limit)


def _origin(gateways, reference_id):
    for gateway in gateways.values():
        record = gateway.get_by_reference_id(reference_id)
        if record is not None:
            return record
    raise LookupError(reference_id)


class TestRelatedFilters:
    def test_branded_kind_uses_brand(self):
        origin = {"category": "Grocery", "brand": "India Gate", "district": "Mandsaur"}
        assert related_filters(origin, EntityKind.PRODUCT) == [
            ("category", "Grocery"),
            ("brand", "India Gate"),
            ("district", "Mandsaur"),
        ]

    def test_unbranded_kind_skips_brand(self):
        origin = {"category": "Food", "brand": "Ignored", "district": "Mandsaur"}
        assert related_filters(origin, EntityKind.SHOP) == [("category", "Food"), ("district", "Mandsaur")]

    def test_missing_fields_are_skipped(self):
        assert related_filters({"category": None}, EntityKind.OFFICE) == []


class TestRelatedItemResolver:
    @pytest.mark.asyncio
    async def test_origin_is_never_included(self, gateways):
        resolver = RelatedItemResolver(gateways, gateway_timeout=1.0)
        origin = _origin(gateways, "PRD-MAN-001")

        related = await resolver.related_to(origin)

        refs = [r["reference_id"] for r in related]
        assert "PRD-MAN-001" not in refs
        assert refs == ["PRD-MAN-002", "PRD-GAR-001"]
        assert all(r["match_type"] == "related" and r["match_score"] == 5.0 for r in related)

    @pytest.mark.asyncio
    async def test_limit_is_respected(self, gateways):
        resolver = RelatedItemResolver(gateways, gateway_timeout=1.0)
        related = await resolver.related_to(_origin(gateways, "PRD-MAN-001"), limit=1)
        assert [r["reference_id"] for r in related] == ["PRD-MAN-002"]

    @pytest.mark.asyncio
    async def test_stays_within_origin_collection(self, gateways):
        resolver = RelatedItemResolver(gateways, gateway_timeout=1.0)
        related = await resolver.related_to(_origin(gateways, "SHP-MAN-001"))
        assert [r["reference_id"] for r in related] == ["SHP-MAN-002"]
        assert all(r["kind"] == "shop" for r in related)

    @pytest.mark.asyncio
    async def test_failing_filter_query_is_isolated(self):
        gateways = make_gateways({
            EntityKind.PRODUCT: BrandFailingGateway(EntityKind.PRODUCT, [
                {"id": "p1", "referenceId": "PRD-MAN-001", "name": "Rice", "brand": "X", "category": "Grocery"},
                {"id": "p2", "referenceId": "PRD-MAN-002", "name": "Dal", "brand": "X", "category": "Grocery"},
            ]),
        })
        resolver = RelatedItemResolver(gateways, gateway_timeout=1.0)
        related = await resolver.related_to(_origin(gateways, "PRD-MAN-001"))
        assert [r["reference_id"] for r in related] == ["PRD-MAN-002"]

    @pytest.mark.asyncio
    async def test_failing_collection_gives_empty_list(self, gateways):
        origin = _origin(gateways, "PRD-MAN-001")
        broken = make_gateways({EntityKind.PRODUCT: FailingGateway(EntityKind.PRODUCT)})
        resolver = RelatedItemResolver(broken, gateway_timeout=1.0)
        assert await resolver.related_to(origin) == []

    @pytest.mark.asyncio
    async def test_remote_reply_is_filtered_for_origin(self, gateways):
        remote = MagicMock()
        remote.related.return_value = [
            {"reference_id": "PRD-MAN-001", "name": "Basmati Rice"},
            {"reference_id": "PRD-XYZ-004", "name": "Remote Rice"},
        ]
        resolver = RelatedItemResolver(gateways, remote, remote_timeout=1.0, gateway_timeout=1.0)

        related = await resolver.related_to(_origin(gateways, "PRD-MAN-001"), limit=5)

        assert [r["reference_id"] for r in related] == ["PRD-XYZ-004"]
        remote.related.assert_called_once_with("PRD-MAN-001", 5)

    @pytest.mark.asyncio
    async def test_remote_failure_falls_back_to_local(self, gateways):
        remote = MagicMock()
        remote.related.side_effect = RemoteUnavailableError("503")
        resolver = RelatedItemResolver(gateways, remote, remote_timeout=1.0, gateway_timeout=1.0)
        related = await resolver.related_to(_origin(gateways, "PRD-MAN-001"))
        assert [r["reference_id"] for r in related] == ["PRD-MAN-002", "PRD-GAR-001"]


class TestServiceRelatedItems:
    @pytest.mark.asyncio
    async def test_invalid_reference_gives_empty_list(self, service):
        assert await service.related_items("not-an-id") == []

    @pytest.mark.asyncio
    async def test_unknown_reference_gives_empty_list(self, service):
        assert await service.related_items("PRD-MAN-500") == []

    @pytest.mark.asyncio
    async def test_lowercase_reference_is_accepted(self, service):
        related = await service.related_items("prd-man-001")
        assert [r["reference_id"] for r in related] == ["PRD-MAN-002", "PRD-GAR-001"]
