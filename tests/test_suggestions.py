"""
Tests for type-ahead suggestions.
"""
from unittest.mock import MagicMock

import pytest

from refsearch_server.core.error import RemoteUnavailableError
from refsearch_server.search.aggregator import SearchAggregator
from refsearch_server.search.suggestions import (
    LOCATION_SUGGESTIONS,
    SuggestionProvider,
    local_suggestions,
    location_suggestions,
)


def _texts(suggestions):
    return [s["text"] for s in suggestions]


class TestLocalSuggestions:
    def test_prefix_match(self):
        assert _texts(local_suggestions("piz"))[0] == "pizza"

    def test_hindi_catalog_entry(self):
        assert _texts(local_suggestions("rice")) == ["rice चावल"]

    def test_starts_with_first_then_shorter(self):
        assert _texts(local_suggestions("office")) == [
            "office",
            "post office",
            "private office",
            "government office",
        ]

    def test_any_word_of_term_matches(self):
        assert "pizza" in _texts(local_suggestions("cheap pizza"))

    def test_category_match(self):
        texts = _texts(local_suggestions("health"))
        assert {"medicine दवा", "doctor", "pharmacy", "health"} <= set(texts)

    def test_capped_at_eight(self):
        assert len(local_suggestions("e")) == 8

    def test_empty_term(self):
        assert local_suggestions("") == []
        assert local_suggestions("   ") == []

    def test_no_match(self):
        assert local_suggestions("zzzz") == []

    def test_catalog_entries_are_copies(self):
        first = local_suggestions("pizza")[0]
        first["text"] = "changed"
        assert local_suggestions("pizza")[0]["text"] == "pizza"


class TestLocationSuggestions:
    def test_with_location(self):
        assert location_suggestions({"lat": 24.0, "lng": 75.0}) == list(LOCATION_SUGGESTIONS)

    def test_without_location(self):
        assert location_suggestions(None) == []


def _provider(gateways, remote=None):
    aggregator = SearchAggregator(gateways, remote, remote_timeout=1.0, gateway_timeout=1.0)
    return SuggestionProvider(aggregator, remote, remote_timeout=1.0)


class TestSuggestionProvider:
    @pytest.mark.asyncio
    async def test_reference_id_resolves_to_single_suggestion(self, gateways):
        remote = MagicMock()
        suggestions = await _provider(gateways, remote).suggest("prd-man-001")
        assert suggestions == [{
            "text": "PRD-MAN-001 - Basmati Rice",
            "type": "product",
            "icon": "🔍",
            "reference_id": "PRD-MAN-001",
            "category": "Grocery",
        }]
        remote.suggestions.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_reference_id_uses_catalog(self, gateways):
        assert await _provider(gateways).suggest("PRD-MAN-404") == []

    @pytest.mark.asyncio
    async def test_remote_suggestions_preferred(self, gateways):
        remote = MagicMock()
        remote.suggestions.return_value = [{"text": "pizza hut", "type": "shop"}]
        assert _texts(await _provider(gateways, remote).suggest("piz")) == ["pizza hut"]

    @pytest.mark.asyncio
    async def test_remote_failure_uses_catalog(self, gateways):
        remote = MagicMock()
        remote.suggestions.side_effect = RemoteUnavailableError("timeout")
        assert _texts(await _provider(gateways, remote).suggest("piz"))[0] == "pizza"

    @pytest.mark.asyncio
    async def test_remote_reply_is_capped(self, gateways):
        remote = MagicMock()
        remote.suggestions.return_value = [{"text": f"item {i}", "type": "item"} for i in range(20)]
        assert len(await _provider(gateways, remote).suggest("item")) == 8

    @pytest.mark.asyncio
    async def test_empty_term(self, gateways):
        remote = MagicMock()
        assert await _provider(gateways, remote).suggest("  ") == []
        remote.suggestions.assert_not_called()
