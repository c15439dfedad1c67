"""
Tests for the two-tier remote/local strategy.
"""
import asyncio

import pytest

from refsearch_server.search.fallback import TIER_LOCAL, TIER_NONE, TIER_REMOTE, attempt, run_with_fallback


def _returning(value):
    async def call():
        return value
    return call


def _raising(error):
    async def call():
        raise error
    return call


def _sleeping(seconds):
    async def call():
        await asyncio.sleep(seconds)
        return ["late"]
    return call


class TestAttempt:
    @pytest.mark.asyncio
    async def test_success(self):
        assert await attempt(_returning([1]), timeout=1.0, label="t") == ([1], None)

    @pytest.mark.asyncio
    async def test_failure_is_returned(self):
        value, error = await attempt(_raising(RuntimeError("boom")), timeout=1.0, label="t")
        assert value is None
        assert isinstance(error, RuntimeError)

    @pytest.mark.asyncio
    async def test_timeout_is_returned(self):
        value, error = await attempt(_sleeping(1.0), timeout=0.01, label="t")
        assert value is None
        assert isinstance(error, asyncio.TimeoutError)


class TestRunWithFallback:
    @pytest.mark.asyncio
    async def test_remote_success(self):
        outcome = await run_with_fallback(
            _returning(["remote"]), _returning(["local"]), remote_timeout=1.0, local_timeout=1.0, label="t"
        )
        assert outcome.value == ["remote"]
        assert outcome.tier == TIER_REMOTE
        assert outcome.errors == {}

    @pytest.mark.asyncio
    async def test_empty_remote_reply_is_final(self):
        outcome = await run_with_fallback(
            _returning([]), _returning(["local"]), remote_timeout=1.0, local_timeout=1.0, label="t"
        )
        assert outcome.value == []
        assert outcome.tier == TIER_REMOTE

    @pytest.mark.asyncio
    async def test_remote_failure_uses_local(self):
        outcome = await run_with_fallback(
            _raising(RuntimeError("503")), _returning(["local"]), remote_timeout=1.0, local_timeout=1.0, label="t"
        )
        assert outcome.value == ["local"]
        assert outcome.tier == TIER_LOCAL
        assert outcome.errors == {"remote": "503"}

    @pytest.mark.asyncio
    async def test_remote_timeout_uses_local(self):
        outcome = await run_with_fallback(
            _sleeping(1.0), _returning(["local"]), remote_timeout=0.01, local_timeout=1.0, label="t"
        )
        assert outcome.tier == TIER_LOCAL
        assert outcome.errors["remote"] == "timed out after 0.01s"

    @pytest.mark.asyncio
    async def test_no_remote_runs_local_directly(self):
        outcome = await run_with_fallback(None, _returning(["local"]), remote_timeout=1.0, local_timeout=1.0, label="t")
        assert outcome.tier == TIER_LOCAL
        assert outcome.errors == {}

    @pytest.mark.asyncio
    async def test_both_tiers_fail(self):
        outcome = await run_with_fallback(
            _raising(RuntimeError("remote down")),
            _raising(RuntimeError("local down")),
            remote_timeout=1.0,
            local_timeout=1.0,
            label="t",
            default_factory=list,
        )
        assert outcome.value == []
        assert outcome.tier == TIER_NONE
        assert set(outcome.errors) == {"remote", "local"}
