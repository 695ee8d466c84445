"""Tests for the warmup marker store."""

import pytest

from app.repositories.common.marker import version_key


class TestVersionKey:
    def test_numeric_order(self):
        assert version_key("2") < version_key("10")

    def test_dotted(self):
        assert version_key("1.2") < version_key("1.10")

    def test_timestamps(self):
        assert version_key("2025-08-17T15:30:00") < version_key("2025-09-01T00:00:00")


class TestMarkerRepository:
    @pytest.mark.asyncio
    async def test_unset(self, markers):
        assert await markers.get("warmup") is None
        assert await markers.is_current("warmup", "1") is False

    @pytest.mark.asyncio
    async def test_advance(self, markers):
        assert await markers.advance("warmup", "1") is True
        assert await markers.get("warmup") == "1"
        assert await markers.is_current("warmup", "1") is True

    @pytest.mark.asyncio
    async def test_same_version_is_noop(self, markers):
        await markers.advance("warmup", "1")
        assert await markers.advance("warmup", "1") is False

    @pytest.mark.asyncio
    async def test_bump(self, markers):
        await markers.advance("warmup", "1")
        assert await markers.is_current("warmup", "2") is False
        assert await markers.advance("warmup", "2") is True
        assert await markers.get("warmup") == "2"

    @pytest.mark.asyncio
    async def test_never_regresses(self, markers):
        await markers.advance("warmup", "3")
        assert await markers.advance("warmup", "2") is False
        assert await markers.get("warmup") == "3"
        assert await markers.is_current("warmup", "2") is True
