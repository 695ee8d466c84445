"""Tests for the read-through vocabulary cache service."""

import asyncio

import httpx
import pytest

from app.errors import StorageError, UnknownDatasetError
from vocab_client import VocabularyClient


def counting_fetch(value="fresh", delay=0.01, error: Exception | None = None):
    calls = []

    async def fetch():
        calls.append(1)
        await asyncio.sleep(delay)
        if error is not None:
            raise error
        return value

    return fetch, calls


class TestCoalescing:
    @pytest.mark.asyncio
    async def test_concurrent_reads_share_one_fetch(self, service):
        fetch, calls = counting_fetch(["shared"])
        results = await asyncio.gather(*(service.read_through("verbs", fetch) for _ in range(10)))
        assert len(calls) == 1
        assert all(r == ["shared"] for r in results)

    @pytest.mark.asyncio
    async def test_registry_released_after_success(self, service):
        fetch, _ = counting_fetch()
        await service.read_through("verbs", fetch)
        assert service.pending_keys == frozenset()

    @pytest.mark.asyncio
    async def test_error_reaches_every_awaiter_and_releases(self, service):
        fetch, calls = counting_fetch(error=httpx.ConnectError("down"))
        results = await asyncio.gather(
            *(service.read_through("verbs", fetch) for _ in range(3)),
            return_exceptions=True,
        )
        assert len(calls) == 1
        assert all(isinstance(r, httpx.ConnectError) for r in results)
        assert service.pending_keys == frozenset()

        retry, retry_calls = counting_fetch("ok")
        assert await service.read_through("verbs", retry) == "ok"
        assert len(retry_calls) == 1

    @pytest.mark.asyncio
    async def test_different_keys_fetch_independently(self, service):
        fetch, calls = counting_fetch()
        await asyncio.gather(service.read_through("a", fetch), service.read_through("b", fetch))
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_abandoning_caller_does_not_cancel_others(self, service):
        fetch, calls = counting_fetch("v", delay=0.05)
        first = asyncio.ensure_future(service.read_through("k", fetch))
        second = asyncio.ensure_future(service.read_through("k", fetch))
        await asyncio.sleep(0.01)
        first.cancel()
        assert await second == "v"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_unforced_joins_forced_refresh(self, service):
        fetch, calls = counting_fetch("new", delay=0.05)
        forced = asyncio.ensure_future(service.read_through("k", fetch, force_refresh=True))
        await asyncio.sleep(0)
        unforced = await service.read_through("k", fetch)
        assert await forced == unforced == "new"
        assert len(calls) == 1


class TestCaching:
    @pytest.mark.asyncio
    async def test_hit_skips_network(self, service):
        fetch, calls = counting_fetch("v")
        await service.read_through("k", fetch)
        assert await service.read_through("k", fetch) == "v"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_expired_entry_refetched(self, service, clock):
        fetch, calls = counting_fetch("v")
        await service.read_through("k", fetch, ttl=10)
        clock.advance(10)
        await service.read_through("k", fetch, ttl=10)
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_force_refresh_always_fetches(self, service, store):
        await store.set("k", "cached", ttl=60)
        fetch, calls = counting_fetch("fresh")
        assert await service.read_through("k", fetch, force_refresh=True) == "fresh"
        assert len(calls) == 1
        assert await store.get("k") == "fresh"

    @pytest.mark.asyncio
    async def test_storage_failure_still_returns_data(self, service, store, monkeypatch):
        async def broken_set(*_args, **_kwargs):
            raise StorageError("disk full")

        monkeypatch.setattr(store, "set", broken_set)
        fetch, _ = counting_fetch("fresh")
        assert await service.read_through("k", fetch) == "fresh"

    @pytest.mark.asyncio
    async def test_non_positive_ttl_rejected_before_fetch(self, service):
        fetch, calls = counting_fetch("v")
        with pytest.raises(ValueError):
            await service.read_through("k", fetch, ttl=0)
        assert calls == []
        assert service.pending_keys == frozenset()


class TestStaleFallback:
    @pytest.mark.asyncio
    async def test_fresh_entry_returned_on_forced_failure(self, service, store):
        await store.set("k", "old", ttl=60)
        fetch, _ = counting_fetch(error=httpx.ConnectError("offline"))
        assert await service.read_through("k", fetch, force_refresh=True) == "old"

    @pytest.mark.asyncio
    async def test_expired_entry_returned_on_failure(self, service, store, clock):
        await store.set("k", "old", ttl=10)
        clock.advance(60)
        fetch, calls = counting_fetch(error=httpx.ConnectError("offline"))
        assert await service.read_through("k", fetch) == "old"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_http_status_error_falls_back(self, service, store):
        await store.set("k", "old", ttl=60)
        request = httpx.Request("GET", "https://quickfrench.app/api/k")
        error = httpx.HTTPStatusError("500", request=request, response=httpx.Response(500, request=request))
        fetch, _ = counting_fetch(error=error)
        assert await service.read_through("k", fetch, force_refresh=True) == "old"

    @pytest.mark.asyncio
    async def test_undecodable_body_falls_back(self, service, store):
        await store.set("verbs", [{"word": "aller", "meaning": "to go"}], ttl=60)
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b'[{"word": "\x80"}]'))
        async with VocabularyClient(base_url="https://api.test", transport=transport) as client:
            rows = await service.read_through("verbs", lambda: client.table("verbs"), force_refresh=True)
        assert rows == [{"word": "aller", "meaning": "to go"}]

    @pytest.mark.asyncio
    async def test_no_cache_propagates(self, service):
        fetch, _ = counting_fetch(error=httpx.ConnectError("offline"))
        with pytest.raises(httpx.ConnectError):
            await service.read_through("k", fetch)

    @pytest.mark.asyncio
    async def test_programming_errors_not_swallowed(self, service, store):
        await store.set("k", "old", ttl=60)
        fetch, _ = counting_fetch(error=KeyError("bug"))
        with pytest.raises(KeyError):
            await service.read_through("k", fetch, force_refresh=True)


class TestDatasets:
    @pytest.mark.asyncio
    async def test_flat_dataset(self, service, client):
        rows = await service.verbs()
        assert rows == [{"word": "verbs-r1", "meaning": "m"}]
        assert client.calls == ["verbs"]

    @pytest.mark.asyncio
    async def test_category_key(self, service, store, client):
        await service.food("Fruits")
        assert client.calls == ["food/Fruits"]
        assert await store.list_keys() == ["food-Fruits"]

    @pytest.mark.asyncio
    async def test_category_names(self, service):
        assert await service.category_names("body") == ["Fruits", "Drinks"]

    @pytest.mark.asyncio
    async def test_unknown_dataset(self, service):
        with pytest.raises(UnknownDatasetError):
            await service.dataset("klingon")

    @pytest.mark.asyncio
    async def test_flat_dataset_has_no_categories(self, service):
        with pytest.raises(UnknownDatasetError):
            await service.categories("verbs")

    @pytest.mark.asyncio
    async def test_preload_all(self, service, store, client):
        loaded = await service.preload_all()
        # 20 tables + 9 category lists + 9 * 2 categories
        assert loaded == 47
        assert len(client.calls) == 47
        assert "food-Drinks" in await store.list_keys("food-")

        await service.preload_all()
        assert len(client.calls) == 47

    @pytest.mark.asyncio
    async def test_preload_force_refresh(self, service, client):
        await service.preload_all()
        client.revision = 2
        await service.preload_all(force_refresh=True)
        assert len(client.calls) == 94
        assert await service.verbs() == [{"word": "verbs-r2", "meaning": "m"}]

    @pytest.mark.asyncio
    async def test_preload_offline_without_cache_fails(self, service, client):
        client.offline = True
        with pytest.raises(httpx.ConnectError):
            await service.preload_all()


class TestEviction:
    @pytest.mark.asyncio
    async def test_clear_dataset_isolated(self, service, store):
        await service.verbs()
        await service.adjectives()
        await service.clear_dataset("verbs")
        assert await store.list_keys() == ["adjectives"]

    @pytest.mark.asyncio
    async def test_clear_parameterized_one(self, service, store):
        await service.food("Fruits")
        await service.food("Drinks")
        assert await service.clear_parameterized("food", "Fruits") == 1
        assert await store.list_keys() == ["food-Drinks"]

    @pytest.mark.asyncio
    async def test_clear_parameterized_family_keeps_category_list(self, service, store):
        await service.categories("food")
        await service.food("Fruits")
        await service.food("Drinks")
        await service.family("Fruits")
        assert await service.clear_parameterized("food") == 2
        assert await store.list_keys() == ["family-Fruits", "food-categories"]

    @pytest.mark.asyncio
    async def test_clear_topic(self, service, store):
        await service.food()
        await service.categories("food")
        await service.food("Fruits")
        await service.verbs()
        await service.clear_topic("food")
        assert await store.list_keys() == ["verbs"]

    @pytest.mark.asyncio
    async def test_clear_all(self, service, store):
        await service.verbs()
        await service.clear_all()
        assert await store.list_keys() == []
        assert service.pending_keys == frozenset()

    @pytest.mark.asyncio
    async def test_clean_expired_and_info(self, service, clock):
        await service.verbs()
        clock.advance(61)
        assert await service.clean_expired() == 1
        info = await service.cache_info()
        assert info.count == 0
