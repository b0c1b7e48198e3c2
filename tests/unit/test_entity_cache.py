"""Tests for EntityCache."""

import asyncio

import pytest

from blogdesk.services.entity_cache import EntityCache


class CountingLoader:
    def __init__(self, value: object) -> None:
        self.value = value
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        return self.value


class TestEntityCache:
    async def test_loads_once(self) -> None:
        cache = EntityCache()
        loader = CountingLoader(["a"])
        assert await cache.get_or_load("articles", loader) == ["a"]
        assert await cache.get_or_load("articles", loader) == ["a"]
        assert loader.calls == 1

    async def test_invalidate_forces_reload(self) -> None:
        cache = EntityCache()
        loader = CountingLoader(["a"])
        await cache.get_or_load("articles", loader)
        cache.invalidate("articles")
        assert cache.is_cached("articles") is False
        await cache.get_or_load("articles", loader)
        assert loader.calls == 2

    async def test_collections_are_independent(self) -> None:
        cache = EntityCache()
        await cache.get_or_load("articles", CountingLoader(["a"]))
        await cache.get_or_load("projects", CountingLoader(["p"]))
        cache.invalidate("projects")
        assert cache.peek("articles") == ["a"]
        assert cache.peek("projects") is None

    async def test_failed_load_is_not_cached(self) -> None:
        cache = EntityCache()

        async def failing() -> list[str]:
            raise OSError("down")

        with pytest.raises(OSError):
            await cache.get_or_load("articles", failing)
        assert cache.is_cached("articles") is False

    async def test_empty_result_is_cached(self) -> None:
        cache = EntityCache()
        loader = CountingLoader([])
        await cache.get_or_load("articles", loader)
        await cache.get_or_load("articles", loader)
        assert loader.calls == 1

    def test_invalidate_unknown_collection_is_noop(self) -> None:
        EntityCache().invalidate("nothing")

    async def test_clear(self) -> None:
        cache = EntityCache()
        await cache.get_or_load("articles", CountingLoader(["a"]))
        cache.clear()
        assert cache.is_cached("articles") is False

    async def test_invalidate_during_load_discards_stale_result(self) -> None:
        cache = EntityCache()
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_loader() -> list[str]:
            started.set()
            await release.wait()
            return ["old"]

        pending = asyncio.create_task(cache.get_or_load("articles", slow_loader))
        await started.wait()
        cache.invalidate("articles")
        release.set()

        assert await pending == ["old"]
        assert cache.is_cached("articles") is False
        assert await cache.get_or_load("articles", CountingLoader(["new"])) == ["new"]
