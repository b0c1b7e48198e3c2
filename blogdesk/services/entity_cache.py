"""In-process cache of whole entity collections."""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")


class EntityCache:
    """Collection name -> loaded value, with no TTL.

    A collection stays cached until :meth:`invalidate` is called for it, which
    the Persistence Gateway does after every write to that collection. A
    loader that raises leaves the collection uncached, and so does a load
    that was overtaken by an invalidation while it ran.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}
        self._versions: dict[str, int] = {}

    def peek(self, collection: str) -> Any | None:
        return self._entries.get(collection)

    def is_cached(self, collection: str) -> bool:
        return collection in self._entries

    async def get_or_load(
        self, collection: str, loader: Callable[[], Awaitable[T]]
    ) -> T:
        if collection in self._entries:
            return self._entries[collection]  # type: ignore[no-any-return]
        version = self._versions.get(collection, 0)
        value = await loader()
        if self._versions.get(collection, 0) == version:
            self._entries[collection] = value
        return value

    def invalidate(self, collection: str) -> None:
        self._versions[collection] = self._versions.get(collection, 0) + 1
        self._entries.pop(collection, None)

    def clear(self) -> None:
        for collection in set(self._versions) | set(self._entries):
            self._versions[collection] = self._versions.get(collection, 0) + 1
        self._entries.clear()
