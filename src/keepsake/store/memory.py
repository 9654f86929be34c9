"""MemoryFileStore: In-memory resource storage for tests and ephemeral use."""

from collections.abc import MutableMapping
from typing import Literal

from cachetools import LFUCache, LRUCache

from keepsake.store.base import BaseFileStore

CachePolicy = Literal["unbounded", "lru", "lfu"]


def _create_cache(
    max_size: int,
    cache: Literal["lru", "lfu"],
) -> MutableMapping[str, bytes]:
    """Create a cachetools cache."""
    if cache == "lfu":
        return LFUCache(maxsize=max_size)
    return LRUCache(maxsize=max_size)


class MemoryFileStore(BaseFileStore):
    """In-memory store mapping paths to content.

    Nothing touches the filesystem and content is lost with the instance.

    Default is cache="unbounded", which keeps every saved file. Use
    cache="lru" or cache="lfu" with a max_size to bound the number of files
    held. Bounded stores evict least recently or least frequently used files
    without notice, so a file that save() wrote may later be missing; only
    use them where the data can be rebuilt.
    """

    def __init__(
        self,
        cache: CachePolicy | MutableMapping[str, bytes] = "unbounded",
        max_size: int | None = None,
    ) -> None:
        """Initialize memory store.

        Args:
            cache: "unbounded" (plain dict), "lru", "lfu", or a MutableMapping
                instance (e.g. cachetools.TTLCache). Default "unbounded".
            max_size: Maximum number of files. Default 1000 when cache is
                "lru" or "lfu". Ignored for "unbounded". Must be None for
                cache instance.

        Raises:
            ValueError: Invalid combination of cache and max_size.
        """
        super().__init__()

        if isinstance(cache, MutableMapping):
            if max_size is not None:
                raise ValueError(
                    "max_size must not be set when cache is a cache instance"
                )
            self._files: MutableMapping[str, bytes] = cache
            return

        if cache == "unbounded":
            self._files = {}
            return

        if cache in ("lru", "lfu"):
            size = max_size if max_size is not None else 1000
            if size < 1:
                raise ValueError("max_size must be at least 1")
            self._files = _create_cache(size, cache)
            return

        raise ValueError(
            f"cache must be 'unbounded', 'lru', 'lfu', or a MutableMapping; got {cache!r}"
        )

    def exists(self, path: str) -> bool:
        """Check if content is stored at path."""
        self.stats.checks += 1
        return path in self._files

    def load(self, path: str) -> bytes:
        """Return stored content.

        Raises:
            KeyError: If nothing is stored at path.
        """
        if path not in self._files:
            raise KeyError(f"Resource file '{path}' not found")
        self.stats.reads += 1
        return self._files[path]

    def save(self, path: str, content: bytes) -> None:
        """Store content at path."""
        self._files[path] = bytes(content)
        self.stats.writes += 1

    def paths(self) -> list[str]:
        """Return the stored paths in sorted order."""
        return sorted(self._files)

    def clear(self) -> None:
        """Clear all files (mainly for testing)."""
        self._files.clear()
        self.reset_stats()
