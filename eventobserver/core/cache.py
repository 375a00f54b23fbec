"""
Recency cache of emitted event ids.

An insertion-ordered set built on OrderedDict. EventObserver consults it
before dispatching: an id that is already present belongs to an event that
has been emitted before, so the emit is dropped. This is what stops events
from bouncing forever between bound observers.

Features:
- O(1) contains/insert/evict
- Oldest-inserted ids are evicted first
- Optional bound (limit <= 0 means unlimited)
- Hit/miss/eviction counters
"""

from collections import OrderedDict
from collections.abc import Hashable
import logging
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


class IdCache(Generic[K]):
    """
    Bounded, insertion-ordered set of event ids.

    Example:
        >>> cache = IdCache[str](limit=2)
        >>> cache.insert("a")
        >>> cache.insert("b")
        >>> cache.insert("c")
        >>> "a" in cache
        False
        >>> len(cache)
        2
    """

    def __init__(self, limit: int = 0):
        """
        Initialize the cache.

        Args:
            limit: Maximum number of ids kept. Values <= 0 remove the bound.
        """
        self._ids: OrderedDict[K, None] = OrderedDict()
        self._limit = max(limit, 0)

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def contains(self, key: K) -> bool:
        """
        Check whether an id has been seen, updating hit/miss counters.

        Args:
            key: Event id

        Returns:
            True if the id is cached
        """
        if key in self._ids:
            self._hits += 1
            return True
        self._misses += 1
        return False

    def insert(self, key: K) -> None:
        """
        Add an id as the most recent entry.

        Re-inserting a cached id moves it to the end. If the cache is bounded
        and now exceeds its limit, the oldest ids are evicted.

        Args:
            key: Event id
        """
        if key in self._ids:
            self._ids.move_to_end(key)
            return

        self._ids[key] = None
        self._shrink_to(self._limit)

    def set_limit(self, limit: int) -> None:
        """
        Change the bound.

        Shrinking below the current size evicts the oldest ids until the size
        matches the new limit. Values <= 0 remove the bound.

        Args:
            limit: New maximum number of ids
        """
        self._limit = max(limit, 0)
        self._shrink_to(self._limit)

    def clear(self) -> None:
        """Remove every id and reset statistics."""
        self._ids.clear()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def size(self) -> int:
        """Number of ids currently cached."""
        return len(self._ids)

    def _shrink_to(self, limit: int) -> None:
        if limit <= 0:
            return

        while len(self._ids) > limit:
            key, _ = self._ids.popitem(last=False)
            self._evictions += 1
            logger.debug(f"Evicted event id {key} from id cache")

    def __len__(self) -> int:
        """Return number of ids in cache."""
        return len(self._ids)

    def __contains__(self, key: K) -> bool:
        """Membership test that doesn't touch the counters."""
        return key in self._ids

    @property
    def limit(self) -> int:
        """Maximum cache size, 0 when unlimited."""
        return self._limit

    @property
    def stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            Dict with size, limit, hits, misses, evictions
        """
        return {
            "size": len(self._ids),
            "limit": self._limit,
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
        }
