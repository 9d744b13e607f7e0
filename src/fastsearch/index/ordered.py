"""
Ordered-index stores: rank-of-key and range-by-rank.

Provides an in-memory implementation for development and tests and a
Redis sorted-set implementation for production.

Manifesto:
    - **Tier-aware:** InMemoryOrderedIndex for dev, RedisOrderedIndex for production
    - **Immutable while serving:** A reload swaps the whole handle
    - **One round trip:** Redis rank is a pipelined ZLEXCOUNT + ZCARD

Architecture:
    ::

        OrderedIndex (Protocol)
        ├── InMemoryOrderedIndex : sorted tuple + bisect
        └── RedisOrderedIndex    : sorted set, every member scored 0

        All members share score 0, so Redis orders them lexicographically
        by raw bytes and ZLEXCOUNT gives the lower-bound rank of any string,
        member or not.

Performance:
    - InMemoryOrderedIndex: O(log n) rank, O(W) window
    - RedisOrderedIndex: two round trips per lookup (rank, window)

Tags:
    ordered-index, redis, sorted-set, bisect, fast-search

Doc-Types:
    - API Reference
    - Infrastructure Guide
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

import redis
from redis import exceptions as redis_errors

from fastsearch.core.errors import (
    BackendThrottledError,
    BackendTimeoutError,
    BackendUnavailableError,
)
from fastsearch.core.logging import get_logger

logger = get_logger(__name__)

# ------------------------------------------------------------------ #
# In-Memory Index (Tier 1)
# ------------------------------------------------------------------ #


class InMemoryOrderedIndex:
    """Sorted tuple with bisect-based rank.

    Thread-safe for readers: ``load()`` builds a new tuple and rebinds it,
    so a concurrent lookup sees either the old or the new index, never a mix.
    """

    name = "memory-ordered"

    def __init__(self, entries: Sequence[str] = ()):
        self._entries: tuple[str, ...] = tuple(sorted(set(entries)))

    def rank(self, query: str) -> int | None:
        entries = self._entries
        position = bisect_left(entries, query)
        if position >= len(entries):
            return None
        return position

    def range_by_rank(self, start: int, count: int) -> list[str]:
        if start < 0 or count <= 0:
            return []
        return list(self._entries[start : start + count])

    def load(self, entries: Sequence[str]) -> int:
        self._entries = tuple(sorted(set(entries)))
        return len(self._entries)

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._entries)


# ------------------------------------------------------------------ #
# Redis Index (Tier 2/3)
# ------------------------------------------------------------------ #


@contextmanager
def _translate_redis_errors(operation: str) -> Iterator[None]:
    """Map redis-py exceptions onto the transient-failure hierarchy."""
    try:
        yield
    except redis_errors.TimeoutError as exc:
        raise BackendTimeoutError(f"Redis {operation} timed out", cause=exc).with_context(
            backend=RedisOrderedIndex.name, operation=operation
        ) from exc
    except redis_errors.ConnectionError as exc:
        raise BackendUnavailableError(f"Redis {operation} failed: {exc}", cause=exc).with_context(
            backend=RedisOrderedIndex.name, operation=operation
        ) from exc
    except redis_errors.ResponseError as exc:
        # Upstash and other hosted Redis reply with an error on quota breaches
        if "limit" in str(exc).lower():
            raise BackendThrottledError(f"Redis {operation} throttled: {exc}", cause=exc).with_context(
                backend=RedisOrderedIndex.name, operation=operation
            ) from exc
        raise BackendUnavailableError(f"Redis {operation} failed: {exc}", cause=exc).with_context(
            backend=RedisOrderedIndex.name, operation=operation
        ) from exc
    except redis_errors.RedisError as exc:
        raise BackendUnavailableError(f"Redis {operation} failed: {exc}", cause=exc).with_context(
            backend=RedisOrderedIndex.name, operation=operation
        ) from exc


class RedisOrderedIndex:
    """Redis sorted set used as a lexicographic index.

    The client is built once from a connection pool and shared by every
    request; each command checks a connection out of the pool and returns
    it when the command completes or fails.

    Example:
        index = RedisOrderedIndex.from_url("redis://localhost:6379/0", key="terms")
        start = index.rank("AP")
        window = index.range_by_rank(start, 100)
    """

    name = "redis"

    LOAD_CHUNK = 5_000

    def __init__(self, client: redis.Redis, *, key: str = "terms"):
        self._client = client
        self._key = key

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        key: str = "terms",
        password: str | None = None,
        timeout_s: float = 2.0,
        max_connections: int = 20,
    ) -> RedisOrderedIndex:
        """Build an index over a pooled client with bounded socket deadlines."""
        pool = redis.ConnectionPool.from_url(
            url,
            password=password,
            socket_timeout=timeout_s,
            socket_connect_timeout=timeout_s,
            max_connections=max_connections,
            decode_responses=True,
        )
        return cls(redis.Redis(connection_pool=pool), key=key)

    @property
    def key(self) -> str:
        return self._key

    def rank(self, query: str) -> int | None:
        with _translate_redis_errors("rank"):
            pipe = self._client.pipeline(transaction=False)
            pipe.zlexcount(self._key, "-", f"({query}")
            pipe.zcard(self._key)
            below, total = pipe.execute()
        if below >= total:
            return None
        return int(below)

    def range_by_rank(self, start: int, count: int) -> list[str]:
        if start < 0 or count <= 0:
            return []
        # ZRANGE stop is inclusive and clamps to the end of the set
        with _translate_redis_errors("range_by_rank"):
            return list(self._client.zrange(self._key, start, start + count - 1))

    def load(self, entries: Sequence[str]) -> int:
        """Write *entries* to a staging key, then RENAME it over the live key."""
        entries = sorted(set(entries))
        staging = f"{self._key}:staging"
        with _translate_redis_errors("load"):
            self._client.delete(staging)
            for offset in range(0, len(entries), self.LOAD_CHUNK):
                chunk = entries[offset : offset + self.LOAD_CHUNK]
                self._client.zadd(staging, {entry: 0 for entry in chunk})
            if entries:
                self._client.rename(staging, self._key)
            else:
                self._client.delete(self._key)
        logger.info("ordered_index_loaded", backend=self.name, key=self._key, count=len(entries))
        return len(entries)

    def ping(self) -> bool:
        with _translate_redis_errors("ping"):
            return bool(self._client.ping())

    def close(self) -> None:
        self._client.close()
        self._client.connection_pool.disconnect()


__all__ = ["InMemoryOrderedIndex", "RedisOrderedIndex"]
