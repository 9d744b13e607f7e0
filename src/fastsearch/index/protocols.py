"""
Structural contracts for the two kinds of vocabulary store.

Architecture:
    ::

        OrderedIndex (Protocol)            KeyStore (Protocol)
        ├── InMemoryOrderedIndex           ├── InMemoryKeyStore
        └── RedisOrderedIndex              ├── SQLiteKeyStore
                                           └── CloudflareKVStore

        rank(query) → int | None           list_keys(prefix, limit) → list[str]
        range_by_rank(start, count)
        ping() / close() / load(entries)   ping() / close() / load(entries)

Stores are read-only while serving.  ``load()`` replaces the whole entry set
in one swap so that readers never observe a half-written sort order.

Tags:
    protocol, ordered-index, key-store, fast-search, contracts

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class OrderedIndex(Protocol):
    """A globally sorted, rank-addressable collection of entries."""

    name: str

    def rank(self, query: str) -> int | None:
        """Lower bound of *query*: position of the first entry ``>= query``.

        Returns ``None`` when no entry is ``>= query`` (including an empty
        index).  ``0`` is a valid rank.
        """
        ...

    def range_by_rank(self, start: int, count: int) -> list[str]:
        """Entries at positions ``[start, start + count)``, clamped to the end."""
        ...

    def load(self, entries: Sequence[str]) -> int:
        """Replace all entries; return how many were stored."""
        ...

    def ping(self) -> bool: ...

    def close(self) -> None: ...


@runtime_checkable
class KeyStore(Protocol):
    """A key-enumeration store that lists keys in lexicographic order."""

    name: str

    def list_keys(self, prefix: str, limit: int) -> list[str]:
        """Up to *limit* keys, in order, starting at the first key ``>= prefix``.

        Implementations may return keys past the prefix boundary; callers
        must stop at the first key that does not start with *prefix*.
        """
        ...

    def load(self, entries: Sequence[str]) -> int:
        """Replace all keys; return how many were stored."""
        ...

    def ping(self) -> bool: ...

    def close(self) -> None: ...


__all__ = ["OrderedIndex", "KeyStore"]
