"""
Lookup engine: prefix autocomplete over a sorted window.

One engine serves both kinds of store.  A backend adapter turns the
normalized query into a window of consecutive sorted entries; the engine
then scans that window the same way regardless of where it came from.

Manifesto:
    The scan-filter-unmark algorithm is the whole product.  Keeping it in a
    single place is what makes the ordered-index and prefix-scan paths
    return identical results for the same vocabulary.

Architecture:
    ::

        lookup(raw_query)
          │  normalize_query()          → InvalidQueryError on blank input
          ▼
        WindowBackend.fetch_window(query, W)
          ├── OrderedIndexBackend : rank (lower bound) + range_by_rank
          └── PrefixScanBackend   : list_keys(prefix, limit)
          ▼
        scan_window(entries, query, sentinel)
          │  stop at first entry not starting with query
          │  emit entries ending in sentinel, unmarked
          │  skip prefix-only nodes
          ▼
        LookupResult(results, elapsed_ms, backend)

Examples:
    >>> from fastsearch.index.ordered import InMemoryOrderedIndex
    >>> engine = LookupEngine(OrderedIndexBackend(
    ...     InMemoryOrderedIndex(["APP*", "APPLE*", "APPLY*", "BANANA*"])))
    >>> engine.lookup("ap").results
    ['APP', 'APPLE', 'APPLY']

Guardrails:
    ❌ DON'T: Retry inside the engine
    ✅ DO: Let TransientError reach the caller; no partial result is returned

Tags:
    lookup, autocomplete, prefix-search, engine, fast-search

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from fastsearch.core.errors import FastSearchError
from fastsearch.core.logging import get_logger
from fastsearch.core.terms import DEFAULT_SENTINEL, normalize_query
from fastsearch.index.protocols import KeyStore, OrderedIndex

logger = get_logger(__name__)

DEFAULT_WINDOW = 100


@dataclass(frozen=True)
class LookupResult:
    """Outcome of one lookup.

    Attributes:
        results: Complete terms sharing the query as a prefix, sentinel stripped
        elapsed_ms: Wall-clock time spent, in milliseconds
        backend: Name of the store that served the window
        scanned: Number of window entries inspected before the scan stopped
    """

    results: list[str] = field(default_factory=list)
    elapsed_ms: float = 0.0
    backend: str = ""
    scanned: int = 0


def scan_window(entries: Iterable[str], query: str, sentinel: str = DEFAULT_SENTINEL) -> tuple[list[str], int]:
    """Collect complete terms from a sorted window.

    Returns the unmarked terms and the count of entries inspected.  The
    window is sorted, so the first entry that does not start with *query*
    ends the scan; nothing after it can match.
    """
    results: list[str] = []
    scanned = 0
    for entry in entries:
        scanned += 1
        if not entry.startswith(query):
            break
        if entry.endswith(sentinel):
            results.append(entry[: -len(sentinel)])
    return results, scanned


# ------------------------------------------------------------------ #
# Backend adapters
# ------------------------------------------------------------------ #


class WindowBackend(Protocol):
    """Produces the sorted window a lookup scans."""

    name: str

    def fetch_window(self, query: str, size: int) -> list[str]: ...


class OrderedIndexBackend:
    """Adapter: rank-of-query then range-by-rank on an :class:`OrderedIndex`."""

    def __init__(self, index: OrderedIndex):
        self.index = index
        self.name = index.name

    def fetch_window(self, query: str, size: int) -> list[str]:
        rank = self.index.rank(query)
        if rank is None:
            return []
        return self.index.range_by_rank(rank, size)


class PrefixScanBackend:
    """Adapter: bounded prefix listing on a :class:`KeyStore`."""

    def __init__(self, store: KeyStore):
        self.store = store
        self.name = store.name

    def fetch_window(self, query: str, size: int) -> list[str]:
        return self.store.list_keys(query, size)


# ------------------------------------------------------------------ #
# Engine
# ------------------------------------------------------------------ #


class LookupEngine:
    """Prefix lookup over any :class:`WindowBackend`.

    Stateless apart from its configuration; one instance is shared by all
    concurrent requests.
    """

    def __init__(
        self,
        backend: WindowBackend,
        *,
        window_size: int = DEFAULT_WINDOW,
        sentinel: str = DEFAULT_SENTINEL,
    ):
        if window_size < 1:
            raise ValueError("window_size must be >= 1")
        self.backend = backend
        self.window_size = window_size
        self.sentinel = sentinel

    @property
    def backend_name(self) -> str:
        return self.backend.name

    def lookup(self, raw_query: str | None) -> LookupResult:
        """Return the complete terms that start with *raw_query*.

        Raises:
            InvalidQueryError: Blank or missing query (before any backend call).
            TransientError: The backend failed or timed out.
        """
        start = time.perf_counter()
        query = normalize_query(raw_query)

        try:
            window = self.backend.fetch_window(query, self.window_size)
        except FastSearchError as exc:
            exc.with_context(query=query)
            logger.warning("lookup_failed", **exc.to_dict())
            raise

        results, scanned = scan_window(window, query, self.sentinel)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.debug(
            "lookup_completed",
            backend=self.backend_name,
            query_length=len(query),
            window=len(window),
            scanned=scanned,
            count=len(results),
            elapsed_ms=round(elapsed_ms, 3),
        )
        return LookupResult(
            results=results,
            elapsed_ms=elapsed_ms,
            backend=self.backend_name,
            scanned=scanned,
        )


__all__ = [
    "DEFAULT_WINDOW",
    "LookupResult",
    "scan_window",
    "WindowBackend",
    "OrderedIndexBackend",
    "PrefixScanBackend",
    "LookupEngine",
]
