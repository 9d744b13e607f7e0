"""
Bulk vocabulary loading.

Both stores receive the same entry set, so the two lookup paths answer
identically.  Loading happens out of band (CLI or startup), never from a
request handler.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from fastsearch.core.logging import get_logger
from fastsearch.core.terms import DEFAULT_SENTINEL, build_entries
from fastsearch.index.protocols import KeyStore, OrderedIndex

logger = get_logger(__name__)


@dataclass
class LoadReport:
    """Counts written per store."""

    terms: int = 0
    entries: int = 0
    stored: dict[str, int] = field(default_factory=dict)


def load_vocabulary(
    terms: Iterable[str],
    *,
    ordered_index: OrderedIndex | None = None,
    key_store: KeyStore | None = None,
    sentinel: str = DEFAULT_SENTINEL,
    include_prefixes: bool = False,
) -> LoadReport:
    """Normalize *terms* and replace the contents of each given store."""
    entries = build_entries(terms, sentinel=sentinel, include_prefixes=include_prefixes)
    report = LoadReport(
        terms=sum(1 for entry in entries if entry.endswith(sentinel)),
        entries=len(entries),
    )

    for store in (ordered_index, key_store):
        if store is None:
            continue
        report.stored[store.name] = store.load(entries)

    logger.info(
        "vocabulary_loaded",
        terms=report.terms,
        entries=report.entries,
        stores=sorted(report.stored),
        include_prefixes=include_prefixes,
    )
    return report


__all__ = ["LoadReport", "load_vocabulary"]
