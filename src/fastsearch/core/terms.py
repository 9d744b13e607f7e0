"""
Term normalization and the sentinel convention.

A stored entry is an uppercase term.  Entries that end with the sentinel
marker (``*`` by default) are complete vocabulary terms; entries without it
are prefix-only nodes that exist so a sorted index can be walked from any
prefix.  ``"AB*"`` means "AB is a term"; ``"AB"`` alone means "AB is only a
prefix of something longer".
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

from fastsearch.core.errors import InvalidQueryError, ValidationError

DEFAULT_SENTINEL = "*"


def normalize_query(raw: str | None) -> str:
    """Trim and uppercase a raw query.

    Raises:
        InvalidQueryError: If the query is missing, empty or whitespace only.
    """
    if raw is None:
        raise InvalidQueryError()
    query = raw.strip()
    if not query:
        raise InvalidQueryError(value=raw)
    return query.upper()


def mark(term: str, sentinel: str = DEFAULT_SENTINEL) -> str:
    return term + sentinel


def is_complete(entry: str, sentinel: str = DEFAULT_SENTINEL) -> bool:
    return entry.endswith(sentinel)


def unmark(entry: str, sentinel: str = DEFAULT_SENTINEL) -> str:
    """Strip exactly one trailing sentinel, if present."""
    if entry.endswith(sentinel):
        return entry[: -len(sentinel)]
    return entry


def normalize_term(term: str, sentinel: str = DEFAULT_SENTINEL) -> str | None:
    """Normalize a vocabulary term, or return ``None`` for blank input.

    Raises:
        ValidationError: If the term contains the sentinel character.
    """
    cleaned = term.strip().upper()
    if not cleaned:
        return None
    if sentinel in cleaned:
        raise ValidationError(
            f"Term {term!r} contains the reserved sentinel {sentinel!r}",
            field="term",
            value=term,
        )
    return cleaned


def build_entries(
    terms: Iterable[str],
    *,
    sentinel: str = DEFAULT_SENTINEL,
    include_prefixes: bool = False,
) -> tuple[str, ...]:
    """Turn raw vocabulary terms into the sorted entry set both backends store.

    With ``include_prefixes`` every proper prefix of every term is stored as
    an unmarked node as well (the classic sorted-set autocomplete layout).
    Sorting is by code point, which matches byte order for UTF-8 keys.
    """
    entries: set[str] = set()
    for raw in terms:
        term = normalize_term(raw, sentinel)
        if term is None:
            continue
        entries.add(mark(term, sentinel))
        if include_prefixes:
            for end in range(1, len(term)):
                entries.add(term[:end])
    return tuple(sorted(entries))


def iter_vocabulary(lines: Iterable[str]) -> Iterator[str]:
    """Yield terms from text lines, skipping blanks and ``#`` comments."""
    for line in lines:
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            yield stripped


def read_vocabulary(path: str | Path) -> list[str]:
    """Read one term per line from a UTF-8 text file."""
    with open(path, encoding="utf-8") as handle:
        return list(iter_vocabulary(handle))


__all__ = [
    "DEFAULT_SENTINEL",
    "normalize_query",
    "normalize_term",
    "mark",
    "unmark",
    "is_complete",
    "build_entries",
    "iter_vocabulary",
    "read_vocabulary",
]
