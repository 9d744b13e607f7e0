"""
Prefix-scan key stores: list keys by prefix, bounded count, in order.

Architecture:
    ::

        KeyStore (Protocol)
        ├── InMemoryKeyStore  : sorted tuple, exact prefix filter
        ├── SQLiteKeyStore    : WITHOUT ROWID table, ordered range scan
        └── CloudflareKVStore : Workers KV REST API via a pooled httpx.Client

        API: list_keys(prefix, limit) → list[str]
             load(entries) → int
             ping() → bool
             close()

Guardrails:
    ❌ DON'T: Assume list_keys stops exactly at the prefix boundary
    ✅ DO: Stop scanning at the first key that does not match (the lookup
       engine does this for every store)

Tags:
    key-store, prefix-scan, sqlite, cloudflare-kv, httpx, fast-search

Doc-Types:
    - API Reference
    - Infrastructure Guide
"""

from __future__ import annotations

import sqlite3
from bisect import bisect_left
from collections.abc import Iterator, Sequence
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any

import httpx

from fastsearch.core.errors import (
    BackendThrottledError,
    BackendTimeoutError,
    BackendUnavailableError,
)
from fastsearch.core.logging import get_logger

logger = get_logger(__name__)

# ------------------------------------------------------------------ #
# In-Memory Store (Tier 1)
# ------------------------------------------------------------------ #


class InMemoryKeyStore:
    """Sorted in-process key listing.  Swapped wholesale on ``load()``."""

    name = "memory-kv"

    def __init__(self, keys: Sequence[str] = ()):
        self._keys: tuple[str, ...] = tuple(sorted(set(keys)))

    def list_keys(self, prefix: str, limit: int) -> list[str]:
        keys = self._keys
        out: list[str] = []
        for key in keys[bisect_left(keys, prefix) :]:
            if len(out) >= limit or not key.startswith(prefix):
                break
            out.append(key)
        return out

    def load(self, entries: Sequence[str]) -> int:
        self._keys = tuple(sorted(set(entries)))
        return len(self._keys)

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass


# ------------------------------------------------------------------ #
# SQLite Store
# ------------------------------------------------------------------ #

_CREATE_TABLE = "CREATE TABLE IF NOT EXISTS kv_keys (key TEXT PRIMARY KEY) WITHOUT ROWID"


class SQLiteKeyStore:
    """Key listing over a single-column SQLite table.

    The primary key uses SQLite's default BINARY collation, which compares
    UTF-8 text with ``memcmp`` and therefore sorts exactly like the other
    stores.  ``list_keys`` reads forward from the prefix without an upper
    bound; the engine's early exit trims the overrun.

    A connection is opened per call and always closed, with ``timeout_s``
    bounding how long a reader waits on a writer's lock.
    """

    name = "sqlite"

    def __init__(self, path: str | Path, *, timeout_s: float = 2.0):
        self._path = str(path)
        self._timeout_s = timeout_s
        with self._connect() as conn:
            conn.execute(_CREATE_TABLE)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            with closing(sqlite3.connect(self._path, timeout=self._timeout_s)) as conn:
                with conn:
                    yield conn
        except sqlite3.OperationalError as exc:
            if "locked" in str(exc) or "busy" in str(exc):
                raise BackendTimeoutError(f"SQLite busy: {exc}", cause=exc).with_context(
                    backend=self.name
                ) from exc
            raise BackendUnavailableError(f"SQLite error: {exc}", cause=exc).with_context(
                backend=self.name
            ) from exc
        except sqlite3.DatabaseError as exc:
            raise BackendUnavailableError(f"SQLite error: {exc}", cause=exc).with_context(
                backend=self.name
            ) from exc

    def list_keys(self, prefix: str, limit: int) -> list[str]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT key FROM kv_keys WHERE key >= ? ORDER BY key LIMIT ?",
                (prefix, limit),
            ).fetchall()
        return [row[0] for row in rows]

    def load(self, entries: Sequence[str]) -> int:
        """Replace every key in one transaction."""
        with self._connect() as conn:
            conn.execute("DELETE FROM kv_keys")
            conn.executemany(
                "INSERT OR REPLACE INTO kv_keys (key) VALUES (?)",
                ((entry,) for entry in entries),
            )
            count = conn.execute("SELECT COUNT(*) FROM kv_keys").fetchone()[0]
        logger.info("key_store_loaded", backend=self.name, path=self._path, count=count)
        return count

    def ping(self) -> bool:
        with self._connect() as conn:
            conn.execute("SELECT 1").fetchone()
        return True

    def close(self) -> None:
        pass


# ------------------------------------------------------------------ #
# Cloudflare Workers KV
# ------------------------------------------------------------------ #


class CloudflareKVStore:
    """Workers KV namespace accessed through the Cloudflare REST API.

    One ``httpx.Client`` (and its connection pool) is created up front and
    reused for every call.  Keys are the entries; values are ignored.

    Example:
        store = CloudflareKVStore(account_id="...", namespace_id="...", api_token="...")
        store.list_keys("AP", 100)
    """

    name = "cloudflare-kv"

    # KV list requests accept limit in [10, 1000]
    MIN_LIST_LIMIT = 10
    MAX_LIST_LIMIT = 1000
    BULK_BATCH = 10_000

    def __init__(
        self,
        *,
        account_id: str,
        namespace_id: str,
        api_token: str,
        base_url: str = "https://api.cloudflare.com/client/v4",
        timeout_s: float = 2.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/accounts/{account_id}/storage/kv/namespaces/{namespace_id}",
            headers={"Authorization": f"Bearer {api_token}"},
            timeout=timeout_s,
            transport=transport,
        )

    def _request(self, operation: str, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise BackendTimeoutError(f"KV {operation} timed out", cause=exc).with_context(
                backend=self.name, operation=operation
            ) from exc
        except httpx.TransportError as exc:
            raise BackendUnavailableError(f"KV {operation} failed: {exc}", cause=exc).with_context(
                backend=self.name, operation=operation
            ) from exc

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise BackendThrottledError(
                f"KV {operation} throttled",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else 1,
            ).with_context(backend=self.name, operation=operation, http_status=429)
        if response.status_code >= 400:
            raise BackendUnavailableError(
                f"KV {operation} returned HTTP {response.status_code}",
                retryable=response.status_code >= 500,
            ).with_context(backend=self.name, operation=operation, http_status=response.status_code)

        body = response.json()
        if not body.get("success", False):
            messages = "; ".join(str(e.get("message", e)) for e in body.get("errors", []))
            raise BackendUnavailableError(f"KV {operation} failed: {messages}").with_context(
                backend=self.name, operation=operation, http_status=response.status_code
            )
        return body

    def list_keys(self, prefix: str, limit: int) -> list[str]:
        params = {
            "prefix": prefix,
            "limit": min(max(limit, self.MIN_LIST_LIMIT), self.MAX_LIST_LIMIT),
        }
        body = self._request("list_keys", "GET", "/keys", params=params)
        return [item["name"] for item in body.get("result", [])][:limit]

    def _iter_all_keys(self) -> Iterator[str]:
        cursor = ""
        while True:
            params: dict[str, Any] = {"limit": self.MAX_LIST_LIMIT}
            if cursor:
                params["cursor"] = cursor
            body = self._request("list_keys", "GET", "/keys", params=params)
            for item in body.get("result", []):
                yield item["name"]
            cursor = (body.get("result_info") or {}).get("cursor") or ""
            if not cursor:
                return

    def load(self, entries: Sequence[str]) -> int:
        """Bulk-write every entry, then delete keys no longer in the vocabulary.

        KV has no atomic namespace swap; new keys are written before stale
        ones are removed so a reader never sees a term disappear early.
        """
        wanted = set(entries)
        ordered = sorted(wanted)
        for offset in range(0, len(ordered), self.BULK_BATCH):
            batch = ordered[offset : offset + self.BULK_BATCH]
            self._request("load", "PUT", "/bulk", json=[{"key": key, "value": "1"} for key in batch])

        stale = [key for key in self._iter_all_keys() if key not in wanted]
        for offset in range(0, len(stale), self.BULK_BATCH):
            self._request("load", "POST", "/bulk/delete", json=stale[offset : offset + self.BULK_BATCH])

        logger.info("key_store_loaded", backend=self.name, count=len(ordered), removed=len(stale))
        return len(ordered)

    def ping(self) -> bool:
        self._request("ping", "GET", "/keys", params={"limit": self.MIN_LIST_LIMIT})
        return True

    def close(self) -> None:
        self._client.close()


__all__ = ["InMemoryKeyStore", "SQLiteKeyStore", "CloudflareKVStore"]
