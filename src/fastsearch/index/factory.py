"""
Factory functions that create stores and engines from settings.

Manifesto:
    The stores are selected by configuration, never by duplicating engine
    logic per backend.  Everything with a connection is created here, once
    per process, and released through :meth:`LookupEngines.close`.

Features:
    - ``create_ordered_index()``: InMemory / Redis
    - ``create_key_store()``: InMemory / SQLite / Cloudflare KV
    - ``build_engines()``: one :class:`LookupEngine` per configured path

Tags:
    fast-search, configuration, factory-pattern

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fastsearch.core.errors import InvalidConfigError, MissingConfigError
from fastsearch.core.logging import get_logger
from fastsearch.core.lookup import LookupEngine, OrderedIndexBackend, PrefixScanBackend
from fastsearch.core.settings import BackendKind, FastSearchSettings, OrderedStore, PrefixStore
from fastsearch.core.terms import build_entries, read_vocabulary
from fastsearch.index.keystore import CloudflareKVStore, InMemoryKeyStore, SQLiteKeyStore
from fastsearch.index.ordered import InMemoryOrderedIndex, RedisOrderedIndex
from fastsearch.index.protocols import KeyStore, OrderedIndex

logger = get_logger(__name__)


def _secret(value) -> str | None:
    return value.get_secret_value() if value is not None else None


def _startup_entries(settings: FastSearchSettings) -> tuple[str, ...]:
    if not settings.vocabulary_path:
        return ()
    return build_entries(read_vocabulary(settings.vocabulary_path), sentinel=settings.sentinel)


def create_ordered_index(settings: FastSearchSettings) -> OrderedIndex | None:
    """Create the ordered-index store selected by *settings.ordered_store*."""
    match settings.ordered_store:
        case OrderedStore.NONE:
            return None
        case OrderedStore.MEMORY:
            return InMemoryOrderedIndex(_startup_entries(settings))
        case OrderedStore.REDIS:
            if not settings.redis_url:
                raise MissingConfigError("redis_url")
            return RedisOrderedIndex.from_url(
                settings.redis_url,
                key=settings.index_key,
                password=_secret(settings.redis_token),
                timeout_s=settings.timeout_s,
                max_connections=settings.redis_max_connections,
            )
    raise InvalidConfigError("ordered_store", settings.ordered_store)


def create_key_store(settings: FastSearchSettings) -> KeyStore | None:
    """Create the prefix-scan store selected by *settings.prefix_store*."""
    match settings.prefix_store:
        case PrefixStore.NONE:
            return None
        case PrefixStore.MEMORY:
            return InMemoryKeyStore(_startup_entries(settings))
        case PrefixStore.SQLITE:
            return SQLiteKeyStore(settings.sqlite_path, timeout_s=settings.timeout_s)
        case PrefixStore.CLOUDFLARE:
            for key in ("cf_account_id", "cf_namespace_id", "cf_api_token"):
                if getattr(settings, key) is None:
                    raise MissingConfigError(key)
            return CloudflareKVStore(
                account_id=settings.cf_account_id,
                namespace_id=settings.cf_namespace_id,
                api_token=_secret(settings.cf_api_token),
                base_url=settings.cf_base_url,
                timeout_s=settings.timeout_s,
            )
    raise InvalidConfigError("prefix_store", settings.prefix_store)


@dataclass
class LookupEngines:
    """The engines a process serves, keyed by lookup path.

    Built once at startup and handed to request handlers as an immutable
    handle.
    """

    default: BackendKind
    engines: dict[BackendKind, LookupEngine] = field(default_factory=dict)
    ordered_index: OrderedIndex | None = None
    key_store: KeyStore | None = None

    def get(self, kind: BackendKind | None = None) -> LookupEngine | None:
        return self.engines.get(kind or self.default)

    def close(self) -> None:
        """Release every store's connections."""
        for store in (self.ordered_index, self.key_store):
            if store is not None:
                store.close()


def build_engines(
    settings: FastSearchSettings,
    *,
    ordered_index: OrderedIndex | None = None,
    key_store: KeyStore | None = None,
) -> LookupEngines:
    """Create stores (unless given) and wrap each in a :class:`LookupEngine`."""
    if ordered_index is None:
        ordered_index = create_ordered_index(settings)
    if key_store is None:
        key_store = create_key_store(settings)

    engines: dict[BackendKind, LookupEngine] = {}
    if ordered_index is not None:
        engines[BackendKind.ORDERED] = LookupEngine(
            OrderedIndexBackend(ordered_index),
            window_size=settings.window_size,
            sentinel=settings.sentinel,
        )
    if key_store is not None:
        engines[BackendKind.PREFIX] = LookupEngine(
            PrefixScanBackend(key_store),
            window_size=settings.window_size,
            sentinel=settings.sentinel,
        )

    if settings.backend not in engines:
        raise MissingConfigError(
            "backend", f"Default backend {settings.backend.value!r} has no configured store"
        )

    logger.info(
        "engines_built",
        default=settings.backend.value,
        paths=sorted(kind.value for kind in engines),
        window_size=settings.window_size,
    )
    return LookupEngines(
        default=settings.backend,
        engines=engines,
        ordered_index=ordered_index,
        key_store=key_store,
    )


__all__ = [
    "create_ordered_index",
    "create_key_store",
    "LookupEngines",
    "build_engines",
]
