"""Settings for fast-search.

All recognized connection parameters are enumerated here and validated
once at startup.  Nothing in the lookup path reads the environment.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at call time
    - **Environment-driven:** ``FASTSEARCH_*`` env vars and ``.env`` files
    - **Backend-aware:** Credentials are required only for the stores
      actually selected

Examples:
    >>> from fastsearch.core.settings import FastSearchSettings
    >>> s = FastSearchSettings(ordered_store="memory")
    >>> s.window_size
    100

Tags:
    settings, configuration, pydantic, environment, fast-search

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Any

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ── Backend enumerations ─────────────────────────────────────────────────


class BackendKind(str, Enum):
    """Which lookup path serves the default ``/search`` endpoint."""

    ORDERED = "ordered"
    PREFIX = "prefix"


class OrderedStore(str, Enum):
    """Concrete store behind the ordered-index backend."""

    NONE = "none"
    REDIS = "redis"
    MEMORY = "memory"


class PrefixStore(str, Enum):
    """Concrete store behind the prefix-scan backend."""

    NONE = "none"
    CLOUDFLARE = "cloudflare"
    SQLITE = "sqlite"
    MEMORY = "memory"


class FastSearchSettings(BaseSettings):
    """Settings for the fast-search service.

    Order of precedence (highest → lowest):
        1. Constructor arguments
        2. Environment variables (``FASTSEARCH_REDIS_URL``, etc.)
        3. ``.env`` file
        4. Defaults below
    """

    model_config = SettingsConfigDict(
        env_prefix="FASTSEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Server ───────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    debug: bool = Field(default=False, description="Expose error details in 500 responses")
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool | None = Field(default=None, description="JSON logs (None → auto-detect tty)")

    # ── API ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="/api", description="URL prefix for search endpoints")
    api_title: str = Field(default="fast-search API", description="OpenAPI title")
    api_version: str = Field(default="0.2.0", description="OpenAPI version string")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    # ── Engine ───────────────────────────────────────────────────────────
    backend: BackendKind = Field(default=BackendKind.ORDERED, description="Default lookup path")
    window_size: int = Field(default=100, ge=1, le=1000, description="Scan window W")
    timeout_s: float = Field(default=2.0, gt=0, description="Deadline for each backend call")
    sentinel: str = Field(default="*", description="Complete-term marker")

    # ── Ordered index ────────────────────────────────────────────────────
    ordered_store: OrderedStore = Field(default=OrderedStore.REDIS)
    redis_url: str | None = Field(default=None, description="redis:// or rediss:// URL")
    redis_token: SecretStr | None = Field(default=None, description="Redis password / token")
    redis_max_connections: int = Field(default=20, ge=1)
    index_key: str = Field(default="terms", description="Sorted-set key holding the index")

    # ── Prefix-scan store ────────────────────────────────────────────────
    prefix_store: PrefixStore = Field(default=PrefixStore.NONE)
    cf_account_id: str | None = Field(default=None)
    cf_namespace_id: str | None = Field(default=None)
    cf_api_token: SecretStr | None = Field(default=None)
    cf_base_url: str = Field(default="https://api.cloudflare.com/client/v4")
    sqlite_path: str = Field(default="terms.db")

    # ── Bulk load ────────────────────────────────────────────────────────
    vocabulary_path: str | None = Field(
        default=None,
        description="Vocabulary file loaded into memory stores at startup",
    )

    @field_validator("sentinel")
    @classmethod
    def _single_char_sentinel(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("sentinel must be exactly one character")
        if value.isalnum() or value.isspace():
            raise ValueError("sentinel must not be alphanumeric or whitespace")
        return value

    @model_validator(mode="after")
    def _validate_backends(self) -> FastSearchSettings:
        """Check that the selected stores have what they need to connect."""
        if self.ordered_store == OrderedStore.REDIS and not self.redis_url:
            raise ValueError("redis_url is required when ordered_store is 'redis'")
        if self.prefix_store == PrefixStore.CLOUDFLARE:
            missing = [
                name
                for name in ("cf_account_id", "cf_namespace_id", "cf_api_token")
                if getattr(self, name) is None
            ]
            if missing:
                raise ValueError(f"cloudflare prefix store requires: {', '.join(missing)}")
        if self.backend == BackendKind.ORDERED and self.ordered_store == OrderedStore.NONE:
            raise ValueError("backend 'ordered' needs an ordered_store")
        if self.backend == BackendKind.PREFIX and self.prefix_store == PrefixStore.NONE:
            raise ValueError("backend 'prefix' needs a prefix_store")
        return self

    def redacted(self) -> dict[str, Any]:
        """Settings as a plain dict with secrets masked (for display)."""
        data = self.model_dump(mode="json")
        for key in ("redis_token", "cf_api_token"):
            if data.get(key) is not None:
                data[key] = "**********"
        return data


@lru_cache(maxsize=1)
def get_settings() -> FastSearchSettings:
    """Cached settings: loaded once per process."""
    return FastSearchSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    get_settings.cache_clear()


__all__ = [
    "BackendKind",
    "OrderedStore",
    "PrefixStore",
    "FastSearchSettings",
    "get_settings",
    "clear_settings_cache",
]
