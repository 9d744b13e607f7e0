"""
Tests for FastSearchSettings validation.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from fastsearch.core.settings import (
    BackendKind,
    FastSearchSettings,
    OrderedStore,
    PrefixStore,
    get_settings,
)


class TestDefaults:
    def test_redis_requires_url(self):
        with pytest.raises(ValidationError, match="redis_url"):
            FastSearchSettings()

    def test_defaults_with_redis_url(self):
        s = FastSearchSettings(redis_url="redis://localhost:6379/0")
        assert s.backend == BackendKind.ORDERED
        assert s.ordered_store == OrderedStore.REDIS
        assert s.prefix_store == PrefixStore.NONE
        assert s.window_size == 100
        assert s.sentinel == "*"
        assert s.api_prefix == "/api"
        assert s.index_key == "terms"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("FASTSEARCH_ORDERED_STORE", "memory")
        monkeypatch.setenv("FASTSEARCH_WINDOW_SIZE", "25")
        s = FastSearchSettings()
        assert s.ordered_store == OrderedStore.MEMORY
        assert s.window_size == 25

    def test_get_settings_is_cached(self, monkeypatch):
        monkeypatch.setenv("FASTSEARCH_ORDERED_STORE", "memory")
        assert get_settings() is get_settings()


class TestValidation:
    @pytest.mark.parametrize("window", [0, -1, 1001])
    def test_window_bounds(self, window):
        with pytest.raises(ValidationError):
            FastSearchSettings(ordered_store="memory", window_size=window)

    def test_timeout_positive(self):
        with pytest.raises(ValidationError):
            FastSearchSettings(ordered_store="memory", timeout_s=0)

    @pytest.mark.parametrize("sentinel", ["", "**", "A", "7", " "])
    def test_bad_sentinel(self, sentinel):
        with pytest.raises(ValidationError):
            FastSearchSettings(ordered_store="memory", sentinel=sentinel)

    def test_cloudflare_requires_credentials(self):
        with pytest.raises(ValidationError, match="cf_api_token"):
            FastSearchSettings(
                ordered_store="memory",
                prefix_store="cloudflare",
                cf_account_id="acct",
                cf_namespace_id="ns",
            )

    def test_prefix_backend_needs_store(self):
        with pytest.raises(ValidationError, match="prefix_store"):
            FastSearchSettings(ordered_store="memory", backend="prefix")

    def test_ordered_backend_needs_store(self):
        with pytest.raises(ValidationError, match="ordered_store"):
            FastSearchSettings(ordered_store="none", prefix_store="memory")

    def test_prefix_only(self):
        s = FastSearchSettings(ordered_store="none", prefix_store="sqlite", backend="prefix")
        assert s.backend == BackendKind.PREFIX


class TestRedaction:
    def test_secrets_masked(self):
        s = FastSearchSettings(
            redis_url="redis://localhost",
            redis_token="hunter2",
            prefix_store="cloudflare",
            cf_account_id="acct",
            cf_namespace_id="ns",
            cf_api_token="cf-secret",
        )
        data = s.redacted()
        assert data["redis_token"] == "**********"
        assert data["cf_api_token"] == "**********"
        assert "hunter2" not in str(data)
        assert s.redis_token.get_secret_value() == "hunter2"
