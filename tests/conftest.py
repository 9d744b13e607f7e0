"""
Shared pytest fixtures for fast-search tests.

This module provides:
- The reference scenario vocabulary and entry sets
- In-memory stores and engines for both lookup paths
- Settings construction isolated from the developer's environment

Usage:
    Fixtures are auto-discovered by pytest; request them as arguments.
"""

import sys
from pathlib import Path

import pytest

# Ensure fastsearch package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fastsearch.core.lookup import LookupEngine, OrderedIndexBackend, PrefixScanBackend
from fastsearch.core.settings import FastSearchSettings, clear_settings_cache
from fastsearch.core.terms import build_entries
from fastsearch.index.keystore import InMemoryKeyStore
from fastsearch.index.ordered import InMemoryOrderedIndex


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Environment isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Drop FASTSEARCH_* env vars and run from an empty dir (no stray .env)."""
    import os

    for key in list(os.environ):
        if key.startswith("FASTSEARCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Vocabulary fixtures
# =============================================================================

SCENARIO_ENTRIES = ("APP*", "APPLE*", "APPLY*", "BANANA*")

FRUIT_TERMS = [
    "apple",
    "apply",
    "app",
    "application",
    "apricot",
    "banana",
    "band",
    "bandana",
    "cherry",
    "AB",
    "ABC",
]


@pytest.fixture
def scenario_entries() -> tuple[str, ...]:
    return SCENARIO_ENTRIES


@pytest.fixture
def fruit_terms() -> list[str]:
    return list(FRUIT_TERMS)


@pytest.fixture
def fruit_entries(fruit_terms) -> tuple[str, ...]:
    return build_entries(fruit_terms, include_prefixes=True)


@pytest.fixture
def ordered_engine(scenario_entries) -> LookupEngine:
    return LookupEngine(OrderedIndexBackend(InMemoryOrderedIndex(scenario_entries)))


@pytest.fixture
def prefix_engine(scenario_entries) -> LookupEngine:
    return LookupEngine(PrefixScanBackend(InMemoryKeyStore(scenario_entries)))


@pytest.fixture
def memory_settings() -> FastSearchSettings:
    return FastSearchSettings(ordered_store="memory", prefix_store="memory")
