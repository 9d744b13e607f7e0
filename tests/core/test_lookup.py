"""
Tests for the lookup engine: scan-filter-unmark over both backend paths.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from fastsearch.core.errors import BackendTimeoutError, BackendUnavailableError, InvalidQueryError
from fastsearch.core.lookup import (
    LookupEngine,
    LookupResult,
    OrderedIndexBackend,
    PrefixScanBackend,
    scan_window,
)
from fastsearch.core.terms import build_entries
from fastsearch.index.keystore import InMemoryKeyStore
from fastsearch.index.ordered import InMemoryOrderedIndex


def _engines(entries, window_size=100):
    return (
        LookupEngine(OrderedIndexBackend(InMemoryOrderedIndex(entries)), window_size=window_size),
        LookupEngine(PrefixScanBackend(InMemoryKeyStore(entries)), window_size=window_size),
    )


class TestScanWindow:
    def test_emits_marked_entries_unmarked(self):
        results, scanned = scan_window(["AP", "APP*", "APPL", "APPLE*"], "AP")
        assert results == ["APP", "APPLE"]
        assert scanned == 4

    def test_stops_at_first_non_match(self):
        results, scanned = scan_window(["APP*", "BANANA*", "APPLE*"], "AP")
        assert results == ["APP"]
        assert scanned == 2

    def test_prefix_nodes_do_not_stop_scan(self):
        results, _ = scan_window(["AB", "ABC", "ABCD*"], "AB")
        assert results == ["ABCD"]

    def test_empty_window(self):
        assert scan_window([], "A") == ([], 0)

    def test_stop_is_not_a_substring_test(self):
        # "XAP*" contains "AP" but does not start with it
        results, scanned = scan_window(["XAP*"], "AP")
        assert results == []
        assert scanned == 1


class TestScenario:
    """Vocabulary {APPLE*, APPLY*, APP*, BANANA*}, W=100."""

    @pytest.mark.parametrize("engine_name", ["ordered_engine", "prefix_engine"])
    def test_ap(self, engine_name, request):
        engine = request.getfixturevalue(engine_name)
        assert engine.lookup("AP").results == ["APP", "APPLE", "APPLY"]

    @pytest.mark.parametrize("engine_name", ["ordered_engine", "prefix_engine"])
    def test_b(self, engine_name, request):
        engine = request.getfixturevalue(engine_name)
        assert engine.lookup("B").results == ["BANANA"]

    @pytest.mark.parametrize("engine_name", ["ordered_engine", "prefix_engine"])
    def test_z_is_empty_not_error(self, engine_name, request):
        engine = request.getfixturevalue(engine_name)
        result = engine.lookup("Z")
        assert result.results == []
        assert isinstance(result, LookupResult)

    @pytest.mark.parametrize("engine_name", ["ordered_engine", "prefix_engine"])
    def test_empty_is_invalid(self, engine_name, request):
        engine = request.getfixturevalue(engine_name)
        with pytest.raises(InvalidQueryError):
            engine.lookup("")


class TestLookupProperties:
    def test_case_insensitive(self, ordered_engine):
        assert ordered_engine.lookup("ap").results == ordered_engine.lookup("AP").results

    def test_whitespace_trimmed(self, prefix_engine):
        assert prefix_engine.lookup("  ban ").results == ["BANANA"]

    def test_rank_zero_is_a_match(self):
        # "APP*" is the very first entry; its lower bound is rank 0
        ordered, _ = _engines(("APP*", "APPLE*"))
        assert ordered.lookup("A").results == ["APP", "APPLE"]

    def test_exact_term_is_returned(self, ordered_engine):
        assert ordered_engine.lookup("APPLE").results == ["APPLE"]

    def test_query_past_every_entry(self, ordered_engine):
        assert ordered_engine.lookup("ZZZ").results == []

    def test_empty_index(self):
        ordered, prefix = _engines(())
        assert ordered.lookup("A").results == []
        assert prefix.lookup("A").results == []

    def test_prefix_correctness(self, fruit_terms, fruit_entries):
        ordered, prefix = _engines(fruit_entries)
        for term in {t.upper() for t in fruit_terms}:
            for end in range(1, len(term) + 1):
                query = term[:end]
                assert term in ordered.lookup(query).results
                assert term in prefix.lookup(query).results

    def test_no_result_fails_prefix_or_has_sentinel(self, fruit_entries):
        ordered, _ = _engines(fruit_entries)
        for query in ["A", "AP", "APP", "B", "BAN", "C", "AB"]:
            for term in ordered.lookup(query).results:
                assert term.startswith(query)
                assert "*" not in term

    def test_each_result_is_one_stored_term(self, fruit_entries):
        ordered, _ = _engines(fruit_entries)
        results = ordered.lookup("A").results
        assert len(results) == len(set(results))
        assert all(f"{term}*" in fruit_entries for term in results)

    def test_complete_term_that_is_also_prefix(self, fruit_entries):
        ordered, _ = _engines(fruit_entries)
        assert ordered.lookup("AB").results == ["AB", "ABC"]

    def test_backend_equivalence(self, fruit_entries):
        ordered, prefix = _engines(fruit_entries, window_size=5)
        for query in ["A", "AP", "APP", "APPL", "B", "BAN", "BAND", "C", "CH", "Q", "AB"]:
            assert ordered.lookup(query).results == prefix.lookup(query).results, query

    def test_backend_equivalence_with_repeated_entries(self):
        ordered, prefix = _engines(["APP*", "APP*", "APPLE*"])
        assert ordered.lookup("AP").results == ["APP", "APPLE"]
        assert prefix.lookup("AP").results == ["APP", "APPLE"]


class TestWindowBoundary:
    def test_returns_first_w_matches(self):
        entries = build_entries([f"term{i:03d}" for i in range(250)])
        ordered, prefix = _engines(entries, window_size=100)
        expected = [f"TERM{i:03d}" for i in range(100)]
        assert ordered.lookup("term").results == expected
        assert prefix.lookup("term").results == expected

    def test_window_of_one(self, scenario_entries):
        ordered, prefix = _engines(scenario_entries, window_size=1)
        assert ordered.lookup("AP").results == ["APP"]
        assert prefix.lookup("AP").results == ["APP"]

    def test_window_past_end_is_clamped(self, scenario_entries):
        ordered, _ = _engines(scenario_entries, window_size=1000)
        assert ordered.lookup("B").results == ["BANANA"]

    def test_invalid_window_size(self, scenario_entries):
        with pytest.raises(ValueError):
            LookupEngine(OrderedIndexBackend(InMemoryOrderedIndex(scenario_entries)), window_size=0)


class TestBackendInteraction:
    def test_blank_query_never_reaches_backend(self):
        backend = MagicMock()
        engine = LookupEngine(backend)
        for raw in ["", "   "]:
            with pytest.raises(InvalidQueryError):
                engine.lookup(raw)
        backend.fetch_window.assert_not_called()

    def test_backend_receives_normalized_query_and_window(self):
        backend = MagicMock()
        backend.name = "mock"
        backend.fetch_window.return_value = ["APP*"]
        engine = LookupEngine(backend, window_size=7)
        result = engine.lookup(" app ")
        backend.fetch_window.assert_called_once_with("APP", 7)
        assert result.backend == "mock"

    def test_ordered_adapter_skips_range_when_no_rank(self):
        index = MagicMock()
        index.name = "mock-ordered"
        index.rank.return_value = None
        backend = OrderedIndexBackend(index)
        assert backend.fetch_window("ZZ", 100) == []
        index.range_by_rank.assert_not_called()

    def test_ordered_adapter_uses_rank_zero(self):
        index = MagicMock()
        index.name = "mock-ordered"
        index.rank.return_value = 0
        index.range_by_rank.return_value = ["A*"]
        assert OrderedIndexBackend(index).fetch_window("A", 10) == ["A*"]
        index.range_by_rank.assert_called_once_with(0, 10)

    def test_prefix_adapter_passes_bound_verbatim(self):
        store = MagicMock()
        store.name = "mock-kv"
        store.list_keys.return_value = []
        PrefixScanBackend(store).fetch_window("AP", 100)
        store.list_keys.assert_called_once_with("AP", 100)

    def test_engine_does_not_trust_backend_boundary(self):
        store = MagicMock()
        store.name = "mock-kv"
        store.list_keys.return_value = ["APP*", "APPLE*", "B*", "APZ*"]
        engine = LookupEngine(PrefixScanBackend(store))
        assert engine.lookup("AP").results == ["APP", "APPLE"]

    @pytest.mark.parametrize("error_cls", [BackendTimeoutError, BackendUnavailableError])
    def test_transient_failure_propagates_with_query(self, error_cls):
        backend = MagicMock()
        backend.name = "mock"
        backend.fetch_window.side_effect = error_cls("boom").with_context(backend="mock")
        engine = LookupEngine(backend)
        with pytest.raises(error_cls) as exc_info:
            engine.lookup("ap")
        assert exc_info.value.retryable is True
        assert exc_info.value.context.query == "AP"
        assert exc_info.value.context.backend == "mock"

    def test_elapsed_is_reported(self, ordered_engine):
        result = ordered_engine.lookup("AP")
        assert result.elapsed_ms >= 0
        assert result.scanned >= 3
