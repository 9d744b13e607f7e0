"""
Tests for query normalization and the sentinel convention.
"""

from __future__ import annotations

import pytest

from fastsearch.core.errors import InvalidQueryError, ValidationError
from fastsearch.core.terms import (
    build_entries,
    is_complete,
    iter_vocabulary,
    mark,
    normalize_query,
    normalize_term,
    read_vocabulary,
    unmark,
)


class TestNormalizeQuery:
    def test_uppercases(self):
        assert normalize_query("apple") == "APPLE"

    def test_trims_whitespace(self):
        assert normalize_query("  ap \t") == "AP"

    def test_keeps_inner_whitespace(self):
        assert normalize_query("new york") == "NEW YORK"

    @pytest.mark.parametrize("raw", ["", "   ", "\n\t", None])
    def test_blank_rejected(self, raw):
        with pytest.raises(InvalidQueryError) as exc_info:
            normalize_query(raw)
        assert exc_info.value.code == "INVALID_INPUT"
        assert exc_info.value.field == "input"


class TestSentinel:
    def test_mark_and_unmark(self):
        assert mark("APP") == "APP*"
        assert unmark("APP*") == "APP"

    def test_unmark_strips_only_one(self):
        assert unmark("APP**") == "APP*"

    def test_unmark_leaves_prefix_node(self):
        assert unmark("AP") == "AP"

    def test_is_complete(self):
        assert is_complete("AB*")
        assert not is_complete("AB")

    def test_custom_sentinel(self):
        assert mark("AB", "$") == "AB$"
        assert unmark("AB$", "$") == "AB"
        assert not is_complete("AB*", "$")


class TestBuildEntries:
    def test_sorted_marked_uppercase(self):
        assert build_entries(["banana", "apple", "app"]) == ("APP*", "APPLE*", "BANANA*")

    def test_duplicates_collapse(self):
        assert build_entries(["apple", "APPLE", " Apple "]) == ("APPLE*",)

    def test_blank_terms_skipped(self):
        assert build_entries(["", "  ", "kiwi"]) == ("KIWI*",)

    def test_prefix_nodes(self):
        entries = build_entries(["abc"], include_prefixes=True)
        assert entries == ("A", "AB", "ABC*")

    def test_term_that_is_also_a_prefix(self):
        entries = build_entries(["ab", "abc"], include_prefixes=True)
        # "AB" is a complete term and a prefix of "ABC"
        assert "AB*" in entries
        assert "AB" in entries
        assert "ABC*" in entries

    def test_sentinel_in_term_rejected(self):
        with pytest.raises(ValidationError):
            build_entries(["star*fruit"])

    def test_normalize_term_blank(self):
        assert normalize_term("   ") is None


class TestVocabularyFile:
    def test_iter_skips_comments_and_blanks(self):
        lines = ["# fruits\n", "apple\n", "\n", "  banana  \n"]
        assert list(iter_vocabulary(lines)) == ["apple", "banana"]

    def test_read_vocabulary(self, tmp_path):
        path = tmp_path / "vocab.txt"
        path.write_text("apple\n# skip\ncherry\n", encoding="utf-8")
        assert read_vocabulary(path) == ["apple", "cherry"]
