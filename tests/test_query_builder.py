"""Tests for GitHub search query assembly."""

import pytest

from app.services.query_builder import build_search_query, sanitize_term


class TestSanitizeTerm:
    def test_keeps_words_spaces_and_hyphens(self):
        assert sanitize_term("http-client for rest apis") == "http-client for rest apis"

    def test_strips_search_qualifiers(self):
        assert sanitize_term('user:evil "exact phrase" stars:>1') == "userevil exact phrase stars1"

    def test_strips_surrounding_whitespace(self):
        assert sanitize_term("  yaml!  ") == "yaml"

    def test_only_symbols_becomes_empty(self):
        assert sanitize_term("!!!:::") == ""


class TestBuildSearchQuery:
    def test_full_query(self):
        query = build_search_query("python", "parse yaml files", "pyyaml")
        assert query == (
            "language:python parse yaml files pyyaml in:name,description,readme stars:>50"
        )

    def test_without_example(self):
        assert build_search_query("go", "http router") == "language:go http router stars:>50"

    def test_blank_example_is_skipped(self):
        assert build_search_query("go", "http router", "  ") == "language:go http router stars:>50"

    def test_empty_sanitized_term_is_skipped(self):
        assert build_search_query("rust", "???") == "language:rust stars:>50"

    def test_term_is_sanitized(self):
        query = build_search_query("python", "orm (async)")
        assert "orm async" in query
        assert "(" not in query

    @pytest.mark.parametrize(
        "language,term",
        [("python", "web scraping"), ("typescript", "state management"), ("c", "json")],
    )
    def test_always_has_language_and_star_floor(self, language, term):
        query = build_search_query(language, term)
        assert f"language:{language}" in query
        assert "stars:>50" in query

    def test_deterministic(self):
        assert build_search_query("python", "cli", "click") == build_search_query(
            "python", "cli", "click"
        )
