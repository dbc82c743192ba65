"""Unit tests for SQL keyword detection."""

import pytest

from quackbridge.utils.pattern_matcher import (
    DUCKDB_KEYWORDS,
    QueryClassifier,
    SQLKeywordMatcher,
    contains_sql_query,
)


@pytest.fixture
def matcher():
    return SQLKeywordMatcher()


def test_detects_simple_select(matcher):
    assert matcher.is_likely_query("select * from t") is True


def test_rejects_small_talk(matcher):
    assert matcher.is_likely_query("hello there") is False


def test_rejects_empty_text(matcher):
    assert matcher.is_likely_query("") is False


@pytest.mark.parametrize("keyword", DUCKDB_KEYWORDS)
def test_every_keyword_matches_case_insensitively(matcher, keyword):
    assert matcher.is_likely_query(f"please {keyword.lower()} it") is True
    assert matcher.is_likely_query(f"please {keyword.title()} it") is True


def test_keywords_match_as_whole_words_only(matcher):
    # "selection", "offset", "shower", "tablet" embed keywords but are not keywords.
    assert matcher.is_likely_query("a selection of shower tablets, offset nicely") is False


def test_multi_word_keywords_allow_any_whitespace(matcher):
    assert matcher.matched_keywords("count group\n  by x") == ["GROUP BY"]
    assert "ORDER BY" in matcher.matched_keywords("order\tby name")


def test_group_alone_is_not_a_keyword(matcher):
    assert matcher.is_likely_query("our group meets on fridays") is False


def test_dialect_functions_detected(matcher):
    assert matcher.is_likely_query("read_parquet('s3://bucket/*.parquet')") is True
    assert matcher.matched_keywords("SELECT * FROM read_csv('x.csv')") == [
        "SELECT",
        "FROM",
        "READ_CSV",
    ]


def test_natural_language_false_positive_is_accepted(matcher):
    """The heuristic flags prose that happens to contain a keyword."""
    assert matcher.is_likely_query("show me something fun") is True


def test_bare_values_statement_is_a_known_miss(matcher):
    assert matcher.is_likely_query("VALUES (1, 2), (3, 4)") is False


def test_custom_keyword_set():
    matcher = SQLKeywordMatcher(keywords=["VALUES"])

    assert matcher.is_likely_query("values (1)") is True
    assert matcher.is_likely_query("select 1") is False


def test_matcher_satisfies_classifier_protocol(matcher):
    assert isinstance(matcher, QueryClassifier)


def test_module_shortcut():
    assert contains_sql_query("DESCRIBE ducks") is True
    assert contains_sql_query("what is a duck?") is False


def test_word_boundaries_are_ascii_only(matcher):
    # Accented letters are not word characters, so the keyword still stands alone.
    assert matcher.is_likely_query("éselect") is True
    assert matcher.matched_keywords("fromß") == ["FROM"]
    assert matcher.is_likely_query("selection") is False
