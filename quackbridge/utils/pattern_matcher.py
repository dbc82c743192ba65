"""
SQL Pattern Matcher

Lexical detection of text that is plausibly a DuckDB SQL statement.

This is a heuristic pre-filter, not a parser. Natural language that happens
to contain a keyword ("show me", "with my data") is accepted as SQL, and
valid SQL built only from unlisted keywords (a bare ``VALUES`` list) is
rejected. Callers depend on the QueryClassifier protocol so a real parser
can replace it without changing the pipeline.
"""

import re
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

DUCKDB_KEYWORDS: tuple[str, ...] = (
    "SELECT",
    "INSERT",
    "UPDATE",
    "DELETE",
    "CREATE",
    "DROP",
    "ALTER",
    "COPY",
    "ATTACH",
    "FROM",
    "WHERE",
    "GROUP BY",
    "ORDER BY",
    "LIMIT",
    "READ_CSV",
    "READ_PARQUET",
    "READ_JSON_AUTO",
    "UNNEST",
    "PRAGMA",
    "EXPLAIN",
    "DESCRIBE",
    "SHOW",
    "SET",
    "WITH",
    "CASE",
    "JOIN",
    "TABLE",
)


@runtime_checkable
class QueryClassifier(Protocol):
    """Decides whether a piece of text should be run as SQL."""

    def is_likely_query(self, text: str) -> bool: ...


class SQLKeywordMatcher:
    """
    Whole-word, case-insensitive keyword matcher.

    Usage:
        matcher = SQLKeywordMatcher()
        matcher.is_likely_query("select * from t")   # True
        matcher.is_likely_query("hello there")       # False
    """

    def __init__(self, keywords: Iterable[str] | None = None):
        self.keywords = tuple(keywords) if keywords is not None else DUCKDB_KEYWORDS
        self._compile_patterns()

    def _compile_patterns(self) -> None:
        # Multi-word keywords match across any run of whitespace. Word boundaries
        # are ASCII-only, so "éselect" still contains SELECT.
        alternatives = [r"\s+".join(map(re.escape, kw.split())) for kw in self.keywords]
        self._pattern = re.compile(
            r"\b(?:" + "|".join(alternatives) + r")\b", re.IGNORECASE | re.ASCII
        )
        self._keyword_patterns = [
            (keyword, re.compile(r"\b" + alternative + r"\b", re.IGNORECASE | re.ASCII))
            for keyword, alternative in zip(self.keywords, alternatives)
        ]

    def is_likely_query(self, text: str) -> bool:
        if not text:
            return False
        return self._pattern.search(text) is not None

    def matched_keywords(self, text: str) -> list[str]:
        """Keywords found in ``text``, in keyword-list order."""
        return [keyword for keyword, pattern in self._keyword_patterns if pattern.search(text)]


_default_matcher = SQLKeywordMatcher()


def contains_sql_query(text: str) -> bool:
    """Module-level shortcut using the default DuckDB keyword set."""
    return _default_matcher.is_likely_query(text)
