"""
Result Formatting

Render query results as ordered lists of Markdown text chunks so they can be
streamed to the Copilot client one piece at a time.

Two interchangeable renderers are provided:
    - TableRenderer: a bare Markdown table
    - AnnotatedRenderer: the SQL in a ```sql block, then the table in a
      second fenced block
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Literal, Protocol

from quackbridge.connectors.base import QueryResult

NO_RESULTS_LINE = "Ok. No results returned.\n"

RenderMode = Literal["table", "annotated"]


class ResultRenderer(Protocol):
    def render(self, query: str, result: QueryResult) -> list[str]: ...


def format_cell(value: Any) -> str:
    """Stringify one cell so it cannot break the table layout."""
    if value is None:
        return ""
    text = str(value)
    return text.replace("|", "\\|").replace("\r\n", " ").replace("\n", " ").replace("\r", " ")


class TableRenderer:
    """Markdown table renderer."""

    def render(self, query: str, result: QueryResult) -> list[str]:
        return self.render_rows(result.rows)

    def render_rows(self, rows: Sequence[dict[str, Any]]) -> list[str]:
        """
        Render rows as Markdown table chunks.

        The header comes from the keys of the first row. One chunk per line,
        followed by a blank line. An empty result yields only NO_RESULTS_LINE.
        """
        if not rows:
            return [NO_RESULTS_LINE]

        headers = list(rows[0].keys())
        chunks = [
            "| " + " | ".join(format_cell(header) for header in headers) + " |\n",
            "| " + " | ".join("---" for _ in headers) + " |\n",
        ]
        for row in rows:
            chunks.append("| " + " | ".join(format_cell(row.get(h)) for h in headers) + " |\n")
        chunks.append("\n")
        return chunks


class AnnotatedRenderer:
    """Echo the query in a SQL block, followed by the fenced table."""

    def __init__(self, table_renderer: TableRenderer | None = None):
        self.table_renderer = table_renderer or TableRenderer()

    def render(self, query: str, result: QueryResult) -> list[str]:
        chunks = ["```sql\n", query, " \n", "```\n", "\n", "```\n"]
        chunks.extend(self.table_renderer.render_rows(result.rows))
        chunks.append("```\n")
        return chunks


def create_renderer(mode: RenderMode = "annotated") -> ResultRenderer:
    """Build the renderer for a configured mode."""
    if mode == "table":
        return TableRenderer()
    if mode == "annotated":
        return AnnotatedRenderer()
    raise ValueError(f"Unknown render mode: {mode}")
