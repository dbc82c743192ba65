"""
Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from quackbridge.config import clear_settings_cache, get_settings
from quackbridge.connectors.base import QueryResult
from quackbridge.github.models import GitHubUser
from quackbridge.llm.models import LLMResponse

# ============================================================================
# Environment and Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """
    Point storage at a per-test directory and reload settings.

    Runs automatically so no test ever writes DuckDB files into /tmp.
    """
    monkeypatch.setenv("QUACKBRIDGE_ENV_SOURCE", "environment")
    monkeypatch.setenv("STORAGE_ROOT", str(tmp_path / "storage"))
    clear_settings_cache()
    yield get_settings()
    clear_settings_cache()


# ============================================================================
# Common Test Data
# ============================================================================


@pytest.fixture
def sample_rows() -> list[dict]:
    """Two-row, two-column result set."""
    return [{"a": 1, "b": 2}, {"a": 3, "b": 4}]


@pytest.fixture
def sample_result(sample_rows) -> QueryResult:
    return QueryResult(
        rows=sample_rows,
        row_count=len(sample_rows),
        columns=["a", "b"],
        execution_time_ms=1.5,
    )


@pytest.fixture
def empty_result() -> QueryResult:
    return QueryResult(rows=[], row_count=0, columns=[], execution_time_ms=0.4)


# ============================================================================
# Mock Collaborators
# ============================================================================


@pytest.fixture
def llm_response():
    """Factory for prompt-provider responses."""

    def _make(content: str) -> LLMResponse:
        return LLMResponse(content=content, model="gpt-4o", provider="copilot")

    return _make


@pytest.fixture
def mock_llm(llm_response):
    """
    Mock prompt provider.

    Configure answers with ``mock_llm.prompt.return_value`` or
    ``mock_llm.prompt.side_effect``.
    """
    llm = MagicMock()
    llm.prompt = AsyncMock(return_value=llm_response("Hello from Copilot"))
    llm.close = AsyncMock()
    return llm


@pytest.fixture
def mock_github():
    """Mock GitHub client resolving every token to ``octocat``."""
    github = MagicMock()
    github.get_authenticated_user = AsyncMock(return_value=GitHubUser(login="octocat", id=1))
    github.close = AsyncMock()
    return github
