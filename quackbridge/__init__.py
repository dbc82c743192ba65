"""QuackBridge: a Copilot Extension agent that answers with per-user DuckDB queries."""

__version__ = "0.1.0"
