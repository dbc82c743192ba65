"""Map a user identity to its DuckDB storage file."""

from __future__ import annotations

import hashlib
from pathlib import Path

DATABASE_FILE_PREFIX = "duckdb_"
DATABASE_FILE_SUFFIX = ".db"
DIGEST_LENGTH = 16


def identity_digest(identity: str) -> str:
    """First 16 hex characters of the SHA-256 digest of ``identity``."""
    return hashlib.sha256(identity.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]


def user_database_path(identity: str, root: Path | str) -> Path:
    """
    Derive the database file for a user.

    The identity itself never appears in the path. The same identity always
    maps to the same file under ``root``.

    Example:
        >>> user_database_path("octocat", "/tmp").name
        'duckdb_a6658157f0df8390.db'
    """
    return Path(root) / f"{DATABASE_FILE_PREFIX}{identity_digest(identity)}{DATABASE_FILE_SUFFIX}"
