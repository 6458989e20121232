"""Shared SQLite helpers: WAL mode, busy timeout, row_factory defaults."""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

# Concurrent checks share one file; wait for a writer instead of failing
BUSY_TIMEOUT_SECONDS = 10.0


def wal_connect(db_path: str | Path, row_factory: bool = False) -> sqlite3.Connection:
    """Open SQLite connection with WAL journal mode and foreign keys on.

    Args:
        db_path: Path to database file.
        row_factory: If True, set conn.row_factory = sqlite3.Row.
    """
    conn = sqlite3.connect(str(db_path), timeout=BUSY_TIMEOUT_SECONDS)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    if row_factory:
        conn.row_factory = sqlite3.Row
    return conn


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string for TIMESTAMP columns."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
