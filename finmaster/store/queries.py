"""Database query functions for the key-value blob store."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from finmaster.store.schema import get_db_path, init_database

DEFAULT_BUSY_TIMEOUT = 5.0


def _connect(db_path: Path | None = None, timeout: float = DEFAULT_BUSY_TIMEOUT) -> sqlite3.Connection:
    """Create a database connection with row factory.

    The schema is created on first use, so a missing database behaves like
    an empty one.

    Args:
        db_path: Path to the database file. If None, uses default location.
        timeout: Seconds to wait for another connection's lock.

    Returns:
        Database connection with row_factory configured.
    """
    if db_path is None:
        db_path = get_db_path()
    if not db_path.exists():
        init_database(db_path)
    conn = sqlite3.connect(db_path, timeout=timeout)
    conn.row_factory = sqlite3.Row
    return conn


def is_busy_error(error: sqlite3.Error) -> bool:
    """Check whether an error means another connection holds the lock."""
    code = getattr(error, "sqlite_errorcode", None)
    return code is not None and code & 0xFF == sqlite3.SQLITE_BUSY


def read_blob(conn: sqlite3.Connection, key: str) -> str | None:
    """Read the blob stored under a key on an open connection."""
    cursor = conn.cursor()
    cursor.execute("SELECT value FROM blobs WHERE key = ?", (key,))
    row = cursor.fetchone()
    return row["value"] if row else None


def write_blob(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Upsert the blob stored under a key on an open connection (no commit)."""
    conn.execute(
        """
        INSERT INTO blobs (key, value, updated_at) VALUES (?, ?, datetime('now'))
        ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """,
        (key, value),
    )


@contextmanager
def write_lock(db_path: Path | None = None, timeout: float = DEFAULT_BUSY_TIMEOUT) -> Iterator[sqlite3.Connection]:
    """Hold the database write lock for a read-modify-write cycle.

    The lock is taken with BEGIN IMMEDIATE, so it excludes writers in other
    processes too. Writes made through the yielded connection commit when the
    block exits and roll back if it raises.

    Args:
        db_path: Path to the database file. If None, uses default location.
        timeout: Seconds to wait for the lock. 0 fails immediately.

    Raises:
        sqlite3.OperationalError: If the lock isn't acquired within timeout
            (see is_busy_error).
    """
    conn = _connect(db_path, timeout)
    conn.isolation_level = None
    try:
        conn.execute("BEGIN IMMEDIATE")
        # COMMIT waits for readers even when acquiring didn't
        conn.execute(f"PRAGMA busy_timeout = {int(DEFAULT_BUSY_TIMEOUT * 1000)}")
        try:
            yield conn
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise
    finally:
        conn.close()


def load_blob(key: str, db_path: Path | None = None) -> str | None:
    """Load the blob stored under a key.

    Args:
        key: Storage key.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Stored text, or None if nothing is stored under the key.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        return read_blob(conn, key)


def save_blob(key: str, value: str, db_path: Path | None = None) -> None:
    """Store a blob under a key, replacing any previous value.

    Args:
        key: Storage key.
        value: Text to store.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with write_lock(db_path) as conn:
        write_blob(conn, key, value)


def get_blob_updated_at(key: str, db_path: Path | None = None) -> str | None:
    """Get the UTC timestamp of the last save under a key."""
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT updated_at FROM blobs WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row["updated_at"] if row else None
