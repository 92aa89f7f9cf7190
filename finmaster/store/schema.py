"""Database schema initialization and migrations."""

import os
import sqlite3
from pathlib import Path


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_db_path() -> Path:
    """Get the default database path (XDG compliant)."""
    return get_xdg_data_home() / "finmaster" / "finmaster.db"


def init_database(db_path: Path | None = None) -> None:
    """Initialize the database with the required schema.

    The database is a key-value store: each key holds one JSON blob.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS blobs (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """
        )

        # Migrations for older databases
        cursor.execute("PRAGMA table_info(blobs)")
        columns = [row[1] for row in cursor.fetchall()]

        # Migration: Add 'updated_at' column if missing
        if "updated_at" not in columns:
            cursor.execute("ALTER TABLE blobs ADD COLUMN updated_at TEXT")

        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
