"""Shared plumbing for commands: console, settings and the opened store."""

import sqlite3
import sys
from typing import NoReturn

from rich.console import Console

from finmaster.config import Settings, load_settings
from finmaster.store.record_store import RecordStore
from finmaster.store.schema import get_db_path

console = Console()


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]{message}[/red]", style="bold")
    sys.exit(1)


def open_store(settings: Settings | None = None) -> RecordStore:
    """Open the Record Store configured for this user.

    A missing database is created on first use.

    Args:
        settings: Effective settings. If None, loads them from the config file.

    Returns:
        Loaded RecordStore.
    """
    if settings is None:
        settings = load_settings()

    try:
        store = RecordStore(settings.storage_key, get_db_path())
        if not store.load():
            console.print("[yellow]Saved data could not be read; starting from an empty store[/yellow]")
        return store
    except sqlite3.Error as e:
        fail(f"Database error: {e}")
