"""The Record Store session: current snapshot plus its durable mirror.

RecordStore owns the only mutable reference to the AppState. Aggregation,
chart and report functions receive `store.state`, an immutable snapshot.

Every write is a read-modify-write cycle under the database write lock: the
stored snapshot is re-read, mutated and saved in one transaction, so
sessions in other processes never overwrite each other's changes.
"""

import logging
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import ExitStack, contextmanager
from datetime import date
from pathlib import Path

from finmaster.domain.errors import (
    BlobFormatError,
    ConfirmationRequiredError,
    ImportFailedError,
    ImportInProgressError,
)
from finmaster.domain.records import AppState, MonthRecord, append_months
from finmaster.domain.spreadsheet import analyze_sheet_columns, parse_sheet_rows
from finmaster.importers import read_backup_text, read_sheet_rows
from finmaster.store.blob import decode_state, encode_state
from finmaster.store.queries import (
    get_blob_updated_at,
    is_busy_error,
    load_blob,
    read_blob,
    write_blob,
    write_lock,
)

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "finance_app_data"


class RecordStore:
    """Session object holding the current snapshot.

    Every mutation saves the full snapshot before it becomes current, so a
    failed save leaves the store unchanged.
    """

    def __init__(self, storage_key: str = DEFAULT_STORAGE_KEY, db_path: Path | None = None) -> None:
        self.storage_key = storage_key
        self.db_path = db_path
        self._state = AppState()

    @classmethod
    def open(cls, storage_key: str = DEFAULT_STORAGE_KEY, db_path: Path | None = None) -> "RecordStore":
        """Create a store and load its persisted snapshot."""
        store = cls(storage_key, db_path)
        store.load()
        return store

    @property
    def state(self) -> AppState:
        return self._state

    def _decode_stored(self, text: str | None) -> tuple[AppState, bool]:
        if text is None:
            return AppState(), True
        try:
            return decode_state(text), True
        except BlobFormatError as e:
            logger.warning("Could not load saved data under '%s': %s", self.storage_key, e)
            return AppState(), False

    def load(self) -> bool:
        """Load the persisted snapshot.

        A malformed blob is logged and the store falls back to the empty
        state; the blob itself stays in place until the next save.

        Returns:
            True if the blob was loaded (or absent), False if it was malformed.

        Raises:
            sqlite3.Error: If the database can't be read.
        """
        self._state, loaded = self._decode_stored(load_blob(self.storage_key, self.db_path))
        if loaded:
            logger.debug("Loaded %d records from '%s'", self._state.count(), self.storage_key)
        return loaded

    def last_saved_at(self) -> str | None:
        """UTC timestamp of the last save, or None if nothing was saved yet."""
        return get_blob_updated_at(self.storage_key, self.db_path)

    def _write(self, conn: sqlite3.Connection, new_state: AppState) -> None:
        write_blob(conn, self.storage_key, encode_state(new_state))

    def apply(self, mutation: Callable[[AppState], AppState]) -> AppState:
        """Apply a pure mutation to the stored snapshot and persist the result.

        The snapshot is re-read under the write lock, so changes saved by
        other sessions since this one loaded are kept.

        Args:
            mutation: Function from the current snapshot to the new one.

        Returns:
            The new snapshot.

        Raises:
            sqlite3.Error: If the database is locked past the timeout or
                can't be written (store unchanged).
        """
        with write_lock(self.db_path) as conn:
            current, _ = self._decode_stored(read_blob(conn, self.storage_key))
            new_state = mutation(current)
            self._write(conn, new_state)
        self._state = new_state
        return new_state

    @contextmanager
    def import_guard(self) -> Iterator[sqlite3.Connection]:
        """Hold the database write lock for a bulk import.

        A second import while one is running, in this process or another,
        fails fast instead of waiting.

        Yields:
            Connection holding the lock; writes commit when the block exits.

        Raises:
            ImportInProgressError: If another session holds the lock.
        """
        with ExitStack() as stack:
            try:
                conn = stack.enter_context(write_lock(self.db_path, timeout=0))
            except sqlite3.OperationalError as e:
                if not is_busy_error(e):
                    raise
                raise ImportInProgressError("Another import is still running") from e
            yield conn

    def restore_backup_text(self, text: str) -> AppState:
        """Replace the whole store with a backup.

        Raises:
            ImportFailedError: If the backup is malformed (store untouched).
            ImportInProgressError: If another import is running.
        """
        with self.import_guard() as conn:
            try:
                restored = decode_state(text)
            except BlobFormatError as e:
                raise ImportFailedError(f"Invalid backup: {e}") from e
            logger.info("Restoring backup with %d records", restored.count())
            self._write(conn, restored)
        self._state = restored
        return restored

    def restore_backup(self, path: Path) -> AppState:
        """Replace the whole store with a backup file."""
        return self.restore_backup_text(read_backup_text(path))

    def import_sheet(self, path: Path, today: date | None = None) -> list[MonthRecord]:
        """Append one month record per spreadsheet row.

        Returns:
            The imported month records.

        Raises:
            ImportFailedError: If the file can't be read (store untouched).
            ImportInProgressError: If another import is running.
        """
        with self.import_guard() as conn:
            rows = read_sheet_rows(path)
            if rows:
                _, ignored = analyze_sheet_columns(rows[0].keys())
                if ignored:
                    logger.info("Ignoring unrecognized columns: %s", ", ".join(ignored))
            months = parse_sheet_rows(rows, today)
            current, _ = self._decode_stored(read_blob(conn, self.storage_key))
            new_state = append_months(current, months)
            self._write(conn, new_state)
        self._state = new_state
        logger.info("Imported %d months from %s", len(months), path)
        return months

    def export_backup(self) -> str:
        """Serialize the current snapshot as pretty-printed backup JSON."""
        return encode_state(self._state, indent=2)

    def clear(self, confirmed: bool = False) -> None:
        """Reset the store to the empty state. Irreversible.

        Raises:
            ConfirmationRequiredError: Unless confirmed is True.
        """
        if not confirmed:
            raise ConfirmationRequiredError("Clearing all records requires confirmation")
        count = self._state.count()
        self.apply(lambda _: AppState())
        logger.warning("Cleared %d records from '%s'", count, self.storage_key)
