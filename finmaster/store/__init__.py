"""Persistence layer: the SQLite key-value store and the Record Store session.

This module re-exports the public persistence API for easy importing.
"""

from finmaster.store.blob import CURRENT_VERSION, decode_state, encode_state, migrate, state_from_dict, state_to_dict
from finmaster.store.queries import get_blob_updated_at, load_blob, save_blob, write_lock
from finmaster.store.record_store import DEFAULT_STORAGE_KEY, RecordStore
from finmaster.store.schema import get_db_path, init_database

__all__ = [
    # Schema
    "get_db_path",
    "init_database",
    # Queries
    "get_blob_updated_at",
    "load_blob",
    "save_blob",
    "write_lock",
    # Blob codec
    "CURRENT_VERSION",
    "decode_state",
    "encode_state",
    "migrate",
    "state_from_dict",
    "state_to_dict",
    # Session
    "DEFAULT_STORAGE_KEY",
    "RecordStore",
]
