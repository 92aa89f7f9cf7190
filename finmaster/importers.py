"""File readers for bulk imports (spreadsheets and JSON backups)."""

import logging
import zipfile
from pathlib import Path
from typing import Any

import pandas as pd

from finmaster.domain.errors import ImportFailedError

logger = logging.getLogger(__name__)

SPREADSHEET_SUFFIXES = (".xlsx", ".xls")
CSV_SUFFIXES = (".csv",)


def read_sheet_rows(path: Path) -> list[dict[str, Any]]:
    """Read the first sheet of a workbook (or a CSV file) as row dicts.

    Args:
        path: .xlsx, .xls or .csv file.

    Returns:
        One dict per row, keyed by column header. Empty cells are None.

    Raises:
        ImportFailedError: If the file is missing, has an unsupported type,
            or can't be parsed.
    """
    suffix = path.suffix.lower()
    if suffix not in SPREADSHEET_SUFFIXES + CSV_SUFFIXES:
        raise ImportFailedError(f"Unsupported file type '{suffix}'. Use .xlsx, .xls or .csv")

    try:
        if suffix in CSV_SUFFIXES:
            df = pd.read_csv(path)
        else:
            df = pd.read_excel(path, sheet_name=0)
    except FileNotFoundError as e:
        raise ImportFailedError(f"File not found: {path}") from e
    except (ValueError, ImportError, OSError, zipfile.BadZipFile, pd.errors.ParserError) as e:
        raise ImportFailedError(f"Could not read spreadsheet '{path.name}': {e}") from e

    df = df.astype(object).where(pd.notna(df), None)
    rows: list[dict[str, Any]] = df.to_dict(orient="records")
    logger.info("Read %d rows from %s", len(rows), path)
    return rows


def read_backup_text(path: Path) -> str:
    """Read a JSON backup file.

    Raises:
        ImportFailedError: If the file can't be read.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ImportFailedError(f"Could not read backup '{path.name}': {e}") from e
