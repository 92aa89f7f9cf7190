"""Pure functions mapping spreadsheet rows to month records.

Rows come from the first sheet of an imported workbook (or a CSV), one
dict per row keyed by column header. Unrecognized columns are ignored and
missing numbers become 0.
"""

import math
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from finmaster.dates import MONTHS_BR, resolve_month_label
from finmaster.domain.models import Money, MonthLabel, RecordId
from finmaster.domain.numbers import coerce_amount, coerce_count
from finmaster.domain.records import MonthlyExpenses, MonthlyIncome, MonthRecord, new_record_id

MONTH_COLUMNS = ("Mes", "Mês")
YEAR_COLUMNS = ("Ano",)

# Field name -> accepted column headers, in priority order
EXPENSE_COLUMNS: dict[str, tuple[str, ...]] = {
    "inter": ("Inter",),
    "nubank": ("Nubank",),
    "m_pago": ("MPago",),
    "agua": ("Agua",),
    "energia": ("Energia",),
    "outros": ("Outros_Gastos",),
    "pix": ("Pix",),
}

INCOME_COLUMNS: dict[str, tuple[str, ...]] = {
    "salario": ("Salario", "Salário"),
    "bonus": ("Bonus", "Bônus"),
    "outros": ("Outros_Ganhos",),
    "recarga_pay": ("RecargaPay",),
}


def recognized_columns() -> tuple[str, ...]:
    """List every column header the importer understands."""
    columns: list[str] = [*MONTH_COLUMNS, *YEAR_COLUMNS]
    for headers in (*EXPENSE_COLUMNS.values(), *INCOME_COLUMNS.values()):
        columns.extend(headers)
    return tuple(columns)


def analyze_sheet_columns(headers: Iterable[str]) -> tuple[list[str], list[str]]:
    """Split sheet headers into recognized and ignored columns.

    Args:
        headers: Column headers from the sheet.

    Returns:
        Tuple of (recognized, ignored) in sheet order.
    """
    known = set(recognized_columns())
    recognized: list[str] = []
    ignored: list[str] = []
    for header in headers:
        (recognized if str(header).strip() in known else ignored).append(str(header))
    return recognized, ignored


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return value == 0


def _first_present(row: Mapping[str, Any], columns: tuple[str, ...]) -> Any:
    """Get the first non-blank value among alternative column spellings."""
    for column in columns:
        value = row.get(column)
        if not _is_blank(value):
            return value
    return None


def parse_month_cell(value: Any) -> MonthLabel:
    """Resolve a month cell to a canonical label, defaulting to January.

    Accepts labels in any case or without accents and month numbers 1-12.
    """
    if _is_blank(value):
        return MONTHS_BR[0]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(int(value))
    return resolve_month_label(str(value)) or MONTHS_BR[0]


def parse_sheet_row(
    row: Mapping[str, Any],
    today: date | None = None,
    record_id: RecordId | None = None,
) -> MonthRecord:
    """Map one spreadsheet row to a new month record.

    Args:
        row: Column header -> cell value.
        today: Reference date for the default year.
        record_id: Optional id (generated if omitted).

    Returns:
        MonthRecord with a fresh id.
    """
    if today is None:
        today = date.today()

    clean = {str(k).strip(): v for k, v in row.items()}

    year = coerce_count(_first_present(clean, YEAR_COLUMNS)) or today.year

    expenses = MonthlyExpenses(
        **{name: _amount(clean, columns) for name, columns in EXPENSE_COLUMNS.items()}
    )
    income = MonthlyIncome(
        **{name: _amount(clean, columns) for name, columns in INCOME_COLUMNS.items()}
    )

    return MonthRecord(
        id=record_id or new_record_id(),
        month=parse_month_cell(_first_present(clean, MONTH_COLUMNS)),
        year=year,
        expenses=expenses,
        income=income,
    )


def _amount(row: Mapping[str, Any], columns: tuple[str, ...]) -> Money:
    return coerce_amount(_first_present(row, columns))


def parse_sheet_rows(rows: Iterable[Mapping[str, Any]], today: date | None = None) -> list[MonthRecord]:
    """Map every row of a sheet to month records, preserving row order."""
    return [parse_sheet_row(row, today) for row in rows]
