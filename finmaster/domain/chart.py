"""Pure functions shaping aggregates into chart series.

Series are re-derived from the snapshot on every call. An empty
collection yields an empty series; renderers show an explicit empty state.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from finmaster.domain.aggregation import BalanceMode, category_totals, month_summaries, select_balance
from finmaster.domain.models import CategoryName, Money, MonthLabel
from finmaster.domain.records import AppState, CategorizedExpenseRecord

CATEGORY_COLORS: dict[str, str] = {
    "Alimentação": "#fb923c",
    "Saúde": "#f87171",
    "Lazer": "#c084fc",
    "Educação": "#60a5fa",
    "Transporte": "#4ade80",
    "Vestuário": "#f472b6",
    "Presentes": "#fbbf24",
    "Assinaturas": "#2dd4bf",
    "Outros": "#94a3b8",
}

DEFAULT_CATEGORY_COLOR = "#6366f1"

EXPENSE_COLOR = "#f43f5e"
INCOME_COLOR = "#10b981"


@dataclass(frozen=True)
class MonthlyPoint:
    """Immutable monthly bar chart entry."""

    label: MonthLabel
    total_expenses: Money
    total_income: Money
    balance: Money


@dataclass(frozen=True)
class CategoryPoint:
    """Immutable category bar chart entry."""

    label: CategoryName
    value: Money
    color: str


def category_color(category: str) -> str:
    """Look up the display color of a category, with a default fallback."""
    return CATEGORY_COLORS.get(category, DEFAULT_CATEGORY_COLOR)


def monthly_series(state: AppState, mode: BalanceMode = BalanceMode.INCOME) -> tuple[MonthlyPoint, ...]:
    """Build the monthly expenses/income series.

    Args:
        state: Snapshot.
        mode: Balance flavour (income-based or next-month-salary-based).

    Returns:
        One point per month record, in insertion order.
    """
    return tuple(
        MonthlyPoint(
            label=summary.label,
            total_expenses=summary.total_expenses,
            total_income=summary.total_income,
            balance=select_balance(summary, mode),
        )
        for summary in month_summaries(state)
    )


def category_series(categorized: Iterable[CategorizedExpenseRecord]) -> tuple[CategoryPoint, ...]:
    """Build the per-category series in first-seen order."""
    return tuple(
        CategoryPoint(label=category, value=amount, color=category_color(category))
        for category, amount in category_totals(categorized)
    )


def calculate_bar_length(amount: Money, max_amount: Money, bar_width: int) -> int:
    """Calculate histogram bar length.

    Args:
        amount: Amount to display.
        max_amount: Maximum absolute amount in the series.
        bar_width: Maximum bar width in characters.

    Returns:
        Bar length in characters.
    """
    if max_amount <= 0:
        return 0
    return int((abs(amount) / max_amount) * bar_width)
