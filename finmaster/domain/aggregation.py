"""Pure functions for derived figures over a Record Store snapshot.

This module contains the functional core for aggregation:
- No I/O operations (no database, no console, no files)
- No side effects
- Every function is total: missing or invalid numbers count as 0
- Iteration order never changes a result (sums and partitions only)
- Results stay finite: overflowing sums are clamped

All monetary amounts are in reais (Money type).
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from finmaster.dates import next_month_label
from finmaster.domain.models import CategoryName, Money, MonthLabel
from finmaster.domain.numbers import clamp_amount, coerce_amount, coerce_count, sum_amounts
from finmaster.domain.records import (
    EXPENSE_FIELDS,
    INCOME_FIELDS,
    TRIP_COST_FIELDS,
    AppState,
    CategorizedExpenseRecord,
    LoanRecord,
    MonthRecord,
    SavingsTransactionRecord,
    SavingsType,
    TripExpenseRecord,
    VehicleCategory,
    VehicleExpenseRecord,
    VehicleType,
    belongs_to_month,
)


class BalanceMode(str, Enum):
    """How a month's balance is computed in the monthly series."""

    INCOME = "income"  # income - expenses
    NEXT_SALARY = "next_salary"  # next month's salary - expenses


@dataclass(frozen=True)
class VehicleCosts:
    """Immutable fuel/maintenance sums for one vehicle type."""

    fuel: Money = Money(0.0)
    maintenance: Money = Money(0.0)

    @property
    def total(self) -> Money:
        return clamp_amount(self.fuel + self.maintenance)


@dataclass(frozen=True)
class VehicleBreakdown:
    """Immutable vehicle costs by type and category."""

    car: VehicleCosts
    moto: VehicleCosts

    @property
    def total(self) -> Money:
        return clamp_amount(self.car.total + self.moto.total)


@dataclass(frozen=True)
class LoanPosition:
    """Immutable installment-based loan position."""

    paid: Money
    remaining: Money


@dataclass(frozen=True)
class SavingsPosition:
    """Immutable savings net position."""

    total: Money
    earnings: Money


@dataclass(frozen=True)
class MonthSummary:
    """Immutable per-month figures shared by tables, charts and the report."""

    month_id: str
    label: MonthLabel
    year: int
    fixed_expenses: Money
    categorized_expenses: Money
    total_expenses: Money
    total_income: Money
    balance: Money
    next_month_salary: Money
    next_salary_balance: Money


@dataclass(frozen=True)
class DashboardSummary:
    """Immutable top-line figures."""

    savings_total: Money
    savings_earnings: Money
    loans_paid: Money
    loans_remaining: Money
    categorized_total: Money
    travel_total: Money
    vehicle_total: Money


_CAMEL_ALIASES = {"m_pago": "mPago", "recarga_pay": "recargaPay"}


def _field(source: Any, name: str) -> Money:
    """Read one numeric field from a dataclass or a mapping, as a safe amount."""
    if source is None:
        return Money(0.0)
    if isinstance(source, Mapping):
        raw = source.get(name)
        if raw is None and name in _CAMEL_ALIASES:
            raw = source.get(_CAMEL_ALIASES[name])
        return coerce_amount(raw)
    return coerce_amount(getattr(source, name, None))


def total_expenses(expenses: Any) -> Money:
    """Sum the seven fixed expense fields.

    Args:
        expenses: MonthlyExpenses, a mapping of field names, or None.

    Returns:
        Sum in reais; absent or non-numeric fields count as 0.
    """
    return sum_amounts(_field(expenses, name) for name in EXPENSE_FIELDS)


def total_income(income: Any) -> Money:
    """Sum the four income fields.

    Args:
        income: MonthlyIncome, a mapping of field names, or None.

    Returns:
        Sum in reais; absent or non-numeric fields count as 0.
    """
    return sum_amounts(_field(income, name) for name in INCOME_FIELDS)


def categorized_total(categorized: Iterable[CategorizedExpenseRecord]) -> Money:
    """Sum the value of every categorized expense."""
    return sum_amounts(coerce_amount(c.value) for c in categorized)


def categorized_total_for_month(month: MonthRecord, categorized: Iterable[CategorizedExpenseRecord]) -> Money:
    """Sum the categorized expenses associated with a month record."""
    return categorized_total(c for c in categorized if belongs_to_month(c, month))


def monthly_balance(month: MonthRecord, categorized: Iterable[CategorizedExpenseRecord]) -> Money:
    """Calculate a month's balance including its categorized expenses.

    Args:
        month: Month record.
        categorized: All categorized expenses (may be empty).

    Returns:
        income - (fixed expenses + categorized expenses of the month).
    """
    spent = clamp_amount(total_expenses(month.expenses) + categorized_total_for_month(month, categorized))
    return clamp_amount(total_income(month.income) - spent)


def next_month_salary(month_label: str, months: Iterable[MonthRecord]) -> Money:
    """Find the salary of the month following a label.

    Models paying this month's bills from next month's paycheck. December
    wraps to January.

    Args:
        month_label: Current month label.
        months: All month records.

    Returns:
        Salary of the first record labelled with the successor month, or 0
        if there is none or the label is not canonical.
    """
    successor = next_month_label(month_label)
    if successor is None:
        return Money(0.0)
    for month in months:
        if month.month == successor:
            return _field(month.income, "salario")
    return Money(0.0)


def vehicle_breakdown(vehicle_expenses: Iterable[VehicleExpenseRecord]) -> VehicleBreakdown:
    """Partition vehicle costs by vehicle type and category.

    Returns:
        VehicleBreakdown with four running sums.
    """
    sums = {
        (VehicleType.CAR, VehicleCategory.FUEL): 0.0,
        (VehicleType.CAR, VehicleCategory.MAINTENANCE): 0.0,
        (VehicleType.MOTORCYCLE, VehicleCategory.FUEL): 0.0,
        (VehicleType.MOTORCYCLE, VehicleCategory.MAINTENANCE): 0.0,
    }
    for expense in vehicle_expenses:
        vehicle = VehicleType.CAR if expense.type == VehicleType.CAR else VehicleType.MOTORCYCLE
        category = VehicleCategory.FUEL if expense.category == VehicleCategory.FUEL else VehicleCategory.MAINTENANCE
        sums[(vehicle, category)] += coerce_amount(expense.value)

    return VehicleBreakdown(
        car=VehicleCosts(
            fuel=clamp_amount(sums[(VehicleType.CAR, VehicleCategory.FUEL)]),
            maintenance=clamp_amount(sums[(VehicleType.CAR, VehicleCategory.MAINTENANCE)]),
        ),
        moto=VehicleCosts(
            fuel=clamp_amount(sums[(VehicleType.MOTORCYCLE, VehicleCategory.FUEL)]),
            maintenance=clamp_amount(sums[(VehicleType.MOTORCYCLE, VehicleCategory.MAINTENANCE)]),
        ),
    )


def loan_installments_total(loan: LoanRecord) -> Money:
    """Calculate installments x installment value for one loan."""
    return clamp_amount(float(coerce_count(loan.installments)) * coerce_amount(loan.installment_value))


def loan_position(loans: Iterable[LoanRecord]) -> LoanPosition:
    """Calculate paid and remaining loan amounts from installment counts.

    total_value and interest_monthly are not read. The figures diverge from
    total_value whenever it disagrees with installments x installment_value.
    """
    paid = 0.0
    remaining = 0.0
    for loan in loans:
        installments = coerce_count(loan.installments)
        paid_count = coerce_count(loan.paid_installments)
        value = coerce_amount(loan.installment_value)
        paid += float(paid_count) * value
        remaining += (float(installments) - float(paid_count)) * value
    return LoanPosition(paid=clamp_amount(paid), remaining=clamp_amount(remaining))


def savings_position(transactions: Iterable[SavingsTransactionRecord]) -> SavingsPosition:
    """Calculate the signed savings total and the yield-only earnings.

    Deposits and yields add, withdrawals subtract.
    """
    total = 0.0
    earnings = 0.0
    for transaction in transactions:
        value = coerce_amount(transaction.value)
        if transaction.type == SavingsType.WITHDRAWAL:
            total -= value
        else:
            total += value
        if transaction.type == SavingsType.YIELD:
            earnings += value
    return SavingsPosition(total=clamp_amount(total), earnings=clamp_amount(earnings))


def trip_total(trip: TripExpenseRecord) -> Money:
    """Sum the six cost fields of a trip."""
    return sum_amounts(_field(trip, name) for name in TRIP_COST_FIELDS)


def travel_total(trips: Iterable[TripExpenseRecord]) -> Money:
    """Sum the cost of every trip."""
    return sum_amounts(trip_total(t) for t in trips)


def category_totals(categorized: Iterable[CategorizedExpenseRecord]) -> list[tuple[CategoryName, Money]]:
    """Sum categorized expenses per category label.

    Returns:
        List of (category, total) in first-seen order.
    """
    totals: dict[CategoryName, float] = {}
    for expense in categorized:
        totals[expense.category] = totals.get(expense.category, 0.0) + coerce_amount(expense.value)
    return [(category, clamp_amount(amount)) for category, amount in totals.items()]


def month_summary(month: MonthRecord, state: AppState) -> MonthSummary:
    """Compute every per-month figure for one month record.

    Args:
        month: Month record.
        state: Snapshot providing categorized expenses and the other months.

    Returns:
        MonthSummary with both balance flavours.
    """
    fixed = total_expenses(month.expenses)
    categorized = categorized_total_for_month(month, state.categorized_expenses)
    spent = clamp_amount(fixed + categorized)
    income = total_income(month.income)
    salary = next_month_salary(month.month, state.months)

    return MonthSummary(
        month_id=month.id,
        label=month.month,
        year=month.year,
        fixed_expenses=fixed,
        categorized_expenses=categorized,
        total_expenses=spent,
        total_income=income,
        balance=clamp_amount(income - spent),
        next_month_salary=salary,
        next_salary_balance=clamp_amount(salary - spent),
    )


def month_summaries(state: AppState) -> list[MonthSummary]:
    """Compute month summaries in month record insertion order."""
    return [month_summary(m, state) for m in state.months]


def select_balance(summary: MonthSummary, mode: BalanceMode) -> Money:
    """Pick the balance flavour configured for display."""
    if mode == BalanceMode.NEXT_SALARY:
        return summary.next_salary_balance
    return summary.balance


def compute_dashboard(state: AppState) -> DashboardSummary:
    """Compute the top-line dashboard figures for a snapshot."""
    savings = savings_position(state.savings)
    loans = loan_position(state.loans)

    return DashboardSummary(
        savings_total=savings.total,
        savings_earnings=savings.earnings,
        loans_paid=loans.paid,
        loans_remaining=loans.remaining,
        categorized_total=categorized_total(state.categorized_expenses),
        travel_total=travel_total(state.trips),
        vehicle_total=vehicle_breakdown(state.vehicle_expenses).total,
    )
