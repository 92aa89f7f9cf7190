"""Pure functions assembling the printable financial report.

This module contains the functional core for reporting operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

Every currency cell is already formatted with format_currency; renderers
only lay the tables out.
"""

from dataclasses import dataclass
from datetime import datetime

from finmaster.domain.aggregation import (
    DashboardSummary,
    compute_dashboard,
    loan_position,
    month_summaries,
    trip_total,
)
from finmaster.domain.currency import format_currency
from finmaster.domain.records import AppState

REPORT_TITLE = "Relatório Financeiro Consolidado"
REPORT_FILENAME = "relatorio_financeiro_completo.pdf"


@dataclass(frozen=True)
class ReportSection:
    """Immutable numbered report table."""

    number: int
    title: str
    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]

    @property
    def heading(self) -> str:
        return f"{self.number}. {self.title}"


@dataclass(frozen=True)
class FinancialReport:
    """Immutable report: header data plus sections in display order."""

    title: str
    generated_at: str
    sections: tuple[ReportSection, ...]


def format_generated_at(moment: datetime) -> str:
    """Format the generation timestamp as dd/mm/yyyy, HH:MM:SS."""
    return moment.strftime("%d/%m/%Y, %H:%M:%S")


def summary_rows(dashboard: DashboardSummary, include_categorized: bool) -> tuple[tuple[str, ...], ...]:
    """Build the executive summary rows.

    Args:
        dashboard: Top-line figures.
        include_categorized: Whether the categorized-expense row is shown.

    Returns:
        Tuple of (label, formatted value) rows.
    """
    rows: list[tuple[str, str]] = [
        ("Patrimônio na Poupança", format_currency(dashboard.savings_total)),
        ("Saldo Devedor de Empréstimos", format_currency(dashboard.loans_remaining)),
    ]
    if include_categorized:
        rows.append(("Gastos Variáveis por Categoria", format_currency(dashboard.categorized_total)))
    rows.append(("Investimento em Viagens", format_currency(dashboard.travel_total)))
    rows.append(("Gastos Totais com Veículos", format_currency(dashboard.vehicle_total)))
    return tuple(rows)


def monthly_rows(state: AppState) -> tuple[tuple[str, ...], ...]:
    """Build one row per month record: month, expenses, income, balance."""
    return tuple(
        (
            summary.label,
            format_currency(summary.total_expenses),
            format_currency(summary.total_income),
            format_currency(summary.balance),
        )
        for summary in month_summaries(state)
    )


def category_rows(state: AppState) -> tuple[tuple[str, ...], ...]:
    """Build one row per categorized expense."""
    return tuple((c.category, c.month, c.description, format_currency(c.value)) for c in state.categorized_expenses)


def loan_rows(state: AppState) -> tuple[tuple[str, ...], ...]:
    """Build one row per loan."""
    return tuple(
        (
            loan.description,
            f"{loan.paid_installments}/{loan.installments}",
            format_currency(loan.installment_value),
            format_currency(loan.total_value),
            format_currency(loan_position((loan,)).remaining),
        )
        for loan in state.loans
    )


def vehicle_rows(state: AppState) -> tuple[tuple[str, ...], ...]:
    """Build one row per vehicle expense."""
    return tuple(
        (v.type.value, v.category.value, v.month, v.description, format_currency(v.value))
        for v in state.vehicle_expenses
    )


def trip_rows(state: AppState) -> tuple[tuple[str, ...], ...]:
    """Build one row per trip."""
    return tuple((t.destination, t.month, format_currency(trip_total(t))) for t in state.trips)


def build_report(state: AppState, include_categorized: bool, generated_at: datetime) -> FinancialReport:
    """Assemble the full report.

    Sections are numbered in a fixed order: executive summary, monthly
    detail, then either the per-category table (categorized expenses on) or
    the loan, vehicle and trip tables (categorized expenses off).

    Args:
        state: Snapshot.
        include_categorized: Whether the categorized-expense feature is on.
        generated_at: Generation timestamp printed in the header.

    Returns:
        FinancialReport ready for rendering.
    """
    dashboard = compute_dashboard(state)

    sections = [
        ReportSection(1, "Resumo Executivo", ("Categoria", "Valor Total"), summary_rows(dashboard, include_categorized)),
        ReportSection(
            2,
            "Controle Mensal Detalhado",
            ("Mês", "Total Despesas", "Total Receitas", "Balanço"),
            monthly_rows(state),
        ),
    ]

    if include_categorized:
        sections.append(
            ReportSection(3, "Gastos por Categoria", ("Categoria", "Mês", "Descrição", "Valor"), category_rows(state))
        )
    else:
        sections.extend(
            [
                ReportSection(
                    3,
                    "Empréstimos",
                    ("Descrição", "Parcelas Pagas", "Valor Parcela", "Valor Total", "Saldo Devedor"),
                    loan_rows(state),
                ),
                ReportSection(
                    4,
                    "Gastos com Veículos",
                    ("Veículo", "Categoria", "Mês", "Descrição", "Valor"),
                    vehicle_rows(state),
                ),
                ReportSection(5, "Viagens", ("Destino", "Mês", "Total"), trip_rows(state)),
            ]
        )

    return FinancialReport(
        title=REPORT_TITLE,
        generated_at=format_generated_at(generated_at),
        sections=tuple(sections),
    )
