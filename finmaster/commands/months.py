"""Month commands: add a fixed monthly record and show its detail view."""

import sqlite3

from rich.table import Table

from finmaster.commands.session import console, fail, open_store
from finmaster.config import load_settings
from finmaster.dates import next_month_label, resolve_month_label
from finmaster.domain.aggregation import month_summary
from finmaster.domain.currency import format_currency
from finmaster.domain.errors import FinmasterError, RecordNotFoundError
from finmaster.domain.records import (
    AppState,
    Collection,
    MonthRecord,
    add_month,
    belongs_to_month,
    find_record,
)
from finmaster.render.charts import money_markup

EXPENSE_LABELS = {
    "inter": "Inter",
    "nubank": "Nubank",
    "m_pago": "Mercado Pago",
    "agua": "Água",
    "energia": "Energia",
    "outros": "Outros",
    "pix": "Pix",
}

INCOME_LABELS = {
    "salario": "Salário",
    "bonus": "Bônus",
    "outros": "Outros",
    "recarga_pay": "RecargaPay",
}


def add_month_command(month: str | None, year: int | None) -> None:
    """Add a month record with zeroed expenses and income."""
    store = open_store()
    created: list[MonthRecord] = []

    def mutation(state: AppState) -> AppState:
        new_state, record = add_month(state, month=month, year=year)
        created.append(record)
        return new_state

    try:
        store.apply(mutation)
    except FinmasterError as e:
        fail(str(e))
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    record = created[0]
    console.print(f"[green]✓[/green] Added {record.month}/{record.year} [dim]({record.id})[/dim]")


def find_month(state: AppState, month_ref: str) -> MonthRecord:
    """Find a month record by id, or by label (first match).

    Raises:
        RecordNotFoundError: If nothing matches.
    """
    try:
        return find_record(state, Collection.MONTHS, month_ref)
    except RecordNotFoundError:
        label = resolve_month_label(month_ref)
        for month in state.months:
            if label is not None and month.month == label:
                return month
        raise


def build_amounts_table(title: str, labels: dict[str, str], source: object, total: float) -> Table:
    """Build a two-column table of named amounts with a total row."""
    table = Table(title=title, show_footer=True)
    table.add_column("Item", footer="Total")
    table.add_column("Valor", justify="right", footer=format_currency(total))
    for name, label in labels.items():
        table.add_row(label, format_currency(getattr(source, name)))
    return table


def show_month_command(month_ref: str) -> None:
    """Show the detail view of one month record."""
    settings = load_settings()
    store = open_store(settings)
    state = store.state

    try:
        month = find_month(state, month_ref)
    except RecordNotFoundError as e:
        fail(str(e))

    summary = month_summary(month, state)

    console.print(f"[bold cyan]{month.month} {month.year}[/bold cyan] [dim]({month.id})[/dim]\n")
    console.print(build_amounts_table("Despesas Fixas", EXPENSE_LABELS, month.expenses, summary.fixed_expenses))
    console.print(build_amounts_table("Receitas", INCOME_LABELS, month.income, summary.total_income))

    if settings.categorized_expenses:
        items = [c for c in state.categorized_expenses if belongs_to_month(c, month)]
        if items:
            table = Table(title="Gastos por Categoria")
            table.add_column("ID", style="dim")
            table.add_column("Categoria", style="magenta")
            table.add_column("Descrição")
            table.add_column("Valor", justify="right")
            for item in items:
                table.add_row(item.id, item.category, item.description, format_currency(item.value))
            console.print(table)
        else:
            console.print("[dim]Nenhum gasto categorizado neste mês[/dim]")

    console.print(f"\n[bold]Total de despesas:[/bold] {format_currency(summary.total_expenses)}")
    console.print(f"[bold]Total de receitas:[/bold] {format_currency(summary.total_income)}")
    console.print(f"[bold]Saldo final:[/bold] {money_markup(summary.balance)}")

    next_label = next_month_label(month.month) or "?"
    console.print(
        f"[bold]Saldo com salário de {next_label}:[/bold] {money_markup(summary.next_salary_balance)} "
        f"[dim](salário {format_currency(summary.next_month_salary)})[/dim]"
    )
