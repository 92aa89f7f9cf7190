"""Record commands: add, list, set and remove for every record collection."""

import sqlite3
from collections.abc import Callable
from typing import Any

from rich.table import Table

from finmaster.commands.session import console, fail, open_store
from finmaster.config import load_settings
from finmaster.domain.aggregation import month_summaries, select_balance, trip_total
from finmaster.domain.currency import format_currency
from finmaster.domain.errors import FinmasterError
from finmaster.domain.records import (
    AppState,
    Collection,
    add_categorized_expense,
    add_loan,
    add_savings_transaction,
    add_trip,
    add_vehicle_expense,
    field_names,
    remove_record,
    update_record,
)

Column = tuple[str, Callable[[Any], str], str]

COLLECTION_TITLES = {
    Collection.MONTHS: "Controle Mensal",
    Collection.LOANS: "Empréstimos",
    Collection.TRIPS: "Viagens",
    Collection.VEHICLES: "Gastos com Veículos",
    Collection.SAVINGS: "Poupança",
    Collection.CATEGORIZED: "Gastos por Categoria",
}

_ID: Column = ("ID", lambda r: r.id, "left")

TRIP_COST_HEADERS = {
    "car_rental": "Aluguel Carro",
    "fuel": "Combustível",
    "food": "Alimentação",
    "others": "Outros",
    "credit_card": "Cartão",
    "pix": "Pix",
}


def _amount_column(field_name: str, header: str) -> Column:
    return (header, lambda r: format_currency(getattr(r, field_name)), "right")


COLUMNS: dict[Collection, tuple[Column, ...]] = {
    Collection.LOANS: (
        _ID,
        ("Descrição", lambda r: r.description, "left"),
        ("Parcelas Pagas", lambda r: f"{r.paid_installments}/{r.installments}", "right"),
        ("Valor Parcela", lambda r: format_currency(r.installment_value), "right"),
        ("Valor Total", lambda r: format_currency(r.total_value), "right"),
        ("Juros a.m.", lambda r: f"{r.interest_monthly:g}%", "right"),
    ),
    Collection.TRIPS: (
        _ID,
        ("Destino", lambda r: r.destination, "left"),
        ("Mês", lambda r: r.month, "left"),
        *(_amount_column(name, header) for name, header in TRIP_COST_HEADERS.items()),
        ("Total", lambda r: format_currency(trip_total(r)), "right"),
    ),
    Collection.VEHICLES: (
        _ID,
        ("Veículo", lambda r: r.type.value, "left"),
        ("Categoria", lambda r: r.category.value, "left"),
        ("Mês", lambda r: r.month, "left"),
        ("Descrição", lambda r: r.description, "left"),
        ("Valor", lambda r: format_currency(r.value), "right"),
    ),
    Collection.SAVINGS: (
        _ID,
        ("Tipo", lambda r: r.type.value, "left"),
        ("Mês", lambda r: r.month, "left"),
        ("Descrição", lambda r: r.description, "left"),
        ("Valor", lambda r: format_currency(r.value), "right"),
    ),
    Collection.CATEGORIZED: (
        _ID,
        ("Categoria", lambda r: r.category, "left"),
        ("Mês", lambda r: r.month, "left"),
        ("Descrição", lambda r: r.description, "left"),
        ("Valor", lambda r: format_currency(r.value), "right"),
    ),
}


def build_records_table(collection: Collection, state: AppState) -> Table:
    """Build a rich table listing every record of a collection.

    Month records are listed with their computed totals instead of raw fields.
    """
    records = state.records(collection)
    table = Table(title=f"{COLLECTION_TITLES[collection]} ({len(records)})")

    if collection is Collection.MONTHS:
        settings = load_settings()
        for header in ("ID", "Mês", "Ano", "Despesas", "Receitas", "Balanço"):
            table.add_column(header, justify="left" if header in ("ID", "Mês") else "right")
        for summary in month_summaries(state):
            table.add_row(
                summary.month_id,
                summary.label,
                str(summary.year),
                format_currency(summary.total_expenses),
                format_currency(summary.total_income),
                format_currency(select_balance(summary, settings.balance_mode)),
            )
        return table

    columns = COLUMNS[collection]
    for header, _, justify in columns:
        table.add_column(header, justify=justify)  # type: ignore[arg-type]
    for record in records:
        table.add_row(*(getter(record) for _, getter, _ in columns))
    return table


def list_command(collection: Collection) -> None:
    """List the records of a collection."""
    if collection is Collection.CATEGORIZED and not load_settings().categorized_expenses:
        console.print("[dim]Categorized expenses are disabled (categorized_expenses = false)[/dim]")
        return

    store = open_store()

    if not store.state.records(collection):
        console.print(f"[yellow]No records in {COLLECTION_TITLES[collection]}[/yellow]")
        return

    console.print(build_records_table(collection, store.state))


def _mutate(action: Callable[[AppState], tuple[AppState, Any]]) -> Any:
    """Apply an add mutation to the opened store and return the new record."""
    store = open_store()
    created: list[Any] = []

    def mutation(state: AppState) -> AppState:
        new_state, record = action(state)
        created.append(record)
        return new_state

    try:
        store.apply(mutation)
    except FinmasterError as e:
        fail(str(e))
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    return created[0]


def set_command(collection: Collection, record_id: str, field: str, value: str) -> None:
    """Update one field of a record."""
    store = open_store()

    try:
        store.apply(lambda state: update_record(state, collection, record_id, field, value))
    except FinmasterError as e:
        fail(str(e))
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    console.print(f"[green]✓[/green] Updated {field} of {record_id}")


def remove_command(collection: Collection, record_id: str) -> None:
    """Remove a record by id."""
    store = open_store()

    try:
        store.apply(lambda state: remove_record(state, collection, record_id))
    except FinmasterError as e:
        fail(str(e))
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    console.print(f"[green]✓[/green] Removed {record_id}")


def fields_help(collection: Collection) -> str:
    """Comma-separated list of updatable fields, for command help."""
    return ", ".join(field_names(collection))


def add_loan_command(
    description: str | None,
    total_value: str,
    installments: str,
    paid_installments: str,
    installment_value: str,
    interest_monthly: str,
) -> None:
    """Add a loan."""
    record = _mutate(
        lambda state: add_loan(
            state,
            description=description,
            total_value=total_value,
            installments=installments,
            paid_installments=paid_installments,
            installment_value=installment_value,
            interest_monthly=interest_monthly,
        )
    )
    console.print(f"[green]✓[/green] Added loan '{record.description}' [dim]({record.id})[/dim]")


def add_trip_command(destination: str | None, month: str | None, costs: dict[str, str | None]) -> None:
    """Add a trip."""
    record = _mutate(lambda state: add_trip(state, destination=destination, month=month, costs=costs))
    console.print(
        f"[green]✓[/green] Added trip to {record.destination} in {record.month}: "
        f"{format_currency(trip_total(record))} [dim]({record.id})[/dim]"
    )


def add_vehicle_command(
    vehicle_type: str, category: str, description: str | None, value: str, month: str | None
) -> None:
    """Add a vehicle expense."""
    record = _mutate(
        lambda state: add_vehicle_expense(
            state,
            vehicle_type=vehicle_type,
            category=category,
            description=description,
            value=value,
            month=month,
        )
    )
    console.print(
        f"[green]✓[/green] Added {record.category.value} ({record.type.value}) in {record.month}: "
        f"{format_currency(record.value)} [dim]({record.id})[/dim]"
    )


def add_savings_command(transaction_type: str, value: str, month: str | None, description: str | None) -> None:
    """Add a savings movement."""
    record = _mutate(
        lambda state: add_savings_transaction(
            state, transaction_type=transaction_type, value=value, month=month, description=description
        )
    )
    console.print(
        f"[green]✓[/green] Added {record.type.value} of {format_currency(record.value)} in {record.month} "
        f"[dim]({record.id})[/dim]"
    )


def add_expense_command(category: str | None, value: str, month: str | None, description: str | None) -> None:
    """Add a categorized expense."""
    record = _mutate(
        lambda state: add_categorized_expense(
            state, category=category, value=value, month=month, description=description
        )
    )
    console.print(
        f"[green]✓[/green] Added {record.category} expense of {format_currency(record.value)} in {record.month} "
        f"[dim]({record.id})[/dim]"
    )
