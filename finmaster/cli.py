"""CLI entry point for finmaster."""

import typer

from finmaster.commands.admin import backup_command, clear_command, import_sheet_command, init_command, restore_command
from finmaster.commands.months import add_month_command, show_month_command
from finmaster.commands.records import (
    add_expense_command,
    add_loan_command,
    add_savings_command,
    add_trip_command,
    add_vehicle_command,
    fields_help,
    list_command,
    remove_command,
    set_command,
)
from finmaster.commands.report import dashboard_command, report_command
from finmaster.config import load_settings
from finmaster.domain.records import Collection
from finmaster.domain.report import REPORT_FILENAME
from finmaster.logger import configure_logging

app = typer.Typer(
    name="finmaster",
    help="finmaster - Personal finance tracker: months, loans, trips, vehicles and savings",
    add_completion=False,
)

month_app = typer.Typer(help="Fixed monthly expenses and income.")
expense_app = typer.Typer(help="Categorized variable expenses.")
loan_app = typer.Typer(help="Loans paid in installments.")
trip_app = typer.Typer(help="Trip costs.")
vehicle_app = typer.Typer(help="Car and motorcycle costs.")
savings_app = typer.Typer(help="Savings deposits, withdrawals and yields.")

app.add_typer(month_app, name="month")
app.add_typer(expense_app, name="expense")
app.add_typer(loan_app, name="loan")
app.add_typer(trip_app, name="trip")
app.add_typer(vehicle_app, name="vehicle")
app.add_typer(savings_app, name="savings")


@app.callback()
def main() -> None:
    """finmaster - Personal finance tracker."""
    configure_logging(load_settings().log_level)


def _register_crud(sub_app: typer.Typer, collection: Collection, noun: str) -> None:
    """Attach list, set and remove commands for one collection."""

    @sub_app.command(name="list", help=f"List {noun} records.")
    def list_records() -> None:
        list_command(collection)

    @sub_app.command(name="set", help=f"Update one field of a {noun} record. Fields: {fields_help(collection)}")
    def set_record(
        record_id: str = typer.Argument(..., help="Record ID"),
        field: str = typer.Argument(..., help="Field name"),
        value: str = typer.Argument(..., help="New value"),
    ) -> None:
        set_command(collection, record_id, field, value)

    @sub_app.command(name="remove", help=f"Remove a {noun} record.")
    def remove_record(record_id: str = typer.Argument(..., help="Record ID")) -> None:
        remove_command(collection, record_id)


_register_crud(month_app, Collection.MONTHS, "month")
_register_crud(expense_app, Collection.CATEGORIZED, "categorized expense")
_register_crud(loan_app, Collection.LOANS, "loan")
_register_crud(trip_app, Collection.TRIPS, "trip")
_register_crud(vehicle_app, Collection.VEHICLES, "vehicle expense")
_register_crud(savings_app, Collection.SAVINGS, "savings")


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing database and config"),
) -> None:
    """Initialize finmaster database and configuration."""
    init_command(force)


@app.command()
def dashboard() -> None:
    """Show your totals, monthly chart and category chart."""
    dashboard_command()


@month_app.command(name="add")
def month_add(
    month: str = typer.Option(None, "--month", "-m", help="Month name, e.g. Março (default: after the last month)"),
    year: int = typer.Option(None, "--year", "-y", help="Year (default: current year)"),
) -> None:
    """Add a month with zeroed expenses and income."""
    add_month_command(month, year)


@month_app.command(name="show")
def month_show(month_ref: str = typer.Argument(..., help="Month record ID or month name")) -> None:
    """Show a month's expenses, income, categorized items and balances."""
    show_month_command(month_ref)


@expense_app.command(name="add")
def expense_add(
    category: str = typer.Option(None, "--category", "-c", help="Category (default: Alimentação)"),
    value: str = typer.Option("0", "--value", "-v", help="Amount in R$"),
    month: str = typer.Option(None, "--month", "-m", help="Month name (default: last month record)"),
    description: str = typer.Option(None, "--description", "-d", help="Description"),
) -> None:
    """Add a categorized expense."""
    add_expense_command(category, value, month, description)


@loan_app.command(name="add")
def loan_add(
    description: str = typer.Option(None, "--description", "-d", help="Description"),
    total_value: str = typer.Option("0", "--total", help="Total amount in R$"),
    installments: str = typer.Option("1", "--installments", help="Number of installments"),
    paid_installments: str = typer.Option("0", "--paid", help="Installments already paid"),
    installment_value: str = typer.Option("0", "--installment-value", help="Installment amount in R$"),
    interest_monthly: str = typer.Option("0", "--interest", help="Monthly interest rate in %"),
) -> None:
    """Add a loan."""
    add_loan_command(description, total_value, installments, paid_installments, installment_value, interest_monthly)


@trip_app.command(name="add")
def trip_add(
    destination: str = typer.Option(None, "--destination", "-d", help="Destination"),
    month: str = typer.Option(None, "--month", "-m", help="Month name (default: current month)"),
    car_rental: str = typer.Option(None, "--car-rental", help="Car rental in R$"),
    fuel: str = typer.Option(None, "--fuel", help="Fuel in R$"),
    food: str = typer.Option(None, "--food", help="Food in R$"),
    others: str = typer.Option(None, "--others", help="Other costs in R$"),
    credit_card: str = typer.Option(None, "--credit-card", help="Credit card in R$"),
    pix: str = typer.Option(None, "--pix", help="Pix transfers in R$"),
) -> None:
    """Add a trip."""
    costs = {
        "car_rental": car_rental,
        "fuel": fuel,
        "food": food,
        "others": others,
        "credit_card": credit_card,
        "pix": pix,
    }
    add_trip_command(destination, month, costs)


@vehicle_app.command(name="add")
def vehicle_add(
    vehicle_type: str = typer.Option("Carro", "--type", "-t", help="Carro or Moto"),
    category: str = typer.Option("Combustível", "--category", "-c", help="Combustível or Manutenção"),
    description: str = typer.Option(None, "--description", "-d", help="Description"),
    value: str = typer.Option("0", "--value", "-v", help="Amount in R$"),
    month: str = typer.Option(None, "--month", "-m", help="Month name (default: current month)"),
) -> None:
    """Add a vehicle expense."""
    add_vehicle_command(vehicle_type, category, description, value, month)


@savings_app.command(name="add")
def savings_add(
    transaction_type: str = typer.Option("entrada", "--type", "-t", help="entrada, retirada or rendimento"),
    value: str = typer.Option("0", "--value", "-v", help="Amount in R$"),
    month: str = typer.Option(None, "--month", "-m", help="Month name (default: current month)"),
    description: str = typer.Option(None, "--description", "-d", help="Description"),
) -> None:
    """Add a savings deposit, withdrawal or yield."""
    add_savings_command(transaction_type, value, month, description)


@app.command(name="import-sheet")
def import_sheet(path: str = typer.Argument(..., help="Spreadsheet (.xlsx, .xls or .csv)")) -> None:
    """Import one month per spreadsheet row."""
    import_sheet_command(path)


@app.command(name="backup")
def backup(
    output_dir: str = typer.Option(None, "--output", "-o", help="Backup directory (default: current directory)"),
) -> None:
    """Export all your records as a JSON backup."""
    backup_command(output_dir)


@app.command(name="restore")
def restore(
    path: str = typer.Argument(..., help="JSON backup file"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
) -> None:
    """Replace all your records with a JSON backup."""
    restore_command(path, yes)


@app.command(name="report")
def report(
    output: str = typer.Option(None, "--output", "-o", help=f"PDF file or directory (default: ./{REPORT_FILENAME})"),
) -> None:
    """Export the consolidated financial report as a PDF."""
    report_command(output)


@app.command(name="clear")
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
) -> None:
    """Delete all your records. This cannot be undone."""
    clear_command(yes)


if __name__ == "__main__":
    app()
