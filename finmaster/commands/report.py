"""Dashboard and report commands for viewing derived figures."""

import sqlite3
from datetime import datetime
from pathlib import Path

from rich.table import Table

from finmaster.commands.session import console, fail, open_store
from finmaster.config import load_settings
from finmaster.domain.aggregation import compute_dashboard, vehicle_breakdown
from finmaster.domain.chart import category_series, monthly_series
from finmaster.domain.currency import format_currency
from finmaster.domain.report import REPORT_FILENAME, build_report
from finmaster.render.charts import money_markup, render_category_chart, render_monthly_chart
from finmaster.render.pdf import render_report_pdf


def dashboard_command() -> None:
    """Show top-line figures and the monthly and category charts."""
    settings = load_settings()
    store = open_store(settings)
    state = store.state

    dashboard = compute_dashboard(state)
    vehicles = vehicle_breakdown(state.vehicle_expenses)

    table = Table(title="Resumo", show_header=False)
    table.add_column("Indicador", style="cyan")
    table.add_column("Valor", justify="right")
    table.add_column("Detalhe", style="dim")
    table.add_row(
        "Poupança", money_markup(dashboard.savings_total), f"Rendimentos: {format_currency(dashboard.savings_earnings)}"
    )
    table.add_row(
        "Empréstimos (saldo devedor)",
        format_currency(dashboard.loans_remaining),
        f"Pago: {format_currency(dashboard.loans_paid)}",
    )
    if settings.categorized_expenses:
        table.add_row("Gastos por categoria", format_currency(dashboard.categorized_total), "")
    table.add_row("Viagens", format_currency(dashboard.travel_total), "")
    table.add_row(
        "Veículos",
        format_currency(dashboard.vehicle_total),
        f"Carro: {format_currency(vehicles.car.total)} | Moto: {format_currency(vehicles.moto.total)}",
    )
    console.print(table)

    try:
        saved_at = store.last_saved_at()
    except sqlite3.Error as e:
        fail(f"Database error: {e}")
    if saved_at:
        console.print(f"[dim]Última gravação: {saved_at} UTC[/dim]")

    console.print("\n[bold cyan]Despesas x Receitas por mês[/bold cyan]\n")
    render_monthly_chart(console, monthly_series(state, settings.balance_mode))

    if settings.categorized_expenses:
        console.print("\n[bold cyan]Gastos por categoria[/bold cyan]\n")
        render_category_chart(console, category_series(state.categorized_expenses))


def resolve_report_path(output: str | None) -> Path:
    """Resolve --output to a file path. A directory gets the default file name."""
    if not output:
        return Path.cwd() / REPORT_FILENAME
    path = Path(output).expanduser()
    if path.is_dir():
        return path / REPORT_FILENAME
    return path


def report_command(output: str | None = None) -> None:
    """Export the consolidated financial report as a PDF."""
    settings = load_settings()
    store = open_store(settings)

    report = build_report(store.state, settings.categorized_expenses, datetime.now())
    output_path = resolve_report_path(output)

    try:
        render_report_pdf(report, output_path)
    except OSError as e:
        fail(f"Could not write report: {e}")

    console.print(f"[green]✓[/green] Report written to: {output_path}")
