"""Admin commands: init, backup, restore, spreadsheet import and clear-all."""

import sqlite3
from datetime import date
from pathlib import Path

import typer

from finmaster.commands.session import console, fail, open_store
from finmaster.config import create_default_config, get_config_path
from finmaster.domain.errors import ConfirmationRequiredError, ImportFailedError, ImportInProgressError
from finmaster.store.schema import get_db_path, init_database

BACKUP_PREFIX = "finance_backup_"


def backup_filename(today: date) -> str:
    """Name of the backup file for a given day."""
    return f"{BACKUP_PREFIX}{today.isoformat()}.json"


def run_full_init(db_path: Path, config_path: Path) -> None:
    """Initialize new database and config."""
    console.print(f"[cyan]Initializing database at {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Database initialized")

    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Database: {db_path}[/dim]")
    console.print(f"[dim]Config: {config_path}[/dim]")


def init_command(force: bool = False) -> None:
    """Initialize finmaster database and configuration."""
    db_path = get_db_path()
    config_path = get_config_path()

    db_exists = db_path.exists()
    config_exists = config_path.exists()

    try:
        # Guard: refuse to overwrite without force flag
        if not force and (db_exists or config_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if db_exists:
                console.print(f"  Database already exists: {db_path}")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            console.print("\n[yellow]Use 'finmaster init --force' to overwrite[/yellow]")
            fail("Nothing was changed")

        if force and db_exists:
            db_path.unlink()

        run_full_init(db_path, config_path)

    except sqlite3.Error as e:
        fail(f"Database error: {e}")
    except OSError as e:
        fail(f"Filesystem error: {e}")


def backup_command(output_dir: str | None = None) -> None:
    """Export all records as a JSON backup file."""
    store = open_store()

    backup_dir = Path(output_dir).expanduser() if output_dir else Path.cwd()
    backup_path = backup_dir / backup_filename(date.today())

    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path.write_text(store.export_backup(), encoding="utf-8")
    except OSError as e:
        fail(f"Backup failed: {e}")

    console.print(f"[green]✓[/green] Backup written to: {backup_path}")
    console.print(f"[dim]{store.state.count()} records[/dim]")


def restore_command(path: str, yes: bool = False) -> None:
    """Replace all records with the contents of a JSON backup."""
    store = open_store()

    if store.state.count() and not yes:
        if not typer.confirm(f"Replace all {store.state.count()} current records with the backup?", default=False):
            console.print("[yellow]Restore cancelled[/yellow]")
            return

    try:
        restored = store.restore_backup(Path(path).expanduser())
    except (ImportFailedError, ImportInProgressError) as e:
        fail(f"Restore failed: {e}")
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    console.print(f"[green]✓[/green] Backup restored ({restored.count()} records)")


def import_sheet_command(path: str) -> None:
    """Append one month record per spreadsheet row."""
    store = open_store()

    try:
        months = store.import_sheet(Path(path).expanduser())
    except (ImportFailedError, ImportInProgressError) as e:
        fail(f"Import failed: {e}")
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    console.print(f"[green]✓[/green] {len(months)} registros importados")


def clear_command(yes: bool = False) -> None:
    """Delete every record. Irreversible."""
    store = open_store()

    confirmed = yes or typer.confirm(
        f"Delete all {store.state.count()} records? This cannot be undone", default=False
    )

    try:
        store.clear(confirmed=confirmed)
    except ConfirmationRequiredError:
        console.print("[yellow]Nothing was deleted[/yellow]")
        return
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    console.print("[green]✓[/green] All records deleted")
