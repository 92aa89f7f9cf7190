"""Tests for finmaster.store.record_store.RecordStore."""

import json
from pathlib import Path

import pandas as pd
import pytest

from finmaster.domain.errors import ConfirmationRequiredError, ImportFailedError, ImportInProgressError
from finmaster.domain.records import AppState, add_loan, add_month
from finmaster.store.queries import load_blob, save_blob
from finmaster.store.record_store import DEFAULT_STORAGE_KEY, RecordStore


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "finmaster.db"


@pytest.fixture
def store(db_path: Path) -> RecordStore:
    return RecordStore.open(db_path=db_path)


def _add_loan(state: AppState) -> AppState:
    new_state, _ = add_loan(state, description="Casa", installments=3, installment_value=100)
    return new_state


class TestLoad:
    """Tests for loading the persisted snapshot."""

    def test_empty_database(self, store: RecordStore) -> None:
        """Should start empty."""
        assert store.state == AppState()

    def test_malformed_blob_falls_back_to_empty(self, db_path: Path) -> None:
        """Should log, start empty and leave the blob in place."""
        save_blob(DEFAULT_STORAGE_KEY, "{broken", db_path)
        store = RecordStore(db_path=db_path)

        assert store.load() is False
        assert store.state == AppState()
        assert load_blob(DEFAULT_STORAGE_KEY, db_path) == "{broken"

    def test_custom_storage_key(self, db_path: Path) -> None:
        """Should keep separate snapshots per storage key."""
        RecordStore.open("other", db_path).apply(_add_loan)
        assert RecordStore.open("other", db_path).state.count() == 1
        assert RecordStore.open(db_path=db_path).state.count() == 0


class TestApply:
    """Tests for apply."""

    def test_mutation_is_persisted(self, store: RecordStore, db_path: Path) -> None:
        """Should save the full snapshot after every mutation."""
        store.apply(_add_loan)

        reopened = RecordStore.open(db_path=db_path)
        assert reopened.state == store.state
        assert reopened.state.loans[0].description == "Casa"

    def test_failed_mutation_leaves_state(self, store: RecordStore) -> None:
        """Should keep the previous snapshot when the mutation raises."""
        store.apply(_add_loan)
        before = store.state

        def boom(state: AppState) -> AppState:
            raise ValueError("nope")

        with pytest.raises(ValueError):
            store.apply(boom)
        assert store.state is before


class TestBackup:
    """Tests for backup export and restore."""

    def test_export_restore_round_trip(self, store: RecordStore, db_path: Path) -> None:
        """Should restore exactly what was exported."""
        store.apply(_add_loan)
        store.apply(lambda s: add_month(s, month="Maio", year=2025)[0])
        exported = store.export_backup()

        other = RecordStore.open("copy", db_path)
        other.restore_backup_text(exported)

        assert other.state == store.state
        assert json.loads(exported)["version"] == 2

    def test_restore_replaces_wholesale(self, store: RecordStore) -> None:
        """Should drop records that are not in the backup."""
        store.apply(_add_loan)
        store.restore_backup_text(json.dumps({"version": 2, "months": []}))
        assert store.state == AppState()

    def test_failed_restore_leaves_store_untouched(self, store: RecordStore, db_path: Path) -> None:
        """Should raise ImportFailedError and keep data in memory and on disk."""
        store.apply(_add_loan)
        before = store.state
        saved = load_blob(DEFAULT_STORAGE_KEY, db_path)

        with pytest.raises(ImportFailedError):
            store.restore_backup_text("{not json")

        assert store.state is before
        assert load_blob(DEFAULT_STORAGE_KEY, db_path) == saved

    def test_restore_from_file(self, store: RecordStore, tmp_path: Path) -> None:
        """Should read a backup file."""
        backup = tmp_path / "finance_backup_2025-01-01.json"
        backup.write_text(json.dumps({"loans": [{"id": "l1", "description": "Velho"}]}), encoding="utf-8")

        store.restore_backup(backup)

        assert store.state.loans[0].description == "Velho"

    def test_restore_missing_file(self, store: RecordStore, tmp_path: Path) -> None:
        """Should raise ImportFailedError."""
        with pytest.raises(ImportFailedError):
            store.restore_backup(tmp_path / "missing.json")


class TestImportSheet:
    """Tests for spreadsheet import."""

    def test_csv_rows_are_appended(self, store: RecordStore, tmp_path: Path) -> None:
        """Should append one month per row."""
        store.apply(lambda s: add_month(s, month="Janeiro", year=2025)[0])
        sheet = tmp_path / "meses.csv"
        pd.DataFrame(
            [
                {"Mes": "Fevereiro", "Ano": 2025, "Inter": 100, "Salario": 2000, "Notas": "x"},
                {"Mes": "Março", "Ano": 2025, "Inter": None, "Salario": 2100, "Notas": "y"},
            ]
        ).to_csv(sheet, index=False)

        months = store.import_sheet(sheet)

        assert len(months) == 2
        assert [m.month for m in store.state.months] == ["Janeiro", "Fevereiro", "Março"]
        assert store.state.months[1].expenses.inter == 100
        assert store.state.months[2].expenses.inter == 0

    def test_xlsx_first_sheet(self, store: RecordStore, tmp_path: Path) -> None:
        """Should read the first worksheet of a workbook."""
        sheet = tmp_path / "meses.xlsx"
        with pd.ExcelWriter(sheet) as writer:
            pd.DataFrame([{"Mês": "Abril", "Salário": 1500}]).to_excel(writer, sheet_name="Dados", index=False)
            pd.DataFrame([{"Mês": "Maio"}]).to_excel(writer, sheet_name="Outra", index=False)

        store.import_sheet(sheet)

        assert [m.month for m in store.state.months] == ["Abril"]
        assert store.state.months[0].income.salario == 1500

    def test_unsupported_file_leaves_store_untouched(self, store: RecordStore, tmp_path: Path) -> None:
        """Should raise ImportFailedError for unknown file types."""
        bad = tmp_path / "meses.txt"
        bad.write_text("hello", encoding="utf-8")
        before = store.state

        with pytest.raises(ImportFailedError):
            store.import_sheet(bad)
        assert store.state is before

    def test_corrupt_workbook(self, store: RecordStore, tmp_path: Path) -> None:
        """Should raise ImportFailedError for unreadable workbooks."""
        bad = tmp_path / "meses.xlsx"
        bad.write_bytes(b"not a workbook")

        with pytest.raises(ImportFailedError):
            store.import_sheet(bad)
        assert store.state == AppState()


class TestImportGuard:
    """Tests for the in-flight import guard."""

    @pytest.fixture
    def sheet(self, tmp_path: Path) -> Path:
        path = tmp_path / "meses.csv"
        pd.DataFrame([{"Mes": "Abril", "Ano": 2025, "Salario": 1500}]).to_csv(path, index=False)
        return path

    def test_second_import_while_running_fails(self, store: RecordStore) -> None:
        """Should reject an import while another holds the guard."""
        with store.import_guard():
            with pytest.raises(ImportInProgressError):
                store.restore_backup_text("{}")
        assert store.state == AppState()

    def test_guard_released_after_failure(self, store: RecordStore) -> None:
        """Should allow a new import after a failed one."""
        with pytest.raises(ImportFailedError):
            store.restore_backup_text("nope")
        store.restore_backup_text("{}")

    def test_guard_refuses_import_from_another_session(self, db_path: Path, sheet: Path) -> None:
        """Should refuse an import from a second session while the first holds the guard."""
        first = RecordStore.open(db_path=db_path)
        second = RecordStore.open(db_path=db_path)

        with first.import_guard():
            with pytest.raises(ImportInProgressError):
                second.import_sheet(sheet)

        assert RecordStore.open(db_path=db_path).state.months == ()

    def test_imports_from_stale_sessions_are_both_kept(self, db_path: Path, sheet: Path) -> None:
        """Should append to the stored snapshot, not the one loaded at open."""
        first = RecordStore.open(db_path=db_path)
        second = RecordStore.open(db_path=db_path)

        second.import_sheet(sheet)
        first.import_sheet(sheet)

        assert len(first.state.months) == 2
        assert len(RecordStore.open(db_path=db_path).state.months) == 2

    def test_apply_keeps_changes_from_other_sessions(self, db_path: Path) -> None:
        """Should re-read the stored snapshot before mutating."""
        first = RecordStore.open(db_path=db_path)
        second = RecordStore.open(db_path=db_path)

        second.apply(_add_loan)
        first.apply(lambda s: add_month(s, month="Maio", year=2025)[0])

        reopened = RecordStore.open(db_path=db_path)
        assert len(reopened.state.loans) == 1
        assert len(reopened.state.months) == 1
        assert first.state == reopened.state


class TestClear:
    """Tests for clear."""

    def test_requires_confirmation(self, store: RecordStore, db_path: Path) -> None:
        """Should refuse and keep data without confirmation."""
        store.apply(_add_loan)

        with pytest.raises(ConfirmationRequiredError):
            store.clear()

        assert store.state.count() == 1
        assert RecordStore.open(db_path=db_path).state.count() == 1

    def test_confirmed_clear(self, store: RecordStore, db_path: Path) -> None:
        """Should empty the store durably."""
        store.apply(_add_loan)
        store.clear(confirmed=True)

        assert store.state == AppState()
        assert RecordStore.open(db_path=db_path).state == AppState()


class TestLastSavedAt:
    """Tests for last_saved_at."""

    def test_none_before_first_save(self, store: RecordStore) -> None:
        """Should report nothing saved yet."""
        assert store.last_saved_at() is None

    def test_set_after_mutation(self, store: RecordStore) -> None:
        """Should report a timestamp once the snapshot is saved."""
        store.apply(_add_loan)
        assert store.last_saved_at() is not None
