"""Tests for finmaster.domain.report pure functions."""

from datetime import datetime

from finmaster.domain.models import CategoryName, Money, MonthLabel, RecordId
from finmaster.domain.records import (
    AppState,
    CategorizedExpenseRecord,
    LoanRecord,
    MonthlyExpenses,
    MonthlyIncome,
    MonthRecord,
    SavingsTransactionRecord,
    SavingsType,
    TripExpenseRecord,
    VehicleCategory,
    VehicleExpenseRecord,
    VehicleType,
)
from finmaster.domain.report import REPORT_TITLE, build_report, format_generated_at

GENERATED_AT = datetime(2025, 3, 10, 14, 5, 9)


def _state() -> AppState:
    return AppState(
        months=(
            MonthRecord(
                id=RecordId("m1"),
                month=MonthLabel("Janeiro"),
                year=2025,
                expenses=MonthlyExpenses(inter=Money(100), nubank=Money(50)),
                income=MonthlyIncome(salario=Money(1000)),
            ),
        ),
        loans=(
            LoanRecord(
                id=RecordId("l1"),
                description="Carro",
                total_value=Money(1200),
                installments=12,
                paid_installments=2,
                installment_value=Money(100),
            ),
        ),
        trips=(TripExpenseRecord(id=RecordId("t1"), month=MonthLabel("Julho"), destination="Rio", fuel=Money(250)),),
        vehicle_expenses=(
            VehicleExpenseRecord(
                id=RecordId("v1"),
                month=MonthLabel("Janeiro"),
                type=VehicleType.MOTORCYCLE,
                category=VehicleCategory.MAINTENANCE,
                description="Pneu",
                value=Money(80),
            ),
        ),
        savings=(
            SavingsTransactionRecord(
                id=RecordId("s1"), month=MonthLabel("Janeiro"), type=SavingsType.DEPOSIT, value=Money(1234.5)
            ),
        ),
        categorized_expenses=(
            CategorizedExpenseRecord(
                id=RecordId("c1"),
                month=MonthLabel("Janeiro"),
                category=CategoryName("Lazer"),
                value=Money(30),
                description="Cinema",
                month_id=RecordId("m1"),
            ),
        ),
    )


class TestFormatGeneratedAt:
    """Tests for format_generated_at."""

    def test_format(self) -> None:
        """Should use dd/mm/yyyy, HH:MM:SS."""
        assert format_generated_at(GENERATED_AT) == "10/03/2025, 14:05:09"


class TestBuildReport:
    """Tests for build_report."""

    def test_empty_store_with_categorized(self) -> None:
        """Should produce zero figures and empty detail tables."""
        report = build_report(AppState(), include_categorized=True, generated_at=GENERATED_AT)

        assert report.title == REPORT_TITLE
        assert report.generated_at == "10/03/2025, 14:05:09"
        summary = report.sections[0]
        assert summary.heading == "1. Resumo Executivo"
        assert all(value == "R$ 0,00" for _, value in summary.rows)
        assert len(summary.rows) == 5
        assert [s.rows for s in report.sections[1:]] == [(), ()]

    def test_variant_with_categorized_expenses(self) -> None:
        """Should end with the per-category table."""
        report = build_report(_state(), include_categorized=True, generated_at=GENERATED_AT)

        assert [s.heading for s in report.sections] == [
            "1. Resumo Executivo",
            "2. Controle Mensal Detalhado",
            "3. Gastos por Categoria",
        ]
        assert ("Gastos Variáveis por Categoria", "R$ 30,00") in report.sections[0].rows
        assert report.sections[1].rows == (("Janeiro", "R$ 180,00", "R$ 1.000,00", "R$ 820,00"),)
        assert report.sections[2].rows == (("Lazer", "Janeiro", "Cinema", "R$ 30,00"),)

    def test_variant_without_categorized_expenses(self) -> None:
        """Should list loans, vehicles and trips as sections 3 to 5."""
        report = build_report(_state(), include_categorized=False, generated_at=GENERATED_AT)

        assert [s.heading for s in report.sections] == [
            "1. Resumo Executivo",
            "2. Controle Mensal Detalhado",
            "3. Empréstimos",
            "4. Gastos com Veículos",
            "5. Viagens",
        ]
        summary = dict(report.sections[0].rows)
        assert "Gastos Variáveis por Categoria" not in summary
        assert summary["Patrimônio na Poupança"] == "R$ 1.234,50"
        assert summary["Saldo Devedor de Empréstimos"] == "R$ 1.000,00"
        assert summary["Investimento em Viagens"] == "R$ 250,00"
        assert summary["Gastos Totais com Veículos"] == "R$ 80,00"
        assert report.sections[2].rows == (("Carro", "2/12", "R$ 100,00", "R$ 1.200,00", "R$ 1.000,00"),)
        assert report.sections[3].rows == (("Moto", "Manutenção", "Janeiro", "Pneu", "R$ 80,00"),)
        assert report.sections[4].rows == (("Rio", "Julho", "R$ 250,00"),)

    def test_rows_match_headers(self) -> None:
        """Should give every row as many cells as its header."""
        for include in (True, False):
            for section in build_report(_state(), include, GENERATED_AT).sections:
                for row in section.rows:
                    assert len(row) == len(section.headers)
