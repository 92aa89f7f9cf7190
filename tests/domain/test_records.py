"""Tests for finmaster.domain.records pure mutations."""

from datetime import date

import pytest

from finmaster.domain.errors import InvalidFieldValueError, RecordNotFoundError, UnknownFieldError
from finmaster.domain.models import RecordId
from finmaster.domain.records import (
    AppState,
    Collection,
    MonthRecord,
    SavingsType,
    VehicleCategory,
    VehicleType,
    add_categorized_expense,
    add_loan,
    add_month,
    add_savings_transaction,
    add_trip,
    add_vehicle_expense,
    append_months,
    belongs_to_month,
    find_record,
    new_record_id,
    remove_record,
    resolve_field_name,
    update_record,
)

TODAY = date(2025, 3, 10)


def _state_with_months(*labels: str) -> AppState:
    state = AppState()
    for i, label in enumerate(labels):
        state, _ = add_month(state, month=label, year=2025, record_id=RecordId(f"m{i}"))
    return state


class TestNewRecordId:
    """Tests for new_record_id."""

    def test_shape(self) -> None:
        """Should be 9 base-36 characters."""
        record_id = new_record_id()
        assert len(record_id) == 9
        assert record_id.isalnum()
        assert record_id == record_id.lower()

    def test_unique(self) -> None:
        """Should not repeat across many calls."""
        assert len({new_record_id() for _ in range(500)}) == 500


class TestAddMonth:
    """Tests for add_month."""

    def test_first_month_is_current_month(self) -> None:
        """Should use the current calendar month and year on an empty store."""
        state, record = add_month(AppState(), today=TODAY)
        assert record.month == "Março"
        assert record.year == 2025
        assert state.months == (record,)

    def test_follows_last_month(self) -> None:
        """Should default to the successor of the last month record."""
        state = _state_with_months("Janeiro", "Abril")
        _, record = add_month(state, today=TODAY)
        assert record.month == "Maio"

    def test_december_wraps(self) -> None:
        """Should wrap December to January."""
        state = _state_with_months("Dezembro")
        _, record = add_month(state, today=TODAY)
        assert record.month == "Janeiro"

    def test_zeroed_figures(self) -> None:
        """Should start with zero expenses and income."""
        _, record = add_month(AppState(), today=TODAY)
        assert record.expenses.inter == 0
        assert record.income.salario == 0

    def test_explicit_label_is_resolved(self) -> None:
        """Should canonicalize the given label."""
        _, record = add_month(AppState(), month="marco", year=2024, today=TODAY)
        assert record.month == "Março"
        assert record.year == 2024

    def test_invalid_label(self) -> None:
        """Should reject labels that don't name a month."""
        with pytest.raises(InvalidFieldValueError):
            add_month(AppState(), month="Foo", today=TODAY)

    def test_original_state_unchanged(self) -> None:
        """Should never modify the input snapshot."""
        state = AppState()
        add_month(state, today=TODAY)
        assert state.months == ()


class TestAddRecords:
    """Tests for the add_* functions of the other collections."""

    def test_loan_defaults(self) -> None:
        """Should create a loan with the default description and one installment."""
        state, loan = add_loan(AppState())
        assert loan.description == "Novo Empréstimo"
        assert loan.installments == 1
        assert loan.paid_installments == 0
        assert state.loans == (loan,)

    def test_loan_coerces_numbers(self) -> None:
        """Should coerce numeric input and turn garbage into 0."""
        _, loan = add_loan(AppState(), total_value="1000,50", installments="10", installment_value="abc")
        assert loan.total_value == 1000.5
        assert loan.installments == 10
        assert loan.installment_value == 0

    def test_trip_defaults(self) -> None:
        """Should default destination and month."""
        _, trip = add_trip(AppState(), today=TODAY)
        assert trip.destination == "Nova Viagem"
        assert trip.month == "Março"
        assert trip.month_id is None

    def test_trip_costs(self) -> None:
        """Should coerce every cost field."""
        _, trip = add_trip(AppState(), costs={"fuel": "100", "food": None, "pix": 20}, today=TODAY)
        assert trip.fuel == 100
        assert trip.food == 0
        assert trip.pix == 20

    def test_vehicle_default_description_by_type(self) -> None:
        """Should name the expense after the vehicle type."""
        _, car = add_vehicle_expense(AppState(), vehicle_type="Carro", today=TODAY)
        _, moto = add_vehicle_expense(AppState(), vehicle_type="moto", today=TODAY)
        assert car.description == "Novo Gasto Carro"
        assert moto.type is VehicleType.MOTORCYCLE
        assert moto.description == "Novo Gasto Moto"

    def test_vehicle_invalid_category(self) -> None:
        """Should reject unknown categories."""
        with pytest.raises(InvalidFieldValueError):
            add_vehicle_expense(AppState(), category="Seguro", today=TODAY)

    def test_vehicle_category_without_accent(self) -> None:
        """Should accept accent-less category names."""
        _, record = add_vehicle_expense(AppState(), category="manutencao", today=TODAY)
        assert record.category is VehicleCategory.MAINTENANCE

    def test_savings_default_description_by_type(self) -> None:
        """Should describe the movement by its type."""
        _, deposit = add_savings_transaction(AppState(), today=TODAY)
        _, yield_ = add_savings_transaction(AppState(), transaction_type="rendimento", today=TODAY)
        assert deposit.description == "Depósito"
        assert yield_.type is SavingsType.YIELD
        assert yield_.description == "Rendimento"

    def test_categorized_defaults_to_last_month(self) -> None:
        """Should attach to the last month record when no month is given."""
        state = _state_with_months("Janeiro", "Fevereiro")
        _, expense = add_categorized_expense(state, today=TODAY)
        assert expense.month == "Fevereiro"
        assert expense.month_id == "m1"
        assert expense.category == "Alimentação"
        assert expense.description == "Novo gasto"

    def test_categorized_without_months_uses_current_month(self) -> None:
        """Should fall back to the current calendar month."""
        _, expense = add_categorized_expense(AppState(), value="12,50", today=TODAY)
        assert expense.month == "Março"
        assert expense.month_id is None
        assert expense.value == 12.5

    def test_binds_to_first_matching_month(self) -> None:
        """Should bind the new record to the first month with the label."""
        state = _state_with_months("Janeiro", "Janeiro")
        _, trip = add_trip(state, month="Janeiro", today=TODAY)
        assert trip.month_id == "m0"


class TestAppendMonths:
    """Tests for append_months."""

    def test_appends_without_merging(self) -> None:
        """Should append even when labels repeat."""
        state = _state_with_months("Janeiro")
        imported = [MonthRecord(id=RecordId("x1"), month="Janeiro", year=2024)]
        new_state = append_months(state, imported)
        assert [m.id for m in new_state.months] == ["m0", "x1"]


class TestResolveFieldName:
    """Tests for resolve_field_name."""

    def test_camel_case(self) -> None:
        """Should accept camelCase spellings."""
        assert resolve_field_name(Collection.LOANS, "totalValue") == "total_value"
        assert resolve_field_name(Collection.MONTHS, "expenses.mPago") == "expenses.m_pago"

    def test_unqualified_month_field(self) -> None:
        """Should accept unambiguous unqualified month fields."""
        assert resolve_field_name(Collection.MONTHS, "salario") == "income.salario"
        assert resolve_field_name(Collection.MONTHS, "nubank") == "expenses.nubank"

    def test_ambiguous_month_field(self) -> None:
        """Should reject 'outros', which exists in expenses and income."""
        with pytest.raises(UnknownFieldError):
            resolve_field_name(Collection.MONTHS, "outros")

    def test_unknown_field(self) -> None:
        """Should reject fields that don't exist."""
        with pytest.raises(UnknownFieldError):
            resolve_field_name(Collection.TRIPS, "hotel")


class TestUpdateRecord:
    """Tests for update_record."""

    def test_updates_amount_with_coercion(self) -> None:
        """Should coerce invalid amounts to 0."""
        state, loan = add_loan(AppState(), total_value=100)
        state = update_record(state, Collection.LOANS, loan.id, "total_value", "abc")
        assert state.loans[0].total_value == 0

    def test_updates_nested_month_field(self) -> None:
        """Should update expenses and income fields of a month."""
        state = _state_with_months("Janeiro")
        state = update_record(state, Collection.MONTHS, "m0", "salario", "1000")
        state = update_record(state, Collection.MONTHS, "m0", "expenses.inter", 150)
        assert state.months[0].income.salario == 1000
        assert state.months[0].expenses.inter == 150

    def test_rename_month_carries_bound_records(self) -> None:
        """Should relabel records bound to the renamed month."""
        state = _state_with_months("Janeiro")
        state, expense = add_categorized_expense(state, month="Janeiro", value=50, today=TODAY)
        state, trip = add_trip(state, month="Janeiro", today=TODAY)

        state = update_record(state, Collection.MONTHS, "m0", "month", "Fevereiro")

        assert state.months[0].month == "Fevereiro"
        assert state.categorized_expenses[0].month == "Fevereiro"
        assert state.trips[0].month == "Fevereiro"
        assert belongs_to_month(state.categorized_expenses[0], state.months[0])

    def test_changing_record_month_rebinds(self) -> None:
        """Should bind to the month record carrying the new label."""
        state = _state_with_months("Janeiro", "Fevereiro")
        state, expense = add_categorized_expense(state, month="Janeiro", today=TODAY)
        state = update_record(state, Collection.CATEGORIZED, expense.id, "month", "fevereiro")
        assert state.categorized_expenses[0].month == "Fevereiro"
        assert state.categorized_expenses[0].month_id == "m1"

    def test_invalid_enum_value(self) -> None:
        """Should reject unknown enum values."""
        state, record = add_savings_transaction(AppState(), today=TODAY)
        with pytest.raises(InvalidFieldValueError):
            update_record(state, Collection.SAVINGS, record.id, "type", "saque")

    def test_missing_record(self) -> None:
        """Should raise for unknown ids."""
        with pytest.raises(RecordNotFoundError):
            update_record(AppState(), Collection.LOANS, "nope", "description", "x")


class TestRemoveRecord:
    """Tests for remove_record."""

    def test_removes_by_id(self) -> None:
        """Should drop only the matching record."""
        state, first = add_loan(AppState())
        state, second = add_loan(state)
        state = remove_record(state, Collection.LOANS, first.id)
        assert state.loans == (second,)

    def test_removing_month_unbinds_without_cascade(self) -> None:
        """Should keep tagged records and fall back to label association."""
        state = _state_with_months("Janeiro")
        state, expense = add_categorized_expense(state, month="Janeiro", today=TODAY)

        state = remove_record(state, Collection.MONTHS, "m0")

        assert state.months == ()
        assert len(state.categorized_expenses) == 1
        assert state.categorized_expenses[0].month_id is None
        assert state.categorized_expenses[0].month == "Janeiro"

    def test_missing_record(self) -> None:
        """Should raise for unknown ids."""
        with pytest.raises(RecordNotFoundError):
            remove_record(AppState(), Collection.TRIPS, "nope")


class TestBelongsToMonth:
    """Tests for belongs_to_month and find_record."""

    def test_bound_record_matches_by_id_only(self) -> None:
        """Should ignore labels when bound."""
        state = _state_with_months("Janeiro", "Janeiro")
        state, expense = add_categorized_expense(state, month="Janeiro", today=TODAY)
        assert belongs_to_month(expense, state.months[0])
        assert not belongs_to_month(expense, state.months[1])

    def test_unbound_record_matches_by_label(self) -> None:
        """Should match every month carrying the label when unbound."""
        _, expense = add_categorized_expense(AppState(), month="Janeiro", today=TODAY)
        state = _state_with_months("Janeiro", "Janeiro")
        assert belongs_to_month(expense, state.months[0])
        assert belongs_to_month(expense, state.months[1])

    def test_find_record(self) -> None:
        """Should find a record by id."""
        state = _state_with_months("Janeiro")
        assert find_record(state, Collection.MONTHS, "m0").month == "Janeiro"
