"""Record Store data and pure mutation functions.

This module contains the functional core for record operations:
- No I/O operations (no database, no console, no files)
- Every mutation returns a new AppState; records are never changed in place
- Month-tagged records carry both a display label and a month_id reference

All monetary amounts are in reais (Money type).
"""

import dataclasses
import re
import secrets
import string
import unicodedata
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from finmaster.dates import MONTHS_BR, current_month_label, next_month_label, resolve_month_label
from finmaster.domain.errors import (
    InvalidFieldValueError,
    RecordNotFoundError,
    UnknownFieldError,
)
from finmaster.domain.models import CategoryName, Money, MonthLabel, RecordId
from finmaster.domain.numbers import coerce_amount, coerce_count


class VehicleType(str, Enum):
    CAR = "Carro"
    MOTORCYCLE = "Moto"


class VehicleCategory(str, Enum):
    MAINTENANCE = "Manutenção"
    FUEL = "Combustível"


class SavingsType(str, Enum):
    DEPOSIT = "entrada"
    WITHDRAWAL = "retirada"
    YIELD = "rendimento"


class Collection(str, Enum):
    """Record collections of AppState. Values are the AppState attribute names."""

    MONTHS = "months"
    LOANS = "loans"
    TRIPS = "trips"
    VEHICLES = "vehicle_expenses"
    SAVINGS = "savings"
    CATEGORIZED = "categorized_expenses"


CATEGORIES: tuple[CategoryName, ...] = (
    CategoryName("Alimentação"),
    CategoryName("Saúde"),
    CategoryName("Lazer"),
    CategoryName("Educação"),
    CategoryName("Transporte"),
    CategoryName("Vestuário"),
    CategoryName("Presentes"),
    CategoryName("Assinaturas"),
    CategoryName("Outros"),
)

EXPENSE_FIELDS = ("inter", "nubank", "m_pago", "agua", "energia", "outros", "pix")
INCOME_FIELDS = ("salario", "bonus", "outros", "recarga_pay")
TRIP_COST_FIELDS = ("car_rental", "fuel", "food", "others", "credit_card", "pix")

_ID_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class MonthlyExpenses:
    """Immutable fixed expenses of a month."""

    inter: Money = Money(0.0)
    nubank: Money = Money(0.0)
    m_pago: Money = Money(0.0)
    agua: Money = Money(0.0)
    energia: Money = Money(0.0)
    outros: Money = Money(0.0)
    pix: Money = Money(0.0)


@dataclass(frozen=True)
class MonthlyIncome:
    """Immutable income of a month."""

    salario: Money = Money(0.0)
    bonus: Money = Money(0.0)
    outros: Money = Money(0.0)
    recarga_pay: Money = Money(0.0)


@dataclass(frozen=True)
class MonthRecord:
    """Immutable fixed monthly record."""

    id: RecordId
    month: MonthLabel
    year: int
    expenses: MonthlyExpenses = field(default_factory=MonthlyExpenses)
    income: MonthlyIncome = field(default_factory=MonthlyIncome)


@dataclass(frozen=True)
class LoanRecord:
    """Immutable loan record.

    interest_monthly is informational; no computation reads it.
    """

    id: RecordId
    description: str = "Novo Empréstimo"
    total_value: Money = Money(0.0)
    installments: int = 1
    paid_installments: int = 0
    installment_value: Money = Money(0.0)
    interest_monthly: Money = Money(0.0)


@dataclass(frozen=True)
class TripExpenseRecord:
    """Immutable trip cost record."""

    id: RecordId
    month: MonthLabel
    destination: str = "Nova Viagem"
    car_rental: Money = Money(0.0)
    fuel: Money = Money(0.0)
    food: Money = Money(0.0)
    others: Money = Money(0.0)
    credit_card: Money = Money(0.0)
    pix: Money = Money(0.0)
    month_id: RecordId | None = None


@dataclass(frozen=True)
class VehicleExpenseRecord:
    """Immutable vehicle cost record."""

    id: RecordId
    month: MonthLabel
    type: VehicleType = VehicleType.CAR
    category: VehicleCategory = VehicleCategory.FUEL
    description: str = ""
    value: Money = Money(0.0)
    month_id: RecordId | None = None


@dataclass(frozen=True)
class SavingsTransactionRecord:
    """Immutable savings movement."""

    id: RecordId
    month: MonthLabel
    type: SavingsType = SavingsType.DEPOSIT
    value: Money = Money(0.0)
    description: str = ""
    month_id: RecordId | None = None


@dataclass(frozen=True)
class CategorizedExpenseRecord:
    """Immutable variable expense tagged with a free-text category."""

    id: RecordId
    month: MonthLabel
    category: CategoryName = CATEGORIES[0]
    value: Money = Money(0.0)
    description: str = "Novo gasto"
    month_id: RecordId | None = None


MonthTaggedRecord = TripExpenseRecord | VehicleExpenseRecord | SavingsTransactionRecord | CategorizedExpenseRecord


@dataclass(frozen=True)
class AppState:
    """Immutable snapshot of every record collection."""

    months: tuple[MonthRecord, ...] = ()
    loans: tuple[LoanRecord, ...] = ()
    trips: tuple[TripExpenseRecord, ...] = ()
    vehicle_expenses: tuple[VehicleExpenseRecord, ...] = ()
    savings: tuple[SavingsTransactionRecord, ...] = ()
    categorized_expenses: tuple[CategorizedExpenseRecord, ...] = ()

    def records(self, collection: Collection) -> tuple[Any, ...]:
        """Get the records of one collection."""
        return getattr(self, collection.value)

    def count(self) -> int:
        """Total number of records across all collections."""
        return sum(len(self.records(c)) for c in Collection)


_DEFAULT_DESCRIPTIONS = {
    VehicleType.CAR: "Novo Gasto Carro",
    VehicleType.MOTORCYCLE: "Novo Gasto Moto",
    SavingsType.DEPOSIT: "Depósito",
    SavingsType.WITHDRAWAL: "Retirada",
    SavingsType.YIELD: "Rendimento",
}

# Field kinds per collection: "amount", "count", "text", "month", or an Enum class.
_FIELD_KINDS: dict[Collection, dict[str, Any]] = {
    Collection.MONTHS: {
        "month": "month",
        "year": "count",
        **{f"expenses.{name}": "amount" for name in EXPENSE_FIELDS},
        **{f"income.{name}": "amount" for name in INCOME_FIELDS},
    },
    Collection.LOANS: {
        "description": "text",
        "total_value": "amount",
        "installments": "count",
        "paid_installments": "count",
        "installment_value": "amount",
        "interest_monthly": "amount",
    },
    Collection.TRIPS: {
        "destination": "text",
        "month": "month",
        **{name: "amount" for name in TRIP_COST_FIELDS},
    },
    Collection.VEHICLES: {
        "type": VehicleType,
        "category": VehicleCategory,
        "description": "text",
        "value": "amount",
        "month": "month",
    },
    Collection.SAVINGS: {
        "type": SavingsType,
        "value": "amount",
        "month": "month",
        "description": "text",
    },
    Collection.CATEGORIZED: {
        "category": "text",
        "value": "amount",
        "month": "month",
        "description": "text",
    },
}


def new_record_id() -> RecordId:
    """Generate a random 9-character base-36 identifier."""
    return RecordId("".join(secrets.choice(_ID_ALPHABET) for _ in range(9)))


def fold_text(text: str) -> str:
    """Lowercase and strip accents, for lenient matching of user input."""
    decomposed = unicodedata.normalize("NFKD", text.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def parse_enum(enum_cls: type[Enum], value: Any, field_name: str) -> Any:
    """Parse user input into an enum member.

    Matches the member value or name, ignoring case and accents.

    Raises:
        InvalidFieldValueError: If nothing matches.
    """
    if isinstance(value, enum_cls):
        return value
    folded = fold_text(str(value))
    for member in enum_cls:
        if folded in (fold_text(member.value), fold_text(member.name)):
            return member
    raise InvalidFieldValueError(field_name, value, tuple(m.value for m in enum_cls))


def field_names(collection: Collection) -> tuple[str, ...]:
    """List the updatable field names of a collection."""
    return tuple(_FIELD_KINDS[collection])


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name.strip()).lower()


def resolve_field_name(collection: Collection, name: str) -> str:
    """Resolve user input to an updatable field name.

    camelCase spellings are accepted (mPago, totalValue). For months,
    unqualified expense/income names are accepted when unambiguous
    ("salario", but not "outros").

    Raises:
        UnknownFieldError: If the name doesn't resolve to exactly one field.
    """
    kinds = _FIELD_KINDS[collection]
    candidate = ".".join(_snake_case(part) for part in name.split("."))
    if candidate in kinds:
        return candidate

    if collection is Collection.MONTHS and "." not in candidate:
        matches = [key for key in kinds if key.endswith(f".{candidate}")]
        if len(matches) == 1:
            return matches[0]

    raise UnknownFieldError(collection.value, name, tuple(kinds))


def bind_month_id(months: tuple[MonthRecord, ...], label: str) -> RecordId | None:
    """Find the id of the first month record carrying a label."""
    for month in months:
        if month.month == label:
            return month.id
    return None


def belongs_to_month(record: MonthTaggedRecord, month: MonthRecord) -> bool:
    """Check whether a month-tagged record is associated with a month record.

    Bound records (month_id set) match by id. Unbound records fall back to
    label equality.
    """
    if record.month_id is not None:
        return record.month_id == month.id
    return record.month == month.month


def find_record(state: AppState, collection: Collection, record_id: str) -> Any:
    """Find a record by id.

    Raises:
        RecordNotFoundError: If no record has that id.
    """
    for record in state.records(collection):
        if record.id == record_id:
            return record
    raise RecordNotFoundError(collection.value, record_id)


def _with_collection(state: AppState, collection: Collection, records: tuple[Any, ...]) -> AppState:
    return dataclasses.replace(state, **{collection.value: records})


def _append(state: AppState, collection: Collection, record: Any) -> AppState:
    return _with_collection(state, collection, state.records(collection) + (record,))


def _require_month_label(value: Any) -> MonthLabel:
    label = resolve_month_label(str(value))
    if label is None:
        raise InvalidFieldValueError("month", value, MONTHS_BR)
    return label


def _default_tag_month(month: str | None, today: date | None) -> MonthLabel:
    if month is None:
        return current_month_label(today)
    return _require_month_label(month)


def add_month(
    state: AppState,
    month: str | None = None,
    year: int | None = None,
    today: date | None = None,
    record_id: RecordId | None = None,
) -> tuple[AppState, MonthRecord]:
    """Append a new month record with zeroed expenses and income.

    Without an explicit label, the new month follows the last month record
    (December wraps to January), or is the current calendar month when the
    store has no months yet.

    Args:
        state: Current snapshot.
        month: Optional month label.
        year: Optional year (defaults to the current year).
        today: Reference date (defaults to date.today()).
        record_id: Optional id (generated if omitted).

    Returns:
        Tuple of (new_state, new_record).
    """
    if today is None:
        today = date.today()

    if month is not None:
        label = _require_month_label(month)
    elif state.months:
        label = next_month_label(state.months[-1].month) or MONTHS_BR[0]
    else:
        label = current_month_label(today)

    record = MonthRecord(
        id=record_id or new_record_id(),
        month=label,
        year=year if year is not None else today.year,
    )
    return _append(state, Collection.MONTHS, record), record


def add_loan(
    state: AppState,
    description: str | None = None,
    total_value: Any = 0,
    installments: Any = 1,
    paid_installments: Any = 0,
    installment_value: Any = 0,
    interest_monthly: Any = 0,
    record_id: RecordId | None = None,
) -> tuple[AppState, LoanRecord]:
    """Append a new loan record. Numeric inputs are coerced."""
    record = LoanRecord(
        id=record_id or new_record_id(),
        description=description if description is not None else LoanRecord.description,
        total_value=coerce_amount(total_value),
        installments=coerce_count(installments),
        paid_installments=coerce_count(paid_installments),
        installment_value=coerce_amount(installment_value),
        interest_monthly=coerce_amount(interest_monthly),
    )
    return _append(state, Collection.LOANS, record), record


def add_trip(
    state: AppState,
    destination: str | None = None,
    month: str | None = None,
    costs: dict[str, Any] | None = None,
    today: date | None = None,
    record_id: RecordId | None = None,
) -> tuple[AppState, TripExpenseRecord]:
    """Append a new trip record.

    Args:
        state: Current snapshot.
        destination: Trip destination.
        month: Month label (defaults to the current calendar month).
        costs: Optional mapping of cost field name to value.
        today: Reference date for the default month.
        record_id: Optional id (generated if omitted).

    Returns:
        Tuple of (new_state, new_record).
    """
    label = _default_tag_month(month, today)
    amounts = {name: coerce_amount((costs or {}).get(name)) for name in TRIP_COST_FIELDS}
    record = TripExpenseRecord(
        id=record_id or new_record_id(),
        month=label,
        destination=destination if destination is not None else TripExpenseRecord.destination,
        month_id=bind_month_id(state.months, label),
        **amounts,
    )
    return _append(state, Collection.TRIPS, record), record


def add_vehicle_expense(
    state: AppState,
    vehicle_type: Any = VehicleType.CAR,
    category: Any = VehicleCategory.FUEL,
    description: str | None = None,
    value: Any = 0,
    month: str | None = None,
    today: date | None = None,
    record_id: RecordId | None = None,
) -> tuple[AppState, VehicleExpenseRecord]:
    """Append a new vehicle expense.

    Raises:
        InvalidFieldValueError: If the vehicle type or category is unknown.
    """
    parsed_type = parse_enum(VehicleType, vehicle_type, "type")
    label = _default_tag_month(month, today)
    record = VehicleExpenseRecord(
        id=record_id or new_record_id(),
        month=label,
        type=parsed_type,
        category=parse_enum(VehicleCategory, category, "category"),
        description=description if description is not None else _DEFAULT_DESCRIPTIONS[parsed_type],
        value=coerce_amount(value),
        month_id=bind_month_id(state.months, label),
    )
    return _append(state, Collection.VEHICLES, record), record


def add_savings_transaction(
    state: AppState,
    transaction_type: Any = SavingsType.DEPOSIT,
    value: Any = 0,
    month: str | None = None,
    description: str | None = None,
    today: date | None = None,
    record_id: RecordId | None = None,
) -> tuple[AppState, SavingsTransactionRecord]:
    """Append a new savings movement.

    Raises:
        InvalidFieldValueError: If the transaction type is unknown.
    """
    parsed_type = parse_enum(SavingsType, transaction_type, "type")
    label = _default_tag_month(month, today)
    record = SavingsTransactionRecord(
        id=record_id or new_record_id(),
        month=label,
        type=parsed_type,
        value=coerce_amount(value),
        description=description if description is not None else _DEFAULT_DESCRIPTIONS[parsed_type],
        month_id=bind_month_id(state.months, label),
    )
    return _append(state, Collection.SAVINGS, record), record


def add_categorized_expense(
    state: AppState,
    category: str | None = None,
    value: Any = 0,
    month: str | None = None,
    description: str | None = None,
    today: date | None = None,
    record_id: RecordId | None = None,
) -> tuple[AppState, CategorizedExpenseRecord]:
    """Append a new categorized expense.

    Without an explicit month, the expense goes to the last month record,
    or to the current calendar month when there are no months.
    """
    if month is None and state.months:
        label = state.months[-1].month
    else:
        label = _default_tag_month(month, today)

    record = CategorizedExpenseRecord(
        id=record_id or new_record_id(),
        month=label,
        category=CategoryName(category) if category else CATEGORIES[0],
        value=coerce_amount(value),
        description=description if description is not None else CategorizedExpenseRecord.description,
        month_id=bind_month_id(state.months, label),
    )
    return _append(state, Collection.CATEGORIZED, record), record


def append_months(state: AppState, months: list[MonthRecord]) -> AppState:
    """Append imported month records; existing months are never merged."""
    return dataclasses.replace(state, months=state.months + tuple(months))


def _coerce_field(kind: Any, field_name: str, value: Any) -> Any:
    if kind == "amount":
        return coerce_amount(value)
    if kind == "count":
        return coerce_count(value)
    if kind == "month":
        return _require_month_label(value)
    if kind == "text":
        return "" if value is None else str(value)
    return parse_enum(kind, value, field_name)


def _relabel_bound_records(state: AppState, month_id: RecordId, label: MonthLabel) -> AppState:
    updates: dict[str, tuple[Any, ...]] = {}
    for collection in (Collection.TRIPS, Collection.VEHICLES, Collection.SAVINGS, Collection.CATEGORIZED):
        updates[collection.value] = tuple(
            dataclasses.replace(r, month=label) if r.month_id == month_id else r for r in state.records(collection)
        )
    return dataclasses.replace(state, **updates)


def _unbind_records(state: AppState, month_id: RecordId) -> AppState:
    updates: dict[str, tuple[Any, ...]] = {}
    for collection in (Collection.TRIPS, Collection.VEHICLES, Collection.SAVINGS, Collection.CATEGORIZED):
        updates[collection.value] = tuple(
            dataclasses.replace(r, month_id=None) if r.month_id == month_id else r for r in state.records(collection)
        )
    return dataclasses.replace(state, **updates)


def update_record(state: AppState, collection: Collection, record_id: str, field_name: str, value: Any) -> AppState:
    """Update a single field of a record.

    Numeric fields are coerced (invalid input becomes 0). Changing a month
    record's label carries every bound record along; changing the month of
    a month-tagged record rebinds it.

    Args:
        state: Current snapshot.
        collection: Collection holding the record.
        record_id: Record id.
        field_name: Field name (see field_names()).
        value: Raw new value.

    Returns:
        New snapshot.

    Raises:
        RecordNotFoundError: If no record has that id.
        UnknownFieldError: If the field doesn't exist.
        InvalidFieldValueError: If an enum or month value is not recognized.
    """
    resolved = resolve_field_name(collection, field_name)
    record = find_record(state, collection, record_id)
    coerced = _coerce_field(_FIELD_KINDS[collection][resolved], resolved, value)

    if collection is Collection.MONTHS and "." in resolved:
        group, name = resolved.split(".", 1)
        nested = dataclasses.replace(getattr(record, group), **{name: coerced})
        updated = dataclasses.replace(record, **{group: nested})
    elif resolved == "month" and collection is not Collection.MONTHS:
        updated = dataclasses.replace(record, month=coerced, month_id=bind_month_id(state.months, coerced))
    else:
        updated = dataclasses.replace(record, **{resolved: coerced})

    records = tuple(updated if r.id == record_id else r for r in state.records(collection))
    new_state = _with_collection(state, collection, records)

    if collection is Collection.MONTHS and resolved == "month":
        new_state = _relabel_bound_records(new_state, record.id, coerced)

    return new_state


def remove_record(state: AppState, collection: Collection, record_id: str) -> AppState:
    """Remove a record by id.

    Removing a month record doesn't cascade: records bound to it keep their
    label and fall back to label association.

    Raises:
        RecordNotFoundError: If no record has that id.
    """
    record = find_record(state, collection, record_id)
    records = tuple(r for r in state.records(collection) if r.id != record_id)
    new_state = _with_collection(state, collection, records)

    if collection is Collection.MONTHS:
        new_state = _unbind_records(new_state, record.id)

    return new_state
