"""Versioned JSON codec for the persisted AppState blob.

The blob keeps the original camelCase record shape so backups stay
readable by earlier exports. Version 1 is the unversioned shape (no
"version" key, no monthId); version 2 adds both.
"""

import dataclasses
import json
import logging
from enum import Enum
from typing import Any

from finmaster.dates import resolve_month_label
from finmaster.domain.errors import BlobFormatError, InvalidFieldValueError
from finmaster.domain.models import CategoryName, MonthLabel, RecordId
from finmaster.domain.numbers import coerce_amount, coerce_count
from finmaster.domain.records import (
    TRIP_COST_FIELDS,
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
    new_record_id,
    parse_enum,
)

logger = logging.getLogger(__name__)

CURRENT_VERSION = 2

# AppState attribute -> blob key
COLLECTION_KEYS = {
    "months": "months",
    "loans": "loans",
    "trips": "trips",
    "vehicle_expenses": "vehicleExpenses",
    "savings": "savings",
    "categorized_expenses": "categorizedExpenses",
}

MONTH_TAGGED_KEYS = ("trips", "vehicleExpenses", "savings", "categorizedExpenses")
MONTH_TAGGED_ATTRS = ("trips", "vehicle_expenses", "savings", "categorized_expenses")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _encode_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value):
        return _encode_record(value)
    return value


def _encode_record(record: Any) -> dict[str, Any]:
    return {_camel(f.name): _encode_value(getattr(record, f.name)) for f in dataclasses.fields(record)}


def state_to_dict(state: AppState) -> dict[str, Any]:
    """Convert a snapshot to a JSON-ready dict at the current version."""
    data: dict[str, Any] = {"version": CURRENT_VERSION}
    for attr, key in COLLECTION_KEYS.items():
        data[key] = [_encode_record(r) for r in getattr(state, attr)]
    return data


def encode_state(state: AppState, indent: int | None = None) -> str:
    """Serialize a snapshot to JSON text."""
    return json.dumps(state_to_dict(state), ensure_ascii=False, indent=indent)


def migrate_v1(data: dict[str, Any]) -> dict[str, Any]:
    """Upgrade an unversioned blob to version 2.

    Backfills missing collections and record ids, then binds each
    month-tagged record to the first month record carrying its label.

    Args:
        data: Version 1 blob.

    Returns:
        New version 2 blob (the input is not modified).
    """
    migrated: dict[str, Any] = {"version": 2}
    backfilled = 0

    for key in COLLECTION_KEYS.values():
        items = data.get(key) or []
        if not isinstance(items, list):
            raise BlobFormatError(f"'{key}' must be a list")
        fixed = []
        for item in items:
            if not isinstance(item, dict):
                raise BlobFormatError(f"'{key}' entries must be objects")
            item = dict(item)
            if not item.get("id"):
                item["id"] = new_record_id()
                backfilled += 1
            fixed.append(item)
        migrated[key] = fixed

    first_month_by_label: dict[str, str] = {}
    for month in migrated["months"]:
        first_month_by_label.setdefault(str(month.get("month")), month["id"])

    for key in MONTH_TAGGED_KEYS:
        for item in migrated[key]:
            item.setdefault("monthId", first_month_by_label.get(str(item.get("month"))))

    if backfilled:
        logger.info("Backfilled %d missing record ids while migrating blob to version 2", backfilled)
    return migrated


def migrate(data: dict[str, Any]) -> dict[str, Any]:
    """Bring a blob of any supported version to CURRENT_VERSION.

    Raises:
        BlobFormatError: If the version is unknown or newer than supported.
    """
    version = data.get("version", 1)
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise BlobFormatError(f"Invalid blob version: {version!r}")
    if version > CURRENT_VERSION:
        raise BlobFormatError(f"Blob version {version} is newer than supported version {CURRENT_VERSION}")

    if version == 1:
        logger.info("Migrating blob from version 1 to %d", CURRENT_VERSION)
        data = migrate_v1(data)
    return data


def _label(value: Any) -> MonthLabel:
    text = "" if value is None else str(value)
    resolved = resolve_month_label(text) if text else None
    if resolved is None:
        logger.warning("Keeping non-canonical month label %r", text)
        return MonthLabel(text)
    return resolved


def _id(item: dict[str, Any]) -> RecordId:
    return RecordId(str(item.get("id") or new_record_id()))


def _month_id(item: dict[str, Any]) -> RecordId | None:
    value = item.get("monthId")
    return RecordId(str(value)) if value else None


def _text(item: dict[str, Any], key: str, default: str = "") -> str:
    value = item.get(key)
    return default if value is None else str(value)


def _enum(enum_cls: type[Enum], value: Any, key: str) -> Any:
    try:
        return parse_enum(enum_cls, value, key)
    except InvalidFieldValueError as e:
        raise BlobFormatError(str(e)) from e


def _nested(item: dict[str, Any], key: str) -> dict[str, Any]:
    value = item.get(key) or {}
    if not isinstance(value, dict):
        raise BlobFormatError(f"'{key}' must be an object")
    return value


def _decode_month(item: dict[str, Any]) -> MonthRecord:
    expenses = _nested(item, "expenses")
    income = _nested(item, "income")
    return MonthRecord(
        id=_id(item),
        month=_label(item.get("month")),
        year=coerce_count(item.get("year")),
        expenses=MonthlyExpenses(
            **{f.name: coerce_amount(expenses.get(_camel(f.name))) for f in dataclasses.fields(MonthlyExpenses)}
        ),
        income=MonthlyIncome(
            **{f.name: coerce_amount(income.get(_camel(f.name))) for f in dataclasses.fields(MonthlyIncome)}
        ),
    )


def _decode_loan(item: dict[str, Any]) -> LoanRecord:
    return LoanRecord(
        id=_id(item),
        description=_text(item, "description"),
        total_value=coerce_amount(item.get("totalValue")),
        installments=coerce_count(item.get("installments")),
        paid_installments=coerce_count(item.get("paidInstallments")),
        installment_value=coerce_amount(item.get("installmentValue")),
        interest_monthly=coerce_amount(item.get("interestMonthly")),
    )


def _decode_trip(item: dict[str, Any]) -> TripExpenseRecord:
    return TripExpenseRecord(
        id=_id(item),
        month=_label(item.get("month")),
        destination=_text(item, "destination"),
        month_id=_month_id(item),
        **{name: coerce_amount(item.get(_camel(name))) for name in TRIP_COST_FIELDS},
    )


def _decode_vehicle(item: dict[str, Any]) -> VehicleExpenseRecord:
    return VehicleExpenseRecord(
        id=_id(item),
        month=_label(item.get("month")),
        type=_enum(VehicleType, item.get("type"), "type"),
        category=_enum(VehicleCategory, item.get("category"), "category"),
        description=_text(item, "description"),
        value=coerce_amount(item.get("value")),
        month_id=_month_id(item),
    )


def _decode_savings(item: dict[str, Any]) -> SavingsTransactionRecord:
    return SavingsTransactionRecord(
        id=_id(item),
        month=_label(item.get("month")),
        type=_enum(SavingsType, item.get("type"), "type"),
        value=coerce_amount(item.get("value")),
        description=_text(item, "description"),
        month_id=_month_id(item),
    )


def _decode_categorized(item: dict[str, Any]) -> CategorizedExpenseRecord:
    return CategorizedExpenseRecord(
        id=_id(item),
        month=_label(item.get("month")),
        category=CategoryName(_text(item, "category")),
        value=coerce_amount(item.get("value")),
        description=_text(item, "description"),
        month_id=_month_id(item),
    )


_DECODERS = {
    "months": _decode_month,
    "loans": _decode_loan,
    "trips": _decode_trip,
    "vehicleExpenses": _decode_vehicle,
    "savings": _decode_savings,
    "categorizedExpenses": _decode_categorized,
}


def unbind_dangling_month_ids(state: AppState) -> AppState:
    """Clear month ids that point at no month record.

    Such records fall back to label association instead of belonging to
    no month at all.
    """
    month_ids = {month.id for month in state.months}
    collections: dict[str, tuple[Any, ...]] = {}
    unbound = 0
    for attr in MONTH_TAGGED_ATTRS:
        records = []
        for record in getattr(state, attr):
            if record.month_id is not None and record.month_id not in month_ids:
                record = dataclasses.replace(record, month_id=None)
                unbound += 1
            records.append(record)
        collections[attr] = tuple(records)

    if not unbound:
        return state
    logger.info("Unbound %d records whose month no longer exists", unbound)
    return dataclasses.replace(state, **collections)


def state_from_dict(data: Any) -> AppState:
    """Build a snapshot from a decoded blob of any supported version.

    Args:
        data: Parsed JSON value.

    Returns:
        AppState.

    Raises:
        BlobFormatError: If the blob doesn't have the AppState shape.
    """
    if not isinstance(data, dict):
        raise BlobFormatError("Blob must be a JSON object")

    data = migrate(data)

    collections: dict[str, tuple[Any, ...]] = {}
    for attr, key in COLLECTION_KEYS.items():
        items = data.get(key) or []
        if not isinstance(items, list):
            raise BlobFormatError(f"'{key}' must be a list")
        decoded = []
        for item in items:
            if not isinstance(item, dict):
                raise BlobFormatError(f"'{key}' entries must be objects")
            decoded.append(_DECODERS[key](item))
        collections[attr] = tuple(decoded)

    return unbind_dangling_month_ids(AppState(**collections))


def decode_state(text: str) -> AppState:
    """Parse JSON text into a snapshot.

    Raises:
        BlobFormatError: If the text is not valid JSON or has the wrong shape.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise BlobFormatError(f"Invalid JSON: {e}") from e
    return state_from_dict(data)
