"""Exceptions raised by the finmaster core.

Commands catch these at the boundary, print a notice and exit non-zero.
"""


class FinmasterError(Exception):
    """Base class for every finmaster failure."""


class RecordNotFoundError(FinmasterError):
    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(f"No {collection} record with id '{record_id}'")
        self.collection = collection
        self.record_id = record_id


class UnknownFieldError(FinmasterError):
    def __init__(self, collection: str, field: str, allowed: tuple[str, ...]) -> None:
        super().__init__(f"Unknown field '{field}' for {collection}. Allowed: {', '.join(allowed)}")
        self.collection = collection
        self.field = field
        self.allowed = allowed


class InvalidFieldValueError(FinmasterError):
    def __init__(self, field: str, value: object, allowed: tuple[str, ...]) -> None:
        super().__init__(f"Invalid value '{value}' for {field}. Allowed: {', '.join(allowed)}")
        self.field = field
        self.value = value
        self.allowed = allowed


class BlobFormatError(FinmasterError):
    """Persisted or imported blob could not be decoded."""


class ImportFailedError(FinmasterError):
    """An import was rejected; the record store was left untouched."""


class ImportInProgressError(FinmasterError):
    """Another import is still running against the same record store."""


class ConfirmationRequiredError(FinmasterError):
    """A destructive operation was attempted without explicit confirmation."""
