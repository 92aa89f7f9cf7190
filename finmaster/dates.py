"""Month label utilities for finmaster.

Pure functions over the twelve canonical month labels.
"""

from datetime import date

from finmaster.domain.models import MonthLabel

MONTHS_BR: tuple[MonthLabel, ...] = (
    MonthLabel("Janeiro"),
    MonthLabel("Fevereiro"),
    MonthLabel("Março"),
    MonthLabel("Abril"),
    MonthLabel("Maio"),
    MonthLabel("Junho"),
    MonthLabel("Julho"),
    MonthLabel("Agosto"),
    MonthLabel("Setembro"),
    MonthLabel("Outubro"),
    MonthLabel("Novembro"),
    MonthLabel("Dezembro"),
)


def month_index(label: str) -> int | None:
    """Get the zero-based position of a canonical label.

    Args:
        label: Month label.

    Returns:
        Index 0-11, or None if the label is not canonical.
    """
    try:
        return MONTHS_BR.index(MonthLabel(label))
    except ValueError:
        return None


def next_month_label(label: str) -> MonthLabel | None:
    """Get the canonical successor of a month label.

    December wraps around to January.

    Args:
        label: Month label.

    Returns:
        Successor label, or None if the label is not canonical.
    """
    idx = month_index(label)
    if idx is None:
        return None
    return MONTHS_BR[(idx + 1) % 12]


def current_month_label(today: date | None = None) -> MonthLabel:
    """Get the canonical label of the current calendar month."""
    if today is None:
        today = date.today()
    return MONTHS_BR[today.month - 1]


def resolve_month_label(label: str) -> MonthLabel | None:
    """Resolve user input to a canonical label.

    Accepts the label itself in any case, an accent-less spelling
    ("marco"), or a month number 1-12.

    Args:
        label: Raw user input.

    Returns:
        Canonical label, or None if the input doesn't name a month.
    """
    text = label.strip()
    if text.isdigit():
        number = int(text)
        if 1 <= number <= 12:
            return MONTHS_BR[number - 1]
        return None

    folded = _fold(text)
    for canonical in MONTHS_BR:
        if _fold(canonical) == folded:
            return canonical
    return None


def _fold(text: str) -> str:
    return text.lower().replace("ç", "c")
