"""Domain type definitions for finmaster.

These NewTypes provide semantic clarity and help with type checking:
- Money: Amount in reais (BRL)
- MonthLabel: One of the twelve canonical Portuguese month names
- RecordId: Opaque record identifier
- CategoryName: Free-text label of a categorized expense
"""

from typing import NewType

# Money amounts are kept as floats in reais; rounding happens only in format_currency
Money = NewType("Money", float)

# Month label is always one of MONTHS_BR (e.g., "Janeiro")
MonthLabel = NewType("MonthLabel", str)

# Record identifiers are 9-char base-36 strings
RecordId = NewType("RecordId", str)

# Category label for categorized expenses
CategoryName = NewType("CategoryName", str)
