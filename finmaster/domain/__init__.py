"""Domain models and types for finmaster.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from finmaster.domain.models import CategoryName, Money, MonthLabel, RecordId

__all__ = ["Money", "MonthLabel", "RecordId", "CategoryName"]
