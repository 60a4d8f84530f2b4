"""Domain entities exposed by the application."""

from .rule_history import DELETED_VALUES, ChangeType, RuleHistoryEntry
from .scoped_rule import (
    AMOUNT_DECIMAL_PLACES,
    NAME_MAX_LENGTH,
    RATE_DECIMAL_PLACES,
    CommissionRule,
    RuleScope,
    ScopedRule,
    VatRule,
    category_key,
    windows_overlap,
)

__all__ = [
    "AMOUNT_DECIMAL_PLACES",
    "ChangeType",
    "CommissionRule",
    "DELETED_VALUES",
    "NAME_MAX_LENGTH",
    "RATE_DECIMAL_PLACES",
    "RuleHistoryEntry",
    "RuleScope",
    "ScopedRule",
    "VatRule",
    "category_key",
    "windows_overlap",
]
