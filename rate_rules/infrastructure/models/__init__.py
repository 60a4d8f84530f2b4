"""ORM models used by the application infrastructure."""

from .rule_history import RuleHistoryModel
from .scoped_rule import ScopedRuleModel

__all__ = ["RuleHistoryModel", "ScopedRuleModel"]
