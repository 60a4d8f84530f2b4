"""Repository implementations for infrastructure layer."""

from .rule_history_repository import RuleHistoryRepository
from .scoped_rule_repository import ScopedRuleRepository

__all__ = ["RuleHistoryRepository", "ScopedRuleRepository"]
