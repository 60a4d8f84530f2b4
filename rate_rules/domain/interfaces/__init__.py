"""Interfaces the domain expects infrastructure to provide."""

from .rule_store import RuleHistoryStore, RuleStore, UnitOfWork

__all__ = ["RuleHistoryStore", "RuleStore", "UnitOfWork"]
