"""Aggregate application use cases."""

from .rules import RuleLifecycleService

__all__ = ["RuleLifecycleService"]
