"""Exceptions raised by rule store implementations."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from rate_rules.domain.entities import ScopedRule


class RuleStoreError(Exception):
    """The persistence layer failed to complete an operation."""


class OverlappingRuleError(RuleStoreError):
    """A write would leave two active rules with the same scope overlapping.

    Raised by stores that re-check overlaps inside the write transaction; it is
    the safety net behind the in-process conflict pre-check.
    """

    def __init__(self, conflicting_rules: Sequence["ScopedRule"]) -> None:
        self.conflicting_rules = list(conflicting_rules)
        ids = ", ".join(str(rule.id) for rule in self.conflicting_rules)
        super().__init__(f"Write overlaps active rule(s): {ids}")


class StaleRuleError(RuleStoreError):
    """The rule changed since it was read; the conditional update matched nothing."""

    def __init__(self, rule_id: object, expected_version: int) -> None:
        self.rule_id = rule_id
        self.expected_version = expected_version
        super().__init__(
            f"Rule {rule_id} is no longer at version {expected_version}"
        )


__all__ = ["OverlappingRuleError", "RuleStoreError", "StaleRuleError"]
