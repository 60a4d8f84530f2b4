"""Persistence interfaces consumed by the rule engine."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol
from uuid import UUID

from rate_rules.domain.entities import RuleHistoryEntry, ScopedRule


class RuleStore(Protocol):
    """Durable storage for the live rules of one rule family.

    Implementations may return a superset of the requested rows from the two
    scope queries; the engine re-applies the exact predicates. Writes of active
    rules should re-check overlaps atomically and raise
    :class:`~rate_rules.domain.errors.OverlappingRuleError`, because the
    engine's own conflict check is not atomic with the write.
    """

    def find_conflicting_rules(
        self,
        primary_key: str | None,
        category_id: str | None,
        effective_from: datetime,
        effective_to: datetime | None,
        *,
        exclude_rule_id: UUID | None = None,
    ) -> Sequence[ScopedRule]:
        """Return active rules with this exact scope whose window overlaps."""

    def find_active_by_scope(
        self,
        primary_key: str | None,
        category_id: str | None,
        as_of: datetime,
    ) -> Sequence[ScopedRule]:
        """Return active rules with this exact scope covering ``as_of``."""

    def get(self, rule_id: UUID) -> ScopedRule | None:
        """Return the live rule or ``None`` when it does not exist."""

    def list(self) -> Sequence[ScopedRule]:
        """Return every live rule of the family."""

    def add(self, rule: ScopedRule) -> ScopedRule:
        """Persist a new rule and return the stored state."""

    def update(self, rule: ScopedRule, *, expected_version: int | None = None) -> ScopedRule:
        """Persist ``rule`` over the stored state.

        When ``expected_version`` is given the write only applies if the stored
        version still equals it.
        """

    def delete(self, rule_id: UUID) -> None:
        """Remove the live record."""


class RuleHistoryStore(Protocol):
    """Append-only storage for rule history entries."""

    def append(self, entry: RuleHistoryEntry) -> RuleHistoryEntry:
        """Persist ``entry``."""

    def list_for_rule(self, rule_id: UUID) -> Sequence[RuleHistoryEntry]:
        """Return entries for ``rule_id`` in the order they were recorded."""


class UnitOfWork(Protocol):
    """Transaction spanning a rule write and its history entry."""

    def commit(self) -> None:
        """Make every pending write durable."""

    def rollback(self) -> None:
        """Discard every pending write."""


__all__ = ["RuleHistoryStore", "RuleStore", "UnitOfWork"]
