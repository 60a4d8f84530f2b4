"""Write-time detection of overlapping rules with the same scope."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from rate_rules.domain.entities import RuleScope, ScopedRule
from rate_rules.domain.interfaces import RuleStore
from rate_rules.utils import ensure_utc


def is_conflicting(
    rule: ScopedRule,
    scope: RuleScope,
    effective_from: datetime,
    effective_to: datetime | None,
    *,
    exclude_rule_id: UUID | None = None,
) -> bool:
    """Return whether the stored ``rule`` conflicts with the candidate window.

    Matching is scope-exact, with category ids compared case-insensitively: a
    general rule never conflicts with a category-specific one, they are
    different specificity levels.
    """

    if not rule.is_active:
        return False
    if exclude_rule_id is not None and rule.id == exclude_rule_id:
        return False
    if not rule.scope.matches(scope):
        return False
    return rule.overlaps(effective_from, effective_to)


class ConflictDetector:
    """Find active rules that would make resolution ambiguous.

    This is a user-facing pre-check. It is not atomic with the write that
    follows, so concurrent writers rely on the store re-checking inside its
    own transaction.
    """

    def __init__(self, rules: RuleStore) -> None:
        self.rules = rules

    def find_conflicts(
        self,
        scope: RuleScope,
        effective_from: datetime,
        effective_to: datetime | None = None,
        *,
        exclude_rule_id: UUID | None = None,
    ) -> list[ScopedRule]:
        candidates = self.rules.find_conflicting_rules(
            scope.primary_key,
            scope.category_id,
            effective_from,
            effective_to,
            exclude_rule_id=exclude_rule_id,
        )
        conflicts = [
            rule
            for rule in candidates
            if is_conflicting(
                rule,
                scope,
                effective_from,
                effective_to,
                exclude_rule_id=exclude_rule_id,
            )
        ]
        conflicts.sort(key=lambda rule: (ensure_utc(rule.effective_from), str(rule.id)))
        return conflicts


__all__ = ["ConflictDetector", "is_conflicting"]
