"""Read-time resolution of the rule governing a context."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from rate_rules.domain.entities import RuleScope, ScopedRule
from rate_rules.domain.interfaces import RuleStore
from rate_rules.utils import ensure_utc

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ResolvedRate:
    rule: ScopedRule
    scope: RuleScope

    @property
    def rate(self) -> Decimal:
        return self.rule.rate

    @property
    def is_general(self) -> bool:
        return self.scope.is_general


def precedence(rule: ScopedRule) -> tuple[int, datetime, str]:
    """Sort key among rules of equal specificity; the largest key wins."""

    return (
        rule.priority,
        ensure_utc(rule.created_at) or _OLDEST,
        str(rule.id),
    )


def pick_governing_rule(
    candidates: Sequence[ScopedRule], scope: RuleScope, as_of: datetime
) -> ScopedRule | None:
    """Return the highest-priority active rule of ``scope`` covering ``as_of``."""

    eligible = [
        rule
        for rule in candidates
        if rule.is_active and rule.scope.matches(scope) and rule.covers(as_of)
    ]
    if not eligible:
        return None
    if len(eligible) > 1:
        logger.warning(
            "%d active rules cover %s at the same specificity for scope %s; "
            "choosing by priority",
            len(eligible),
            as_of.isoformat(),
            scope,
        )
    return max(eligible, key=precedence)


class RateResolver:
    """Answer which single rule governs a context at an instant.

    A category-specific rule always outranks the general rule of the same
    primary key; priority only orders rules of the same specificity.
    """

    def __init__(self, rules: RuleStore) -> None:
        self.rules = rules

    def resolve(self, scope: RuleScope, as_of: datetime) -> ResolvedRate | None:
        as_of = ensure_utc(as_of)
        levels = [scope] if scope.is_general else [scope, scope.general()]

        for level in levels:
            candidates = self.rules.find_active_by_scope(
                level.primary_key, level.category_id, as_of
            )
            rule = pick_governing_rule(candidates, level, as_of)
            if rule is not None:
                logger.debug(
                    "Resolved rule '%s' (ID: %s) for scope %s as of %s",
                    rule.name,
                    rule.id,
                    level,
                    as_of.isoformat(),
                )
                return ResolvedRate(rule=rule, scope=level)

        logger.debug("No rule covers scope %s as of %s", scope, as_of.isoformat())
        return None


__all__ = ["RateResolver", "ResolvedRate", "pick_governing_rule", "precedence"]
