"""Result objects returned by the rule lifecycle service."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from rate_rules.domain.entities import RuleHistoryEntry, ScopedRule


class ErrorKind(str, Enum):
    """Why an operation failed, so callers can render each case differently."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORE = "store"


@dataclass(frozen=True)
class OperationResult:
    succeeded: bool
    errors: tuple[str, ...] = ()
    error_kind: ErrorKind | None = None

    @classmethod
    def failure(cls, errors: Iterable[str], kind: ErrorKind = ErrorKind.VALIDATION):
        return cls(succeeded=False, errors=tuple(errors), error_kind=kind)

    @classmethod
    def not_found(cls, message: str):
        return cls.failure([message], ErrorKind.NOT_FOUND)

    @classmethod
    def store_failure(cls, message: str):
        return cls.failure([message], ErrorKind.STORE)


@dataclass(frozen=True)
class RuleResult(OperationResult):
    """Outcome of creating, updating or reading a single rule."""

    rule: ScopedRule | None = None
    conflicting_rules: tuple[ScopedRule, ...] = ()

    @classmethod
    def success(cls, rule: ScopedRule) -> "RuleResult":
        return cls(succeeded=True, rule=rule)

    @classmethod
    def conflict(
        cls, conflicting_rules: Sequence[ScopedRule], errors: Iterable[str]
    ) -> "RuleResult":
        return cls(
            succeeded=False,
            errors=tuple(errors),
            error_kind=ErrorKind.CONFLICT,
            conflicting_rules=tuple(conflicting_rules),
        )


@dataclass(frozen=True)
class DeleteRuleResult(OperationResult):
    """Outcome of deleting a rule; ``rule`` holds the removed state."""

    rule: ScopedRule | None = None

    @classmethod
    def success(cls, rule: ScopedRule) -> "DeleteRuleResult":
        return cls(succeeded=True, rule=rule)


@dataclass(frozen=True)
class RuleListResult(OperationResult):
    rules: tuple[ScopedRule, ...] = ()

    @classmethod
    def success(cls, rules: Iterable[ScopedRule]) -> "RuleListResult":
        return cls(succeeded=True, rules=tuple(rules))


@dataclass(frozen=True)
class ResolveRateResult(OperationResult):
    """Outcome of resolving the governing rule for a context.

    Finding no rule is a success with ``rate`` and ``applied_rule`` left as
    ``None``: it means no override is configured and the caller applies its
    own default.
    """

    rate: Decimal | None = None
    applied_rule: ScopedRule | None = None

    @property
    def found(self) -> bool:
        return self.applied_rule is not None

    @classmethod
    def success(cls, rate: Decimal, applied_rule: ScopedRule) -> "ResolveRateResult":
        return cls(succeeded=True, rate=rate, applied_rule=applied_rule)

    @classmethod
    def no_rate_found(cls) -> "ResolveRateResult":
        return cls(succeeded=True)


@dataclass(frozen=True)
class RuleHistoryResult(OperationResult):
    """History of a rule plus its live state, ``None`` once it was deleted."""

    history: tuple[RuleHistoryEntry, ...] = ()
    current_rule: ScopedRule | None = None

    @property
    def rule_exists(self) -> bool:
        return self.current_rule is not None

    @classmethod
    def success(
        cls, history: Iterable[RuleHistoryEntry], current_rule: ScopedRule | None
    ) -> "RuleHistoryResult":
        return cls(succeeded=True, history=tuple(history), current_rule=current_rule)


__all__ = [
    "DeleteRuleResult",
    "ErrorKind",
    "OperationResult",
    "ResolveRateResult",
    "RuleHistoryResult",
    "RuleListResult",
    "RuleResult",
]
