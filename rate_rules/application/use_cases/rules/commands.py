"""Commands accepted by the rule lifecycle and the drafts built from them."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from rate_rules.domain.entities import CommissionRule, ScopedRule


class _Unset:
    """Marker for update fields the caller did not provide."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def to_decimal(value: Any) -> Decimal | None:
    """Convert ``value`` into a :class:`Decimal`.

    Raises ``ValueError`` when the value is not numeric. Floats go through
    ``str`` so ``12.5`` becomes ``Decimal("12.5")`` rather than its binary
    expansion.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{value!r} is not a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"{value!r} is not a number") from exc
    if not result.is_finite():
        raise ValueError(f"{value!r} is not a finite number")
    return result


@dataclass
class RuleDraft:
    """In-memory, uncommitted state of a rule being created or edited.

    Values are kept as provided so validation can report malformed input
    instead of failing while building the entity.
    """

    name: Any = None
    primary_key: Any = None
    category_id: Any = None
    rate: Any = None
    effective_from: Any = None
    effective_to: Any = None
    priority: Any = 0
    is_active: bool = True
    fixed_fee: Any = None
    min_rate: Any = None
    max_rate: Any = None

    @classmethod
    def from_rule(cls, rule: ScopedRule) -> "RuleDraft":
        draft = cls(
            name=rule.name,
            primary_key=rule.primary_key,
            category_id=rule.category_id,
            rate=rule.rate,
            effective_from=rule.effective_from,
            effective_to=rule.effective_to,
            priority=rule.priority,
            is_active=rule.is_active,
        )
        if isinstance(rule, CommissionRule):
            draft.fixed_fee = rule.fixed_fee
            draft.min_rate = rule.min_rate
            draft.max_rate = rule.max_rate
        return draft


@dataclass
class CreateRuleCommand:
    """Administrator request to create a rule."""

    name: str | None = None
    primary_key: str | None = None
    category_id: str | None = None
    rate: Decimal | None = None
    effective_from: datetime | None = None
    effective_to: datetime | None = None
    priority: int = 0
    is_active: bool = True
    fixed_fee: Decimal | None = None
    min_rate: Decimal | None = None
    max_rate: Decimal | None = None
    created_by_user_id: str | None = None
    created_by_user_email: str | None = None
    reason: str | None = None

    def to_draft(self) -> RuleDraft:
        return RuleDraft(
            name=self.name,
            primary_key=self.primary_key,
            category_id=self.category_id,
            rate=self.rate,
            effective_from=self.effective_from,
            effective_to=self.effective_to,
            priority=self.priority,
            is_active=self.is_active,
            fixed_fee=self.fixed_fee,
            min_rate=self.min_rate,
            max_rate=self.max_rate,
        )


_DRAFT_FIELDS = tuple(field.name for field in fields(RuleDraft))


@dataclass
class UpdateRuleCommand:
    """Administrator request to edit a rule.

    Fields left as :data:`UNSET` keep their stored value; ``None`` clears an
    optional field such as ``category_id`` or ``effective_to``.
    """

    rule_id: UUID | None = None
    name: Any = UNSET
    primary_key: Any = UNSET
    category_id: Any = UNSET
    rate: Any = UNSET
    effective_from: Any = UNSET
    effective_to: Any = UNSET
    priority: Any = UNSET
    is_active: Any = UNSET
    fixed_fee: Any = UNSET
    min_rate: Any = UNSET
    max_rate: Any = UNSET
    modified_by_user_id: str | None = None
    modified_by_user_email: str | None = None
    reason: str | None = None
    expected_version: int | None = None

    def changed_fields(self) -> dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in _DRAFT_FIELDS
            if getattr(self, name) is not UNSET
        }

    def merge_into(self, current: ScopedRule) -> RuleDraft:
        """Return the draft obtained by applying this command over ``current``."""

        draft = RuleDraft.from_rule(current)
        for name, value in self.changed_fields().items():
            setattr(draft, name, value)
        return draft


__all__ = [
    "CreateRuleCommand",
    "RuleDraft",
    "UNSET",
    "UpdateRuleCommand",
    "to_decimal",
]
