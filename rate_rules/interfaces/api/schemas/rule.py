"""Schemas for scoped rule endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from rate_rules.application.use_cases.rules import (
    CreateRuleCommand,
    UpdateRuleCommand,
)
from rate_rules.domain.entities import CommissionRule, RuleHistoryEntry, ScopedRule


class ScopedRuleCreate(BaseModel):
    """Payload required to create a rule.

    Fields are loosely typed; the rule engine reports missing or
    out-of-range values as validation errors.
    """

    name: str | None = None
    primary_key: str | None = Field(
        default=None, description="Seller id for commission rules, country code for VAT rules"
    )
    category_id: str | None = None
    rate: Decimal | None = None
    effective_from: datetime | None = None
    effective_to: datetime | None = None
    priority: int = 0
    is_active: bool = True
    fixed_fee: Decimal | None = None
    min_rate: Decimal | None = None
    max_rate: Decimal | None = None
    reason: str | None = None

    model_config = ConfigDict(extra="forbid")

    def to_command(self, *, user_id: str | None, user_email: str | None) -> CreateRuleCommand:
        return CreateRuleCommand(
            **self.model_dump(),
            created_by_user_id=user_id,
            created_by_user_email=user_email,
        )


class ScopedRuleUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value, ``null`` clears them."""

    name: str | None = None
    primary_key: str | None = None
    category_id: str | None = None
    rate: Decimal | None = None
    effective_from: datetime | None = None
    effective_to: datetime | None = None
    priority: int | None = None
    is_active: bool | None = None
    fixed_fee: Decimal | None = None
    min_rate: Decimal | None = None
    max_rate: Decimal | None = None
    reason: str | None = None
    expected_version: int | None = None

    model_config = ConfigDict(extra="forbid")

    def to_command(
        self, rule_id: UUID, *, user_id: str | None, user_email: str | None
    ) -> UpdateRuleCommand:
        changes: dict[str, Any] = {}
        for name in self.model_fields_set - {"reason", "expected_version"}:
            value = getattr(self, name)
            # Flags without a meaningful "cleared" state: null means unchanged.
            if value is None and name in {"priority", "is_active"}:
                continue
            changes[name] = value
        return UpdateRuleCommand(
            rule_id=rule_id,
            modified_by_user_id=user_id,
            modified_by_user_email=user_email,
            reason=self.reason,
            expected_version=self.expected_version,
            **changes,
        )


class ScopedRuleRead(BaseModel):
    id: UUID
    name: str
    primary_key: str | None
    category_id: str | None
    rate: Decimal
    fixed_fee: Decimal | None = None
    min_rate: Decimal | None = None
    max_rate: Decimal | None = None
    priority: int
    effective_from: datetime
    effective_to: datetime | None
    is_active: bool
    version: int
    created_at: datetime | None
    created_by_user_id: str | None
    last_updated_at: datetime | None
    last_modified_by_user_id: str | None
    description: str

    @classmethod
    def from_entity(cls, rule: ScopedRule) -> "ScopedRuleRead":
        extras: dict[str, Any] = {}
        if isinstance(rule, CommissionRule):
            extras = {
                "fixed_fee": rule.fixed_fee,
                "min_rate": rule.min_rate,
                "max_rate": rule.max_rate,
            }
        return cls(
            id=rule.id,
            name=rule.name,
            primary_key=rule.primary_key,
            category_id=rule.category_id,
            rate=rule.rate,
            priority=rule.priority,
            effective_from=rule.effective_from,
            effective_to=rule.effective_to,
            is_active=rule.is_active,
            version=rule.version,
            created_at=rule.created_at,
            created_by_user_id=rule.created_by_user_id,
            last_updated_at=rule.last_updated_at,
            last_modified_by_user_id=rule.last_modified_by_user_id,
            description=rule.describe(),
            **extras,
        )


class RuleHistoryRead(BaseModel):
    id: UUID | None
    rule_id: UUID
    change_type: str
    previous_values: str | None
    new_values: str
    changed_at: datetime
    changed_by_user_id: str
    changed_by_user_email: str | None
    reason: str | None

    @classmethod
    def from_entity(cls, entry: RuleHistoryEntry) -> "RuleHistoryRead":
        return cls(
            id=entry.id,
            rule_id=entry.rule_id,
            change_type=entry.change_type.value,
            previous_values=entry.previous_values,
            new_values=entry.new_values,
            changed_at=entry.changed_at,
            changed_by_user_id=entry.changed_by_user_id,
            changed_by_user_email=entry.changed_by_user_email,
            reason=entry.reason,
        )


class RuleHistoryResponse(BaseModel):
    rule_id: UUID
    rule_exists: bool
    current_rule: ScopedRuleRead | None
    history: list[RuleHistoryRead]


class ResolvedRateRead(BaseModel):
    found: bool
    rate: Decimal | None
    applied_rule: ScopedRuleRead | None


__all__ = [
    "ResolvedRateRead",
    "RuleHistoryRead",
    "RuleHistoryResponse",
    "ScopedRuleCreate",
    "ScopedRuleRead",
    "ScopedRuleUpdate",
]
