"""Rule families handled by the generic rule engine."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from rate_rules.domain.entities import CommissionRule, RuleScope, ScopedRule, VatRule
from rate_rules.utils import ensure_utc
from .commands import RuleDraft, to_decimal
from .validators import (
    reject_commission_terms,
    validate_commission_terms,
    validate_country_code,
)


def clean_identifier(value: Any) -> str | None:
    """Strip ``value``; blank identifiers are treated as absent."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_country_code(value: Any) -> str | None:
    cleaned = clean_identifier(value)
    return cleaned.upper() if cleaned is not None else None


def _optional_primary_key(_: Any) -> list[str]:
    return []


@dataclass(frozen=True)
class RuleFamily:
    """Parameters that specialise the engine for one kind of rule."""

    key: str
    label: str
    rate_label: str
    primary_key_label: str
    rule_type: type[ScopedRule]
    normalize_primary_key: Callable[[Any], str | None]
    validate_primary_key: Callable[[Any], list[str]]
    validate_terms: Callable[[RuleDraft], list[str]]

    @property
    def has_commission_terms(self) -> bool:
        return issubclass(self.rule_type, CommissionRule)

    def scope_for(self, primary_key: Any, category_id: Any) -> RuleScope:
        return RuleScope(
            primary_key=self.normalize_primary_key(primary_key),
            category_id=clean_identifier(category_id),
        )

    def normalize(self, draft: RuleDraft) -> RuleDraft:
        """Normalize identifiers and text in place and return ``draft``."""

        if isinstance(draft.name, str):
            draft.name = draft.name.strip()
        draft.primary_key = self.normalize_primary_key(draft.primary_key)
        draft.category_id = clean_identifier(draft.category_id)
        return draft

    def build_rule(
        self,
        draft: RuleDraft,
        *,
        rule_id: UUID,
        version: int,
        created_at: datetime | None,
        created_by_user_id: str | None,
        last_updated_at: datetime | None,
        last_modified_by_user_id: str | None,
    ) -> ScopedRule:
        """Build the entity for a draft that already passed validation."""

        values: dict[str, Any] = {
            "id": rule_id,
            "name": draft.name,
            "scope": RuleScope(draft.primary_key, draft.category_id),
            "rate": to_decimal(draft.rate),
            "effective_from": ensure_utc(draft.effective_from),
            "effective_to": ensure_utc(draft.effective_to),
            "priority": draft.priority,
            "is_active": bool(draft.is_active),
            "version": version,
            "created_at": created_at,
            "created_by_user_id": created_by_user_id,
            "last_updated_at": last_updated_at,
            "last_modified_by_user_id": last_modified_by_user_id,
        }
        if self.has_commission_terms:
            values["fixed_fee"] = to_decimal(draft.fixed_fee) or Decimal("0")
            values["min_rate"] = to_decimal(draft.min_rate)
            values["max_rate"] = to_decimal(draft.max_rate)
        return self.rule_type(**values)


COMMISSION_RULES = RuleFamily(
    key="commission",
    label="commission rule",
    rate_label="Commission rate",
    primary_key_label="Seller ID",
    rule_type=CommissionRule,
    normalize_primary_key=clean_identifier,
    validate_primary_key=_optional_primary_key,
    validate_terms=validate_commission_terms,
)

VAT_RULES = RuleFamily(
    key="vat",
    label="VAT rule",
    rate_label="Tax rate",
    primary_key_label="Country code",
    rule_type=VatRule,
    normalize_primary_key=normalize_country_code,
    validate_primary_key=validate_country_code,
    validate_terms=reject_commission_terms,
)

RULE_FAMILIES: dict[str, RuleFamily] = {
    family.key: family for family in (COMMISSION_RULES, VAT_RULES)
}


def get_family(key: str) -> RuleFamily:
    try:
        return RULE_FAMILIES[key]
    except KeyError:
        raise ValueError(f"Unknown rule family '{key}'") from None


__all__ = [
    "COMMISSION_RULES",
    "RULE_FAMILIES",
    "RuleFamily",
    "VAT_RULES",
    "clean_identifier",
    "get_family",
    "normalize_country_code",
]
