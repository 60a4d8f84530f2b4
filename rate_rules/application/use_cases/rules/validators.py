"""Validation helpers for rule use cases.

Every helper returns a list of human-readable messages; an empty list means
the input is valid. Nothing here touches a store.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from rate_rules.domain.entities import (
    AMOUNT_DECIMAL_PLACES,
    NAME_MAX_LENGTH,
    RATE_DECIMAL_PLACES,
)
from rate_rules.utils import ensure_utc
from .commands import RuleDraft, to_decimal

if TYPE_CHECKING:  # pragma: no cover
    from .families import RuleFamily

_HUNDRED = Decimal("100")


def _decimal_or_error(value: Any, label: str, errors: list[str]) -> Decimal | None:
    try:
        return to_decimal(value)
    except ValueError:
        errors.append(f"{label} must be a number.")
        return None


def _exceeds_places(value: Decimal, places: int) -> bool:
    return value.normalize().as_tuple().exponent < -places


def _check_places(value: Decimal | None, label: str, places: int) -> list[str]:
    if value is not None and _exceeds_places(value, places):
        return [f"{label} cannot have more than {places} decimal places."]
    return []


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_name(name: Any) -> list[str]:
    if _is_blank(name):
        return ["Rule name is required."]
    if len(str(name)) > NAME_MAX_LENGTH:
        return [f"Rule name must not exceed {NAME_MAX_LENGTH} characters."]
    return []


def validate_rate(rate: Any, label: str) -> list[str]:
    """Check a percentage; a missing rate is reported as out of range."""

    if rate is None:
        return [f"{label} must be between 0 and 100."]
    errors: list[str] = []
    value = _decimal_or_error(rate, label, errors)
    if value is not None and (value < 0 or value > _HUNDRED):
        errors.append(f"{label} must be between 0 and 100.")
    errors.extend(_check_places(value, label, RATE_DECIMAL_PLACES))
    return errors


def validate_window(effective_from: Any, effective_to: Any) -> list[str]:
    errors: list[str] = []
    if effective_from is None:
        errors.append("Effective start date is required.")
    elif not isinstance(effective_from, datetime):
        errors.append("Effective start date must be a date and time.")

    if effective_to is not None and not isinstance(effective_to, datetime):
        errors.append("Effective end date must be a date and time.")

    if isinstance(effective_from, datetime) and isinstance(effective_to, datetime):
        if ensure_utc(effective_to) <= ensure_utc(effective_from):
            errors.append("Effective end date must be after effective start date.")
    return errors


def validate_priority(priority: Any) -> list[str]:
    if isinstance(priority, bool) or not isinstance(priority, int):
        return ["Priority must be a whole number."]
    return []


def validate_actor(user_id: Any) -> list[str]:
    if _is_blank(user_id):
        return ["User ID is required."]
    return []


def validate_rule_id(rule_id: Any) -> list[str]:
    if rule_id is None:
        return ["Rule ID is required."]
    return []


def validate_country_code(country_code: Any) -> list[str]:
    if _is_blank(country_code):
        return ["Country code is required."]
    code = str(country_code).strip()
    if len(code) != 2 or not code.isalpha():
        return ["Country code must be a 2-letter ISO 3166-1 alpha-2 code."]
    return []


def validate_commission_terms(draft: RuleDraft) -> list[str]:
    """Check the fixed fee and the commission bounds of a commission draft."""

    errors: list[str] = []
    fixed_fee = _decimal_or_error(draft.fixed_fee, "Fixed fee", errors)
    if fixed_fee is not None and fixed_fee < 0:
        errors.append("Fixed fee cannot be negative.")
    errors.extend(_check_places(fixed_fee, "Fixed fee", AMOUNT_DECIMAL_PLACES))

    min_rate = _decimal_or_error(draft.min_rate, "Minimum rate", errors)
    if min_rate is not None and min_rate < 0:
        errors.append("Minimum rate cannot be negative.")
    errors.extend(_check_places(min_rate, "Minimum rate", AMOUNT_DECIMAL_PLACES))

    max_rate = _decimal_or_error(draft.max_rate, "Maximum rate", errors)
    if max_rate is not None and max_rate < 0:
        errors.append("Maximum rate cannot be negative.")
    errors.extend(_check_places(max_rate, "Maximum rate", AMOUNT_DECIMAL_PLACES))

    if min_rate is not None and max_rate is not None and min_rate > max_rate:
        errors.append("Minimum rate cannot be greater than maximum rate.")
    return errors


def reject_commission_terms(draft: RuleDraft) -> list[str]:
    """Refuse commission-only fields on families that do not store them."""

    fixed_fee = draft.fixed_fee
    has_fee = fixed_fee is not None and fixed_fee != 0
    if has_fee or draft.min_rate is not None or draft.max_rate is not None:
        return ["Fixed fee and rate bounds are only supported for commission rules."]
    return []


def validate_draft(family: "RuleFamily", draft: RuleDraft) -> list[str]:
    """Return every validation error for ``draft`` within ``family``."""

    errors: list[str] = []
    errors.extend(validate_name(draft.name))
    errors.extend(family.validate_primary_key(draft.primary_key))
    errors.extend(validate_rate(draft.rate, family.rate_label))
    errors.extend(validate_window(draft.effective_from, draft.effective_to))
    errors.extend(validate_priority(draft.priority))
    errors.extend(family.validate_terms(draft))
    return errors


__all__ = [
    "reject_commission_terms",
    "validate_actor",
    "validate_commission_terms",
    "validate_country_code",
    "validate_draft",
    "validate_name",
    "validate_priority",
    "validate_rate",
    "validate_rule_id",
    "validate_window",
]
