"""Domain entities for scoped, time-bounded rate rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from rate_rules.utils import ensure_utc, format_instant

NAME_MAX_LENGTH = 200
RATE_DECIMAL_PLACES = 4
AMOUNT_DECIMAL_PLACES = 2


@dataclass(frozen=True)
class RuleScope:
    """Discriminators a rule applies to: a primary key plus an optional category.

    For commission rules the primary key is a seller id and may be absent; for
    VAT rules it is a mandatory country code.
    """

    primary_key: str | None = None
    category_id: str | None = None

    @property
    def is_general(self) -> bool:
        return self.category_id is None

    def general(self) -> "RuleScope":
        """Return the category-less scope for the same primary key."""

        return RuleScope(primary_key=self.primary_key, category_id=None)

    def matches(self, other: "RuleScope") -> bool:
        """Return whether both scopes address the same rules.

        Primary keys match exactly; category ids match case-insensitively.
        """

        if self.primary_key != other.primary_key:
            return False
        return category_key(self.category_id) == category_key(other.category_id)


def category_key(category_id: str | None) -> str | None:
    """Return the form under which category ids are compared."""

    return category_id.lower() if category_id is not None else None


def windows_overlap(
    first_from: datetime,
    first_to: datetime | None,
    second_from: datetime,
    second_to: datetime | None,
) -> bool:
    """Return whether two half-open ``[from, to)`` windows overlap.

    An absent end is treated as +infinity, so ``[a, b)`` and ``[c, d)`` overlap
    iff ``a < d and c < b``. Adjacent windows (``b == c``) do not overlap.
    """

    first_from = ensure_utc(first_from)
    second_from = ensure_utc(second_from)
    first_to = ensure_utc(first_to)
    second_to = ensure_utc(second_to)

    starts_before_second_ends = second_to is None or first_from < second_to
    second_starts_before_first_ends = first_to is None or second_from < first_to
    return starts_before_second_ends and second_starts_before_first_ends


@dataclass
class ScopedRule:
    """Core attributes shared by every scoped rate rule."""

    id: UUID | None
    name: str
    scope: RuleScope
    rate: Decimal
    effective_from: datetime
    effective_to: datetime | None = None
    priority: int = 0
    is_active: bool = True
    version: int = 1
    created_at: datetime | None = None
    created_by_user_id: str | None = None
    last_updated_at: datetime | None = None
    last_modified_by_user_id: str | None = None

    @property
    def primary_key(self) -> str | None:
        return self.scope.primary_key

    @property
    def category_id(self) -> str | None:
        return self.scope.category_id

    def covers(self, instant: datetime) -> bool:
        """Return whether ``instant`` falls inside the effective window."""

        instant = ensure_utc(instant)
        if ensure_utc(self.effective_from) > instant:
            return False
        return self.effective_to is None or ensure_utc(self.effective_to) > instant

    def overlaps(self, effective_from: datetime, effective_to: datetime | None) -> bool:
        return windows_overlap(
            self.effective_from, self.effective_to, effective_from, effective_to
        )

    def describe_scope(self) -> str:
        return f"Primary key: {self.primary_key}"

    def describe(self) -> str:
        """Return a human-readable description used in audit logs."""

        return f"{self.describe_scope()} - {self.rate:.4f}%"

    def snapshot(self) -> dict[str, Any]:
        """Return the JSON-ready state recorded in history entries."""

        return {
            "id": str(self.id) if self.id is not None else None,
            "name": self.name,
            "primary_key": self.primary_key,
            "category_id": self.category_id,
            "rate": str(self.rate),
            "effective_from": format_instant(self.effective_from),
            "effective_to": format_instant(self.effective_to),
            "priority": self.priority,
            "is_active": self.is_active,
            "version": self.version,
            "created_at": format_instant(self.created_at),
            "created_by_user_id": self.created_by_user_id,
            "last_updated_at": format_instant(self.last_updated_at),
            "last_modified_by_user_id": self.last_modified_by_user_id,
        }


@dataclass
class CommissionRule(ScopedRule):
    """Commission rate for a seller and/or category.

    ``min_rate`` and ``max_rate`` bound the commission charged once the rate is
    applied; ``fixed_fee`` is added on top of it.
    """

    fixed_fee: Decimal = field(default_factory=lambda: Decimal("0"))
    min_rate: Decimal | None = None
    max_rate: Decimal | None = None

    @property
    def seller_id(self) -> str | None:
        return self.scope.primary_key

    def describe_scope(self) -> str:
        if self.seller_id is None and self.category_id is None:
            return "Global default"
        if self.category_id is None:
            return f"Seller: {self.seller_id}"
        if self.seller_id is None:
            return f"Category: {self.category_id}"
        return f"Seller: {self.seller_id}, Category: {self.category_id}"

    def describe(self) -> str:
        description = super().describe()
        if self.fixed_fee > 0:
            description += f" + {self.fixed_fee:.2f} fixed"

        bounds = []
        if self.min_rate is not None:
            bounds.append(f"min: {self.min_rate:.2f}")
        if self.max_rate is not None:
            bounds.append(f"max: {self.max_rate:.2f}")
        if bounds:
            description += f" ({', '.join(bounds)})"
        return description

    def snapshot(self) -> dict[str, Any]:
        data = super().snapshot()
        data["fixed_fee"] = str(self.fixed_fee)
        data["min_rate"] = str(self.min_rate) if self.min_rate is not None else None
        data["max_rate"] = str(self.max_rate) if self.max_rate is not None else None
        return data


@dataclass
class VatRule(ScopedRule):
    """Tax rate for a country, optionally narrowed to a category."""

    @property
    def country_code(self) -> str | None:
        return self.scope.primary_key

    def describe_scope(self) -> str:
        if self.category_id is None:
            return f"Country: {self.country_code}"
        return f"Country: {self.country_code}, Category: {self.category_id}"


__all__ = [
    "AMOUNT_DECIMAL_PLACES",
    "NAME_MAX_LENGTH",
    "RATE_DECIMAL_PLACES",
    "CommissionRule",
    "RuleScope",
    "ScopedRule",
    "VatRule",
    "category_key",
    "windows_overlap",
]
