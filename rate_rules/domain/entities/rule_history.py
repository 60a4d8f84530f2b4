"""Domain entity representing an audit entry for rule mutations."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

DELETED_VALUES = "{}"


class ChangeType(str, Enum):
    """Kind of mutation recorded in a history entry."""

    CREATED = "Created"
    UPDATED = "Updated"
    DELETED = "Deleted"


@dataclass
class RuleHistoryEntry:
    """Append-only record of one successful create, update or delete."""

    id: UUID | None
    rule_id: UUID
    family: str
    change_type: ChangeType
    previous_values: str | None
    new_values: str
    changed_at: datetime
    changed_by_user_id: str
    changed_by_user_email: str | None = None
    reason: str | None = None


__all__ = ["ChangeType", "DELETED_VALUES", "RuleHistoryEntry"]
