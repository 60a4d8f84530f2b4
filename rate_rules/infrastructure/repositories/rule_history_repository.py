"""Persistence layer for rule history records."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rate_rules.application.use_cases.rules.families import RuleFamily
from rate_rules.domain.entities import ChangeType, RuleHistoryEntry
from rate_rules.domain.errors import RuleStoreError
from rate_rules.infrastructure.models import RuleHistoryModel
from rate_rules.utils import ensure_naive_utc, ensure_utc, now_utc


class RuleHistoryRepository:
    """Append and read :class:`RuleHistoryEntry` records of one rule family.

    Entries are never updated or removed here; the table is the audit trail.
    Appends are flushed and committed by the caller together with the rule
    write they describe.
    """

    def __init__(self, session: Session, family: RuleFamily) -> None:
        self.session = session
        self.family = family

    def append(self, entry: RuleHistoryEntry) -> RuleHistoryEntry:
        if entry.family != self.family.key:
            raise RuleStoreError(
                f"Cannot record {entry.family} history in the {self.family.label} trail"
            )
        model = RuleHistoryModel()
        self._apply_entity_to_model(model, entry)
        try:
            self.session.add(model)
            self.session.flush()
            self.session.refresh(model)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise RuleStoreError(f"Could not append rule history: {exc}") from exc
        return self._to_entity(model)

    def list_for_rule(self, rule_id: UUID) -> Sequence[RuleHistoryEntry]:
        """Return entries for ``rule_id`` in the order they were recorded."""

        try:
            models = (
                self.session.query(RuleHistoryModel)
                .filter(
                    RuleHistoryModel.rule_id == rule_id,
                    RuleHistoryModel.family == self.family.key,
                )
                .order_by(RuleHistoryModel.sequence)
                .all()
            )
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise RuleStoreError(f"Could not read rule history: {exc}") from exc
        return [self._to_entity(model) for model in models]

    @staticmethod
    def _to_entity(model: RuleHistoryModel) -> RuleHistoryEntry:
        return RuleHistoryEntry(
            id=model.id,
            rule_id=model.rule_id,
            family=model.family,
            change_type=ChangeType(model.change_type),
            previous_values=model.previous_values,
            new_values=model.new_values,
            changed_at=ensure_utc(model.changed_at),
            changed_by_user_id=model.changed_by_user_id,
            changed_by_user_email=model.changed_by_user_email,
            reason=model.reason,
        )

    @staticmethod
    def _apply_entity_to_model(model: RuleHistoryModel, entry: RuleHistoryEntry) -> None:
        model.id = entry.id
        model.rule_id = entry.rule_id
        model.family = entry.family
        model.change_type = ChangeType(entry.change_type).value
        model.previous_values = entry.previous_values
        model.new_values = entry.new_values
        model.changed_at = ensure_naive_utc(entry.changed_at) or ensure_naive_utc(
            now_utc()
        )
        model.changed_by_user_id = entry.changed_by_user_id
        model.changed_by_user_email = entry.changed_by_user_email
        model.reason = entry.reason


__all__ = ["RuleHistoryRepository"]
