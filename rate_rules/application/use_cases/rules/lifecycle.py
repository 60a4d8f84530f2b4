"""Create, update and delete scoped rules with conflict checks and history."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from rate_rules.domain.entities import (
    DELETED_VALUES,
    ChangeType,
    RuleHistoryEntry,
    ScopedRule,
)
from rate_rules.domain.errors import OverlappingRuleError, RuleStoreError, StaleRuleError
from rate_rules.domain.interfaces import RuleHistoryStore, RuleStore, UnitOfWork
from rate_rules.utils import format_instant, now_utc
from .commands import CreateRuleCommand, UpdateRuleCommand
from .conflicts import ConflictDetector
from .families import RuleFamily, clean_identifier
from .resolver import RateResolver
from .results import (
    DeleteRuleResult,
    ErrorKind,
    ResolveRateResult,
    RuleHistoryResult,
    RuleListResult,
    RuleResult,
)
from .validators import validate_actor, validate_draft, validate_rule_id

module_logger = logging.getLogger(__name__)


def serialize_rule(rule: ScopedRule) -> str:
    """Return the JSON snapshot stored in history entries."""

    return json.dumps(rule.snapshot())


def describe_conflict(rule: ScopedRule) -> str:
    until = format_instant(rule.effective_to) or "open-ended"
    return (
        f"Rule '{rule.name}' ({rule.id}) already covers this scope from "
        f"{format_instant(rule.effective_from)} until {until}."
    )


class RuleLifecycleService:
    """Own the create/update/delete transitions of one rule family.

    The service is stateless between calls. Each write and its history entry
    are committed together through ``unit_of_work``; any failure rolls both
    back. Store failures are logged and returned as ``store`` failures;
    validation problems never reach the store.
    """

    def __init__(
        self,
        family: RuleFamily,
        rules: RuleStore,
        history: RuleHistoryStore,
        unit_of_work: UnitOfWork,
        *,
        clock: Callable[[], datetime] = now_utc,
        id_factory: Callable[[], UUID] = uuid4,
        logger: logging.Logger | None = None,
    ) -> None:
        self.family = family
        self.rules = rules
        self.history = history
        self.unit_of_work = unit_of_work
        self.clock = clock
        self.id_factory = id_factory
        self.logger = logger or module_logger
        self.detector = ConflictDetector(rules)
        self.resolver = RateResolver(rules)

    # -- reads -----------------------------------------------------------------

    def list_rules(self) -> RuleListResult:
        try:
            rules = sorted(
                self.rules.list(), key=lambda rule: (-rule.priority, rule.name.lower())
            )
        except RuleStoreError:
            self.logger.exception("Failed to list %s records", self.family.label)
            return RuleListResult.store_failure(self._store_failure_message("list"))

        self.logger.info("Retrieved %d %s records", len(rules), self.family.label)
        return RuleListResult.success(rules)

    def get_rule(self, rule_id: UUID | None) -> RuleResult:
        errors = validate_rule_id(rule_id)
        if errors:
            return RuleResult.failure(errors)

        try:
            rule = self.rules.get(rule_id)
        except RuleStoreError:
            self.logger.exception("Failed to load %s %s", self.family.label, rule_id)
            return RuleResult.store_failure(self._store_failure_message("load"))

        if rule is None:
            return RuleResult.not_found(self._not_found_message())
        return RuleResult.success(rule)

    def resolve(
        self,
        primary_key: Any,
        category_id: Any = None,
        as_of: datetime | None = None,
    ) -> ResolveRateResult:
        """Return the rate of the rule governing the context at ``as_of``."""

        errors = self.family.validate_primary_key(primary_key)
        if errors:
            return ResolveRateResult.failure(errors)

        scope = self.family.scope_for(primary_key, category_id)
        as_of = as_of or self.clock()
        try:
            resolved = self.resolver.resolve(scope, as_of)
        except RuleStoreError:
            self.logger.exception(
                "Failed to resolve %s for scope %s", self.family.label, scope
            )
            return ResolveRateResult.store_failure(self._store_failure_message("resolve"))

        if resolved is None:
            return ResolveRateResult.no_rate_found()
        return ResolveRateResult.success(resolved.rate, resolved.rule)

    def get_history(self, rule_id: UUID | None) -> RuleHistoryResult:
        """Return every history entry for ``rule_id``, even after deletion.

        An id this family never recorded is reported as not found.
        """

        errors = validate_rule_id(rule_id)
        if errors:
            return RuleHistoryResult.failure(errors)

        try:
            current = self.rules.get(rule_id)
            entries = self.history.list_for_rule(rule_id)
        except RuleStoreError:
            self.logger.exception(
                "Failed to load history for %s %s", self.family.label, rule_id
            )
            return RuleHistoryResult.store_failure(self._store_failure_message("load"))

        if current is None and not entries:
            return RuleHistoryResult.not_found(self._not_found_message())

        self.logger.info(
            "Retrieved %d history records for %s %s%s",
            len(entries),
            self.family.label,
            rule_id,
            "" if current is not None else " (rule no longer exists)",
        )
        return RuleHistoryResult.success(entries, current)

    # -- writes ----------------------------------------------------------------

    def create_rule(self, command: CreateRuleCommand) -> RuleResult:
        draft = self.family.normalize(command.to_draft())
        errors = validate_draft(self.family, draft)
        errors.extend(validate_actor(command.created_by_user_id))
        if errors:
            return RuleResult.failure(errors)

        actor_id = clean_identifier(command.created_by_user_id)
        now = self.clock()
        rule = self.family.build_rule(
            draft,
            rule_id=self.id_factory(),
            version=1,
            created_at=now,
            created_by_user_id=actor_id,
            last_updated_at=now,
            last_modified_by_user_id=actor_id,
        )

        try:
            conflicts = self._find_conflicts(rule)
            if conflicts:
                return self._conflict_result(rule, conflicts, action="creating")

            stored = self.rules.add(rule)
            self.history.append(
                self._history_entry(
                    stored,
                    ChangeType.CREATED,
                    previous_values=None,
                    new_values=serialize_rule(stored),
                    changed_at=now,
                    actor_id=actor_id,
                    actor_email=command.created_by_user_email,
                    reason=command.reason,
                )
            )
            self.unit_of_work.commit()
        except OverlappingRuleError as exc:
            self._rollback()
            return self._conflict_result(rule, exc.conflicting_rules, action="creating")
        except RuleStoreError:
            self.logger.exception(
                "Failed to create %s '%s'", self.family.label, rule.name
            )
            self._rollback()
            return RuleResult.store_failure(self._store_failure_message("create"))

        self.logger.info(
            "Created %s '%s' (ID: %s) by user %s: %s, effective from %s",
            self.family.label,
            stored.name,
            stored.id,
            actor_id,
            stored.describe(),
            format_instant(stored.effective_from),
        )
        return RuleResult.success(stored)

    def update_rule(self, command: UpdateRuleCommand) -> RuleResult:
        errors = validate_rule_id(command.rule_id)
        errors.extend(validate_actor(command.modified_by_user_id))
        if errors:
            return RuleResult.failure(errors)

        actor_id = clean_identifier(command.modified_by_user_id)
        try:
            current = self.rules.get(command.rule_id)
        except RuleStoreError:
            self.logger.exception(
                "Failed to load %s %s", self.family.label, command.rule_id
            )
            return RuleResult.store_failure(self._store_failure_message("update"))

        if current is None:
            return RuleResult.not_found(self._not_found_message())

        if (
            command.expected_version is not None
            and command.expected_version != current.version
        ):
            return RuleResult.failure(
                [self._stale_message(command.expected_version, current.version)],
                ErrorKind.CONFLICT,
            )

        draft = self.family.normalize(command.merge_into(current))
        errors = validate_draft(self.family, draft)
        if errors:
            return RuleResult.failure(errors)

        now = self.clock()
        updated = self.family.build_rule(
            draft,
            rule_id=current.id,
            version=current.version + 1,
            created_at=current.created_at,
            created_by_user_id=current.created_by_user_id,
            last_updated_at=now,
            last_modified_by_user_id=actor_id,
        )

        try:
            conflicts = self._find_conflicts(updated, exclude_rule_id=current.id)
            if conflicts:
                return self._conflict_result(updated, conflicts, action="updating")

            stored = self.rules.update(updated, expected_version=current.version)
            self.history.append(
                self._history_entry(
                    stored,
                    ChangeType.UPDATED,
                    previous_values=serialize_rule(current),
                    new_values=serialize_rule(stored),
                    changed_at=now,
                    actor_id=actor_id,
                    actor_email=command.modified_by_user_email,
                    reason=command.reason,
                )
            )
            self.unit_of_work.commit()
        except OverlappingRuleError as exc:
            self._rollback()
            return self._conflict_result(updated, exc.conflicting_rules, action="updating")
        except StaleRuleError:
            self.logger.warning(
                "%s %s changed while it was being updated by user %s",
                self.family.label,
                current.id,
                actor_id,
            )
            self._rollback()
            return RuleResult.failure(
                [self._stale_message(current.version, None)], ErrorKind.CONFLICT
            )
        except RuleStoreError:
            self.logger.exception(
                "Failed to update %s %s", self.family.label, current.id
            )
            self._rollback()
            return RuleResult.store_failure(self._store_failure_message("update"))

        self.logger.info(
            "Updated %s '%s' (ID: %s) by user %s. Version: %d. %s",
            self.family.label,
            stored.name,
            stored.id,
            actor_id,
            stored.version,
            stored.describe(),
        )
        return RuleResult.success(stored)

    def delete_rule(
        self,
        rule_id: UUID | None,
        actor_id: str | None,
        actor_email: str | None = None,
        *,
        reason: str | None = None,
    ) -> DeleteRuleResult:
        """Record a ``Deleted`` history entry, then drop the live rule.

        Both writes are committed together; if either fails the rule and its
        trail stay as they were.
        """

        errors = validate_rule_id(rule_id)
        errors.extend(validate_actor(actor_id))
        if errors:
            return DeleteRuleResult.failure(errors)

        actor_id = clean_identifier(actor_id)
        try:
            current = self.rules.get(rule_id)
            if current is None:
                return DeleteRuleResult.not_found(self._not_found_message())

            self.history.append(
                self._history_entry(
                    current,
                    ChangeType.DELETED,
                    previous_values=serialize_rule(current),
                    new_values=DELETED_VALUES,
                    changed_at=self.clock(),
                    actor_id=actor_id,
                    actor_email=actor_email,
                    reason=reason,
                )
            )
            self.rules.delete(rule_id)
            self.unit_of_work.commit()
        except RuleStoreError:
            self.logger.exception("Failed to delete %s %s", self.family.label, rule_id)
            self._rollback()
            return DeleteRuleResult.store_failure(self._store_failure_message("delete"))

        self.logger.info(
            "Deleted %s '%s' (ID: %s) by user %s",
            self.family.label,
            current.name,
            current.id,
            actor_id,
        )
        return DeleteRuleResult.success(current)

    # -- helpers ---------------------------------------------------------------

    def _rollback(self) -> None:
        try:
            self.unit_of_work.rollback()
        except RuleStoreError:
            self.logger.exception("Failed to roll back %s changes", self.family.label)

    def _find_conflicts(
        self, rule: ScopedRule, *, exclude_rule_id: UUID | None = None
    ) -> list[ScopedRule]:
        if not rule.is_active:
            return []
        return self.detector.find_conflicts(
            rule.scope,
            rule.effective_from,
            rule.effective_to,
            exclude_rule_id=exclude_rule_id,
        )

    def _conflict_result(
        self, rule: ScopedRule, conflicts: Sequence[ScopedRule], *, action: str
    ) -> RuleResult:
        self.logger.warning(
            "Conflict detected when %s %s '%s' (ID: %s): %d conflicting rules found",
            action,
            self.family.label,
            rule.name,
            rule.id,
            len(conflicts),
        )
        errors = [
            f"Conflicting {self.family.label}s found. "
            "Please resolve the overlapping configurations."
        ]
        errors.extend(describe_conflict(conflict) for conflict in conflicts)
        return RuleResult.conflict(conflicts, errors)

    def _history_entry(
        self,
        rule: ScopedRule,
        change_type: ChangeType,
        *,
        previous_values: str | None,
        new_values: str,
        changed_at: datetime,
        actor_id: str | None,
        actor_email: str | None,
        reason: str | None,
    ) -> RuleHistoryEntry:
        return RuleHistoryEntry(
            id=self.id_factory(),
            rule_id=rule.id,
            family=self.family.key,
            change_type=change_type,
            previous_values=previous_values,
            new_values=new_values,
            changed_at=changed_at,
            changed_by_user_id=actor_id,
            changed_by_user_email=clean_identifier(actor_email),
            reason=clean_identifier(reason),
        )

    def _not_found_message(self) -> str:
        return f"{self.family.label[0].upper()}{self.family.label[1:]} not found."

    def _store_failure_message(self, action: str) -> str:
        return f"Could not {action} the {self.family.label}. Please try again later."

    @staticmethod
    def _stale_message(expected: int, found: int | None) -> str:
        if found is None:
            return (
                "Rule was modified by another user "
                f"(expected version {expected}). Reload it and try again."
            )
        return (
            "Rule was modified by another user "
            f"(expected version {expected}, found {found})."
        )


__all__ = ["RuleLifecycleService", "describe_conflict", "serialize_rule"]
