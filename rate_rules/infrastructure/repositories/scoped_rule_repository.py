"""Persistence layer for scoped rate rules."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import desc, func, or_, true, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from rate_rules.application.use_cases.rules.families import RuleFamily
from rate_rules.domain.entities import RuleScope, ScopedRule, category_key
from rate_rules.domain.errors import OverlappingRuleError, RuleStoreError, StaleRuleError
from rate_rules.infrastructure.models import ScopedRuleModel
from rate_rules.utils import ensure_naive_utc, ensure_utc

logger = logging.getLogger(__name__)


class ScopedRuleRepository:
    """Provide the rule store for one rule family on top of SQLAlchemy.

    Writes are flushed, never committed: the caller commits the rule together
    with its history entry through :class:`SqlAlchemyUnitOfWork`.

    Inserts and updates of active rules re-run the overlap query inside the
    write transaction (``SELECT ... FOR UPDATE`` where supported). Under a
    SERIALIZABLE isolation level this makes concurrent writers to the same
    scope fail instead of both committing.
    """

    def __init__(self, session: Session, family: RuleFamily) -> None:
        self.session = session
        self.family = family

    def find_conflicting_rules(
        self,
        primary_key: str | None,
        category_id: str | None,
        effective_from: datetime,
        effective_to: datetime | None,
        *,
        exclude_rule_id: UUID | None = None,
    ) -> Sequence[ScopedRule]:
        try:
            query = self._overlap_query(
                primary_key, category_id, effective_from, effective_to, exclude_rule_id
            )
            models = query.order_by(ScopedRuleModel.effective_from).all()
        except SQLAlchemyError as exc:
            raise self._store_error("find conflicting rules", exc) from exc
        return [self._to_entity(model) for model in models]

    def find_active_by_scope(
        self,
        primary_key: str | None,
        category_id: str | None,
        as_of: datetime,
    ) -> Sequence[ScopedRule]:
        as_of = ensure_naive_utc(as_of)
        try:
            query = self._scope_query(primary_key, category_id).filter(
                ScopedRuleModel.effective_from <= as_of,
                or_(
                    ScopedRuleModel.effective_to.is_(None),
                    ScopedRuleModel.effective_to > as_of,
                ),
            )
            models = query.order_by(
                desc(ScopedRuleModel.priority), desc(ScopedRuleModel.created_at)
            ).all()
        except SQLAlchemyError as exc:
            raise self._store_error("find active rules", exc) from exc
        return [self._to_entity(model) for model in models]

    def get(self, rule_id: UUID) -> ScopedRule | None:
        try:
            model = self._get_model(rule_id)
        except SQLAlchemyError as exc:
            raise self._store_error("load rule", exc) from exc
        return self._to_entity(model) if model else None

    def list(self) -> Sequence[ScopedRule]:
        try:
            models = (
                self._family_query()
                .order_by(desc(ScopedRuleModel.priority), ScopedRuleModel.name)
                .all()
            )
        except SQLAlchemyError as exc:
            raise self._store_error("list rules", exc) from exc
        return [self._to_entity(model) for model in models]

    def add(self, rule: ScopedRule) -> ScopedRule:
        try:
            self._ensure_no_overlap(rule)
            model = ScopedRuleModel(id=rule.id, family=self.family.key)
            self._apply_entity_to_model(model, rule)
            self.session.add(model)
            self.session.flush()
            self.session.refresh(model)
        except SQLAlchemyError as exc:
            raise self._store_error("add rule", exc) from exc
        return self._to_entity(model)

    def update(self, rule: ScopedRule, *, expected_version: int | None = None) -> ScopedRule:
        try:
            self._ensure_no_overlap(rule)
            if expected_version is None:
                model = self._get_model(rule.id)
                if model is None:
                    raise RuleStoreError(f"Rule with id {rule.id} not found")
                self._apply_entity_to_model(model, rule)
                self.session.flush()
            else:
                values = self._columns_for(rule)
                result = self.session.execute(
                    update(ScopedRuleModel)
                    .where(
                        ScopedRuleModel.id == rule.id,
                        ScopedRuleModel.family == self.family.key,
                        ScopedRuleModel.version == expected_version,
                    )
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise StaleRuleError(rule.id, expected_version)
            model = self._get_model(rule.id)
            if model is not None:
                self.session.refresh(model)
        except SQLAlchemyError as exc:
            raise self._store_error("update rule", exc) from exc
        if model is None:
            raise RuleStoreError(f"Rule with id {rule.id} disappeared during update")
        return self._to_entity(model)

    def delete(self, rule_id: UUID) -> None:
        try:
            self._family_query().filter(ScopedRuleModel.id == rule_id).delete(
                synchronize_session=False
            )
            self.session.flush()
        except SQLAlchemyError as exc:
            raise self._store_error("delete rule", exc) from exc

    def _ensure_no_overlap(self, rule: ScopedRule) -> None:
        if not rule.is_active:
            return
        models = (
            self._overlap_query(
                rule.primary_key,
                rule.category_id,
                rule.effective_from,
                rule.effective_to,
                rule.id,
            )
            .with_for_update()
            .all()
        )
        if models:
            conflicts = [self._to_entity(model) for model in models]
            logger.warning(
                "Rejected write of rule %s: overlaps %d active rule(s) in scope %s",
                rule.id,
                len(conflicts),
                rule.scope,
            )
            raise OverlappingRuleError(conflicts)

    def _family_query(self) -> Query:
        return self.session.query(ScopedRuleModel).filter(
            ScopedRuleModel.family == self.family.key
        )

    def _scope_query(self, primary_key: str | None, category_id: str | None) -> Query:
        query = self._family_query().filter(ScopedRuleModel.is_active == true())
        if primary_key is None:
            query = query.filter(ScopedRuleModel.primary_key.is_(None))
        else:
            query = query.filter(ScopedRuleModel.primary_key == primary_key)
        if category_id is None:
            query = query.filter(ScopedRuleModel.category_id.is_(None))
        else:
            query = query.filter(
                func.lower(ScopedRuleModel.category_id) == category_key(category_id)
            )
        return query

    def _overlap_query(
        self,
        primary_key: str | None,
        category_id: str | None,
        effective_from: datetime,
        effective_to: datetime | None,
        exclude_rule_id: UUID | None,
    ) -> Query:
        query = self._scope_query(primary_key, category_id).filter(
            or_(
                ScopedRuleModel.effective_to.is_(None),
                ScopedRuleModel.effective_to > ensure_naive_utc(effective_from),
            )
        )
        if effective_to is not None:
            query = query.filter(
                ScopedRuleModel.effective_from < ensure_naive_utc(effective_to)
            )
        if exclude_rule_id is not None:
            query = query.filter(ScopedRuleModel.id != exclude_rule_id)
        return query

    def _get_model(self, rule_id: UUID) -> ScopedRuleModel | None:
        return self._family_query().filter(ScopedRuleModel.id == rule_id).first()

    def _store_error(self, action: str, exc: SQLAlchemyError) -> RuleStoreError:
        self.session.rollback()
        return RuleStoreError(f"Could not {action} for {self.family.label}: {exc}")

    def _to_entity(self, model: ScopedRuleModel) -> ScopedRule:
        values: dict[str, Any] = {
            "id": model.id,
            "name": model.name,
            "scope": RuleScope(model.primary_key, model.category_id),
            "rate": Decimal(model.rate),
            "effective_from": ensure_utc(model.effective_from),
            "effective_to": ensure_utc(model.effective_to),
            "priority": model.priority,
            "is_active": model.is_active,
            "version": model.version,
            "created_at": ensure_utc(model.created_at),
            "created_by_user_id": model.created_by_user_id,
            "last_updated_at": ensure_utc(model.last_updated_at),
            "last_modified_by_user_id": model.last_modified_by_user_id,
        }
        if self.family.has_commission_terms:
            values["fixed_fee"] = Decimal(model.fixed_fee or 0)
            values["min_rate"] = Decimal(model.min_rate) if model.min_rate is not None else None
            values["max_rate"] = Decimal(model.max_rate) if model.max_rate is not None else None
        return self.family.rule_type(**values)

    def _columns_for(self, rule: ScopedRule) -> dict[str, Any]:
        values: dict[str, Any] = {
            "name": rule.name,
            "primary_key": rule.primary_key,
            "category_id": rule.category_id,
            "rate": rule.rate,
            "priority": rule.priority,
            "effective_from": ensure_naive_utc(rule.effective_from),
            "effective_to": ensure_naive_utc(rule.effective_to),
            "is_active": rule.is_active,
            "version": rule.version,
            "created_by_user_id": rule.created_by_user_id,
            "last_updated_at": ensure_naive_utc(rule.last_updated_at),
            "last_modified_by_user_id": rule.last_modified_by_user_id,
        }
        if rule.created_at is not None:
            values["created_at"] = ensure_naive_utc(rule.created_at)
        if self.family.has_commission_terms:
            values["fixed_fee"] = getattr(rule, "fixed_fee", None)
            values["min_rate"] = getattr(rule, "min_rate", None)
            values["max_rate"] = getattr(rule, "max_rate", None)
        return values

    def _apply_entity_to_model(self, model: ScopedRuleModel, rule: ScopedRule) -> None:
        for column, value in self._columns_for(rule).items():
            setattr(model, column, value)


__all__ = ["ScopedRuleRepository"]
