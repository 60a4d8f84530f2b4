"""FastAPI dependency utilities."""

from dataclasses import dataclass

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from rate_rules.application.use_cases.rules import RuleFamily, RuleLifecycleService
from rate_rules.infrastructure.database import get_db
from rate_rules.infrastructure.repositories import (
    RuleHistoryRepository,
    ScopedRuleRepository,
)
from rate_rules.infrastructure.unit_of_work import SqlAlchemyUnitOfWork


@dataclass(frozen=True)
class Actor:
    """Administrator performing the request.

    Authentication happens upstream; the gateway forwards the identity in the
    ``X-User-Id`` and ``X-User-Email`` headers.
    """

    user_id: str | None
    email: str | None


def get_actor(
    x_user_id: str | None = Header(default=None),
    x_user_email: str | None = Header(default=None),
) -> Actor:
    """Return the acting administrator taken from the request headers."""

    return Actor(user_id=x_user_id, email=x_user_email)


def build_lifecycle_service(session: Session, family: RuleFamily) -> RuleLifecycleService:
    """Wire the lifecycle service of ``family`` to SQLAlchemy repositories."""

    return RuleLifecycleService(
        family,
        ScopedRuleRepository(session, family),
        RuleHistoryRepository(session, family),
        SqlAlchemyUnitOfWork(session),
    )


def lifecycle_service_dependency(family: RuleFamily):
    """Return a dependency yielding the lifecycle service of ``family``."""

    def _get_service(db: Session = Depends(get_db)) -> RuleLifecycleService:
        return build_lifecycle_service(db, family)

    return _get_service


__all__ = [
    "Actor",
    "build_lifecycle_service",
    "get_actor",
    "lifecycle_service_dependency",
]
