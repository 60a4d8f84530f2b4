"""Transaction boundary shared by the rule and history repositories."""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rate_rules.domain.errors import RuleStoreError


class SqlAlchemyUnitOfWork:
    """Commit or roll back everything the repositories flushed on ``session``."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise RuleStoreError(f"Could not commit rule changes: {exc}") from exc

    def rollback(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError as exc:
            raise RuleStoreError(f"Could not roll back rule changes: {exc}") from exc


__all__ = ["SqlAlchemyUnitOfWork"]
