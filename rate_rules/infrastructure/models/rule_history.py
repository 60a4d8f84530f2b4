"""SQLAlchemy model for rule history records."""

from sqlalchemy import Column, DateTime, Integer, String, Text, Uuid

from rate_rules.infrastructure.database import Base


class RuleHistoryModel(Base):
    """Database representation of rule history entries.

    ``rule_id`` is not a foreign key: entries outlive the rule
    they describe.
    """

    __tablename__ = "scoped_rule_history"

    sequence = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Uuid, nullable=False, unique=True)
    rule_id = Column(Uuid, nullable=False, index=True)
    family = Column(String(20), nullable=False)
    change_type = Column(String(20), nullable=False)
    previous_values = Column(Text, nullable=True)
    new_values = Column(Text, nullable=False)
    changed_at = Column(DateTime(), nullable=False)
    changed_by_user_id = Column(String(64), nullable=False)
    changed_by_user_email = Column(String(256), nullable=True)
    reason = Column(String(1000), nullable=True)


__all__ = ["RuleHistoryModel"]
