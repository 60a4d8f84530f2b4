"""SQLAlchemy model for scoped rate rules."""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, Numeric, String, Uuid
from sqlalchemy.sql import expression

from rate_rules.domain.entities import AMOUNT_DECIMAL_PLACES, RATE_DECIMAL_PLACES
from rate_rules.infrastructure.database import Base
from rate_rules.utils import ensure_naive_utc, now_utc


def _naive_now():
    return ensure_naive_utc(now_utc())


class ScopedRuleModel(Base):
    """Database representation of commission and VAT rules.

    Both families share the table; ``family`` tells them apart and the
    commission-only columns stay NULL for VAT rows.
    """

    __tablename__ = "scoped_rule"
    __table_args__ = (
        Index(
            "ix_scoped_rule_scope",
            "family",
            "primary_key",
            "category_id",
            "is_active",
            "effective_from",
        ),
    )

    id = Column(Uuid, primary_key=True)
    family = Column(String(20), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    primary_key = Column(String(64), nullable=True)
    category_id = Column(String(64), nullable=True)
    rate = Column(Numeric(9, RATE_DECIMAL_PLACES), nullable=False)
    fixed_fee = Column(Numeric(18, AMOUNT_DECIMAL_PLACES), nullable=True)
    min_rate = Column(Numeric(18, AMOUNT_DECIMAL_PLACES), nullable=True)
    max_rate = Column(Numeric(18, AMOUNT_DECIMAL_PLACES), nullable=True)
    priority = Column(Integer, nullable=False, default=0)
    effective_from = Column(DateTime(), nullable=False)
    effective_to = Column(DateTime(), nullable=True)
    is_active = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(), nullable=False, default=_naive_now)
    created_by_user_id = Column(String(64), nullable=True)
    last_updated_at = Column(DateTime(), nullable=True)
    last_modified_by_user_id = Column(String(64), nullable=True)


__all__ = ["ScopedRuleModel"]
