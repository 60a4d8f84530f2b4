from .rule import (
    ResolvedRateRead,
    RuleHistoryRead,
    RuleHistoryResponse,
    ScopedRuleCreate,
    ScopedRuleRead,
    ScopedRuleUpdate,
)

__all__ = [
    "ResolvedRateRead",
    "RuleHistoryRead",
    "RuleHistoryResponse",
    "ScopedRuleCreate",
    "ScopedRuleRead",
    "ScopedRuleUpdate",
]
