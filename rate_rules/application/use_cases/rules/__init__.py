"""Use cases for managing scoped commission and VAT rules."""

from .commands import UNSET, CreateRuleCommand, RuleDraft, UpdateRuleCommand
from .conflicts import ConflictDetector, is_conflicting
from .families import COMMISSION_RULES, RULE_FAMILIES, VAT_RULES, RuleFamily, get_family
from .lifecycle import RuleLifecycleService, serialize_rule
from .resolver import RateResolver, ResolvedRate
from .results import (
    DeleteRuleResult,
    ErrorKind,
    OperationResult,
    ResolveRateResult,
    RuleHistoryResult,
    RuleListResult,
    RuleResult,
)

__all__ = [
    "COMMISSION_RULES",
    "ConflictDetector",
    "CreateRuleCommand",
    "DeleteRuleResult",
    "ErrorKind",
    "OperationResult",
    "RULE_FAMILIES",
    "RateResolver",
    "ResolveRateResult",
    "ResolvedRate",
    "RuleDraft",
    "RuleFamily",
    "RuleHistoryResult",
    "RuleLifecycleService",
    "RuleListResult",
    "RuleResult",
    "UNSET",
    "UpdateRuleCommand",
    "VAT_RULES",
    "get_family",
    "is_conflicting",
    "serialize_rule",
]
