import pathlib
import sys
from uuid import uuid4

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rate_rules.application.use_cases.rules import ConflictDetector, is_conflicting
from rate_rules.domain.entities import RuleScope
from rule_store_stubs import StubRuleStore, build_commission_rule, utc


SCOPE = RuleScope("seller-x", "category-y")


def test_overlapping_rule_with_same_scope_conflicts():
    existing = build_commission_rule(uuid4(), effective_to=utc(2024, 7, 1))
    detector = ConflictDetector(StubRuleStore([existing]))

    conflicts = detector.find_conflicts(SCOPE, utc(2024, 6, 1))

    assert [rule.id for rule in conflicts] == [existing.id]


def test_adjacent_window_does_not_conflict():
    existing = build_commission_rule(uuid4(), effective_to=utc(2024, 6, 1))
    detector = ConflictDetector(StubRuleStore([existing]))

    assert detector.find_conflicts(SCOPE, utc(2024, 6, 1)) == []


def test_different_specificity_never_conflicts():
    general = build_commission_rule(uuid4(), scope=RuleScope("seller-x", None))
    detector = ConflictDetector(StubRuleStore([general]))

    assert detector.find_conflicts(SCOPE, utc(2024, 1, 1)) == []


def test_inactive_and_excluded_rules_are_ignored():
    inactive = build_commission_rule(uuid4(), is_active=False)
    current = build_commission_rule(uuid4())
    detector = ConflictDetector(StubRuleStore([inactive, current]))

    assert detector.find_conflicts(SCOPE, utc(2024, 1, 1), exclude_rule_id=current.id) == []
    assert is_conflicting(inactive, SCOPE, utc(2024, 1, 1), None) is False


def test_conflicts_are_sorted_by_start_date():
    later = build_commission_rule(uuid4(), effective_from=utc(2025, 1, 1))
    earlier = build_commission_rule(
        uuid4(), effective_from=utc(2024, 1, 1), effective_to=utc(2024, 6, 1)
    )
    detector = ConflictDetector(StubRuleStore([later, earlier]))

    conflicts = detector.find_conflicts(SCOPE, utc(2023, 1, 1))

    assert [rule.id for rule in conflicts] == [earlier.id, later.id]
