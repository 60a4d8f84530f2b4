import pathlib
import sys
from datetime import datetime, timezone

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from rate_rules.domain.entities import RuleScope, windows_overlap
from rule_store_stubs import build_vat_rule, utc


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        ((utc(2024, 1, 1), utc(2024, 7, 1)), (utc(2024, 6, 1), None), True),
        ((utc(2024, 1, 1), utc(2024, 6, 1)), (utc(2024, 6, 1), None), False),
        ((utc(2024, 1, 1), None), (utc(2030, 1, 1), None), True),
        ((utc(2024, 1, 1), utc(2024, 2, 1)), (utc(2024, 3, 1), utc(2024, 4, 1)), False),
        ((utc(2024, 1, 1), utc(2024, 12, 1)), (utc(2024, 3, 1), utc(2024, 4, 1)), True),
    ],
)
def test_windows_overlap_is_symmetric(first, second, expected):
    assert windows_overlap(*first, *second) is expected
    assert windows_overlap(*second, *first) is expected


def test_naive_datetimes_are_treated_as_utc():
    naive_start = datetime(2024, 6, 1)
    assert windows_overlap(utc(2024, 1, 1), naive_start, naive_start, None) is False
    assert windows_overlap(utc(2024, 1, 1), None, naive_start, None) is True


def test_rule_covers_half_open_window():
    rule = build_vat_rule(1, effective_from=utc(2024, 1, 1), effective_to=utc(2024, 6, 1))

    assert rule.covers(utc(2024, 1, 1)) is True
    assert rule.covers(utc(2024, 5, 31, 23)) is True
    assert rule.covers(utc(2024, 6, 1)) is False
    assert rule.covers(utc(2023, 12, 31, 23)) is False


def test_general_scope_drops_category():
    scope = RuleScope("seller-x", "category-y")

    assert scope.is_general is False
    assert scope.general() == RuleScope("seller-x", None)
    assert scope.general().is_general is True
