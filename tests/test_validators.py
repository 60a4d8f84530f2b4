import pathlib
import sys
from datetime import datetime
from decimal import Decimal

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from rate_rules.application.use_cases.rules import (
    COMMISSION_RULES,
    VAT_RULES,
    RuleDraft,
    UNSET,
    UpdateRuleCommand,
    get_family,
)
from rate_rules.application.use_cases.rules.validators import (
    validate_commission_terms,
    validate_country_code,
    validate_name,
    validate_priority,
    validate_rate,
    validate_window,
)
from rate_rules.config import Settings
from rule_store_stubs import build_commission_rule, utc


def test_name_length_limit():
    assert validate_name("x" * 200) == []
    assert validate_name("x" * 201) == ["Rule name must not exceed 200 characters."]


@pytest.mark.parametrize("rate", [Decimal("0"), Decimal("100"), 12.5, "7.25"])
def test_rate_bounds_are_inclusive(rate):
    assert validate_rate(rate, "Tax rate") == []


def test_rate_outside_bounds():
    assert validate_rate(Decimal("-0.01"), "Tax rate") == [
        "Tax rate must be between 0 and 100."
    ]
    assert validate_rate(None, "Tax rate") == ["Tax rate must be between 0 and 100."]


def test_rate_scale_is_limited_to_four_places():
    assert validate_rate(Decimal("12.3450"), "Tax rate") == []
    assert validate_rate(Decimal("12.34567"), "Tax rate") == [
        "Tax rate cannot have more than 4 decimal places."
    ]


def test_commission_amounts_are_limited_to_two_places():
    draft = RuleDraft(
        fixed_fee=Decimal("0.10"), min_rate=Decimal("0.001"), max_rate=Decimal("2.505")
    )

    assert validate_commission_terms(draft) == [
        "Minimum rate cannot have more than 2 decimal places.",
        "Maximum rate cannot have more than 2 decimal places.",
    ]


def test_window_requires_start_and_ordered_end():
    assert validate_window(None, None) == ["Effective start date is required."]
    assert validate_window(utc(2024, 1, 1), utc(2024, 1, 1)) == [
        "Effective end date must be after effective start date."
    ]
    assert validate_window(datetime(2024, 1, 1), utc(2024, 1, 2)) == []


def test_priority_must_be_integer():
    assert validate_priority(3) == []
    assert validate_priority(True) == ["Priority must be a whole number."]
    assert validate_priority("3") == ["Priority must be a whole number."]


@pytest.mark.parametrize("code", ["D1", "DEU", "", None])
def test_invalid_country_codes(code):
    assert validate_country_code(code)


def test_commission_bounds_must_be_ordered():
    draft = RuleDraft(fixed_fee=Decimal("-1"), min_rate=Decimal("5"), max_rate=Decimal("2"))

    assert validate_commission_terms(draft) == [
        "Fixed fee cannot be negative.",
        "Minimum rate cannot be greater than maximum rate.",
    ]


def test_update_command_tracks_provided_fields_only():
    rule = build_commission_rule(1)
    command = UpdateRuleCommand(rule_id=rule.id, category_id=None, rate=Decimal("3"))

    assert command.name is UNSET
    assert command.changed_fields() == {"category_id": None, "rate": Decimal("3")}
    draft = command.merge_into(rule)
    assert draft.name == rule.name
    assert draft.category_id is None
    assert draft.rate == Decimal("3")


def test_family_lookup():
    assert get_family("commission") is COMMISSION_RULES
    assert get_family("vat") is VAT_RULES
    with pytest.raises(ValueError):
        get_family("shipping")


def test_settings_normalize_isolation_level():
    settings = Settings(database_isolation_level="serializable", _env_file=None)

    assert settings.database_isolation_level == "SERIALIZABLE"
    with pytest.raises(ValueError):
        Settings(database_isolation_level="eventual", _env_file=None)
