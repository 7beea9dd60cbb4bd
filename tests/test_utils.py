from datetime import date

import pytest

from models import BalanceSheet, SettlementPolicy
from utils import parse_date, round_cents, round_units


def test_parse_date():
    assert parse_date("2024-05-01") == date(2024, 5, 1)
    assert parse_date(" 2024-05-01T10:15:00.000Z ") == date(2024, 5, 1)


def test_rounding_is_half_up():
    assert round_cents(0.125) == 0.13
    assert round_cents(-0.125) == -0.13
    assert round_units(2.5) == 3
    assert round_units(0.49) == 0


def test_balance_sheet_keys_are_fixed():
    sheet = BalanceSheet(["a", "b"])
    sheet.add("a", 5)
    with pytest.raises(KeyError):
        sheet.add("zed", 1)
    copy = sheet.copy()
    copy.add("b", -5)
    assert sheet == {"a": 5.0, "b": 0.0}
    assert copy.total() == 0


def test_policy_rejects_unknown_values():
    with pytest.raises(ValueError):
        SettlementPolicy(unknown_participants="maybe")
    with pytest.raises(ValueError):
        SettlementPolicy(subunit_remainders="keep")


@pytest.mark.parametrize("tolerance", [0, -0.01, float("nan"), float("inf"), "0.01", None, True])
def test_policy_rejects_bad_tolerance(tolerance):
    with pytest.raises(ValueError):
        SettlementPolicy(tolerance=tolerance)


def test_policy_accepts_integer_tolerance():
    assert SettlementPolicy(tolerance=1).tolerance == 1
