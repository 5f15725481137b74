import pytest

from freelance_ledger.app.core.errors import ValidationError
from freelance_ledger.app.services.rounding import round_minutes


def test_none_policy_is_identity():
    assert round_minutes(52, "NONE") == 52
    assert round_minutes(52, None) == 52
    assert round_minutes(0, "NONE") == 0


def test_nearest_15_rounds_52_down_to_45():
    assert round_minutes(52, "NEAREST_15") == 45
    assert round_minutes(53, "NEAREST_15") == 60
    assert round_minutes(7, "NEAREST_15") == 0
    assert round_minutes(8, "NEAREST_15") == 15


def test_nearest_5_rounds_to_closest_multiple():
    assert round_minutes(12, "NEAREST_5") == 10
    assert round_minutes(13, "NEAREST_5") == 15
    assert round_minutes(1, "NEAREST_5") == 0
    assert round_minutes(60, "NEAREST_5") == 60


def test_unknown_policy_raises():
    with pytest.raises(ValidationError):
        round_minutes(10, "NEAREST_10")
