import pytest

from curve_sale.common.math import WAD
from curve_sale.common.model import NATIVE_TOKEN
from curve_sale.curves.exponential import ExponentialPricingCurve
from curve_sale.curves.linear import LinearPricingCurve
from curve_sale.validation.pool_validator import PoolValidator


NOW = 1_700_000_000
RAISING = "0xraising"
TOKEN = "0xtoken"


@pytest.fixture
def linear_curve():
    return LinearPricingCurve()


def test_valid_sale_has_no_errors():
    results = PoolValidator.validate_sale(RAISING, TOKEN, 1000, NOW + 60, NOW)
    assert results["errors"] == []
    assert results["warnings"] == []
    assert results["info"]["sale_summary"]["sell_amount"] == "1000"


def test_open_ended_sale_warns():
    results = PoolValidator.validate_sale(RAISING, TOKEN, 1000, 0, NOW)
    assert results["errors"] == []
    assert len(results["warnings"]) == 1
    assert "no end time" in results["warnings"][0]


@pytest.mark.parametrize(
    "raising, token, amount, end_time, fragment",
    [
        (RAISING, TOKEN, 0, 0, "sell_amount"),
        (RAISING, TOKEN, -5, 0, "sell_amount"),
        (RAISING, TOKEN, 1000, -1, "end_time"),
        (RAISING, TOKEN, 1000, NOW, "not in the future"),
        (RAISING, TOKEN, 1000, NOW - 10, "not in the future"),
        (RAISING, NATIVE_TOKEN, 1000, 0, "native currency"),
        (TOKEN, TOKEN, 1000, 0, "must differ"),
    ]
)
def test_invalid_sale(raising, token, amount, end_time, fragment):
    results = PoolValidator.validate_sale(raising, token, amount, end_time, NOW)
    assert any(fragment in error for error in results["errors"])


def test_native_raising_token_is_allowed():
    results = PoolValidator.validate_sale(NATIVE_TOKEN, TOKEN, 1000, 0, NOW)
    assert results["errors"] == []


def test_create_merges_curve_checks(linear_curve):
    results = PoolValidator.validate_create(
        RAISING, TOKEN, 0, 0, NOW, linear_curve, {"initial_price": 0, "slope": 0}
    )
    assert any("sell_amount" in error for error in results["errors"])
    assert len(results["errors"]) >= 2
    assert results["warnings"]
    assert "sale_summary" in results["info"]


def test_create_with_valid_curve_parameters(linear_curve):
    results = PoolValidator.validate_create(
        RAISING, TOKEN, 1000, NOW + 1, NOW, linear_curve, {"initial_price": WAD, "slope": 10 ** 12}
    )
    assert results["errors"] == []


def test_create_with_exponential_curve():
    results = PoolValidator.validate_create(
        RAISING, TOKEN, 1000, NOW + 1, NOW, ExponentialPricingCurve(), {"initial_price": WAD, "growth": -1}
    )
    assert results["errors"]
