import pytest

from unittest.mock import MagicMock

from conftest import ALICE, FLAT_PARAMS, OWNER, SUPPLY, TOKEN_B, USDC
from curve_sale.common.math import WAD
from curve_sale.common.model import BuyNeedQuote, BuyQuote, SellQuote
from curve_sale.curves.base import PricingCurve


MOCK_PARAMS = {"k": 1}


@pytest.fixture
def mock_curve(registry):
    """
    A pricing curve that records what the ledger asks it, registered as 'mock'.
    """
    curve = MagicMock(spec=PricingCurve)
    curve.validate_parameters.return_value = {"errors": [], "warnings": [], "info": {}}
    registry.register_curve("mock", curve)
    return curve


@pytest.fixture
def usdc_pool(ledger, mock_curve):
    """A pool raising in a 6-decimal token, priced by the mock curve."""
    return ledger.create_pool(OWNER, USDC, TOKEN_B, "mock", SUPPLY, parameters=MOCK_PARAMS)


def test_six_decimal_token_gap(ledger, usdc_pool):
    assert ledger.get_pool(usdc_pool).gap == 10 ** 12


def test_parameters_are_passed_through_untouched(ledger, mock_curve, usdc_pool):
    assert ledger.get_pool(usdc_pool).parameters is MOCK_PARAMS
    mock_curve.validate_parameters.assert_called_once_with(MOCK_PARAMS)


def test_buy_payment_is_scaled_up_by_gap(ledger, mock_curve, usdc_pool):
    """
    1% of 1000 is skimmed; the remaining 990 USDC units reach the curve as 990 * 10^12.
    """
    mock_curve.quote_buy.return_value = (5, 123)

    quote = ledger.estimate_buy(usdc_pool, 1000)

    assert quote == BuyQuote(tokens_received=5, fee=10)
    mock_curve.quote_buy.assert_called_once_with(990 * 10 ** 12, 0, MOCK_PARAMS)


def test_sell_payout_is_scaled_down_by_gap(ledger, transfers, mock_curve, usdc_pool):
    mock_curve.quote_buy.return_value = (5, 990 * 10 ** 12)
    ledger.buy(usdc_pool, 1000, ALICE)

    mock_curve.quote_sell.return_value = (5, 700 * 10 ** 12 + 3)
    usdc_before = transfers.balance_of(USDC, ALICE)

    result = ledger.sell(usdc_pool, 5, ALICE)

    mock_curve.quote_sell.assert_called_with(5, 5, MOCK_PARAMS)
    assert result.fee == 7
    assert result.payment_amount == 693
    assert transfers.balance_of(USDC, ALICE) == usdc_before + 693
    assert ledger.get_pool(usdc_pool).raising_amount == 990 - 700


def test_buy_need_prices_through_sell_side(ledger, mock_curve, usdc_pool):
    """
    The payment for `wanted` tokens is the curve's sell-side value of the range
    ending at token_sold + wanted, grossed up by the buy tax.
    """
    mock_curve.quote_sell.return_value = (400, 990 * 10 ** 12 + 17)

    quote = ledger.estimate_buy_need(usdc_pool, 400)

    mock_curve.quote_sell.assert_called_once_with(400, 400, MOCK_PARAMS)
    assert quote == BuyNeedQuote(amount_pay=1000, fee=10)


def test_buy_need_is_clamped_to_remaining_supply(ledger, mock_curve, usdc_pool):
    mock_curve.quote_sell.return_value = (SUPPLY, 0)
    ledger.estimate_buy_need(usdc_pool, SUPPLY * 5)
    mock_curve.quote_sell.assert_called_once_with(SUPPLY, SUPPLY, MOCK_PARAMS)


def test_sell_quote_uses_current_baseline(ledger, mock_curve, usdc_pool):
    mock_curve.quote_buy.return_value = (50, 0)
    ledger.buy(usdc_pool, 1000, ALICE)

    mock_curve.quote_sell.return_value = (20, 10 ** 15)
    quote = ledger.estimate_sell(usdc_pool, 20)

    mock_curve.quote_sell.assert_called_with(20, 50, MOCK_PARAMS)
    assert quote == SellQuote(return_amount=990, fee=10)


def test_estimates_do_not_mutate(ledger, flat_pool):
    before = ledger.get_pool(flat_pool)
    ledger.estimate_buy(flat_pool, 10 ** 20)
    ledger.estimate_buy_need(flat_pool, 10 ** 20)
    ledger.estimate_sell(flat_pool, 10 ** 20)
    assert ledger.get_pool(flat_pool) == before


def test_flat_curve_estimates(ledger, flat_pool):
    assert ledger.estimate_buy(flat_pool, 1000) == BuyQuote(tokens_received=990, fee=10)
    assert ledger.estimate_buy_need(flat_pool, 990) == BuyNeedQuote(amount_pay=1000, fee=10)

    ledger.buy(flat_pool, 1000, ALICE)
    assert ledger.estimate_sell(flat_pool, 500) == SellQuote(return_amount=495, fee=5)


def test_buy_exact_on_flat_curve_delivers_exactly(ledger, flat_pool):
    result = ledger.buy_exact(flat_pool, 990, ALICE)
    assert result.token_amount == 990
    assert result.payment_amount == 1000
    assert result.fee == 10


def test_buy_exact_on_sloped_curve(ledger, sloped_pool):
    """
    Rounding can leave the delivered amount a hair under the request, never over,
    and the fee charged matches the quoted fee within a rounding unit.
    """
    ledger.buy(sloped_pool, 12 * WAD, ALICE)
    wanted = 777 * WAD + 12345
    quote = ledger.estimate_buy_need(sloped_pool, wanted)

    result = ledger.buy_exact(sloped_pool, wanted, ALICE)

    assert result.token_amount <= wanted
    assert wanted - result.token_amount <= wanted // 10 ** 12
    assert result.payment_amount == quote.amount_pay
    assert abs(result.fee - quote.fee) <= 1


def test_usdc_flat_pool_end_to_end_units(ledger, transfers):
    """
    1 USDC (10^6 units) at 1 normalized unit per whole token buys 10^12 times as many token units.
    """
    pid = ledger.create_pool(OWNER, USDC, TOKEN_B, "linear", SUPPLY, parameters=FLAT_PARAMS)
    quote = ledger.estimate_buy(pid, 10 ** 6)
    assert quote.fee == 10 ** 4
    assert quote.tokens_received == 99 * 10 ** 4 * 10 ** 12
