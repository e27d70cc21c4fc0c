from typing import Any, Tuple

from pydantic import BaseModel, Field

from curve_sale.common.enums import CurveType
from curve_sale.common.math import WAD
from curve_sale.curves.base import PricingCurve
from curve_sale.curves.utils.linear_curve_helper import LinearCurveHelper as helper


class LinearCurveParams(BaseModel):
    """
    initial_price: normalized payment per whole (1e18-unit) token at zero supply sold.
    slope: price increase per whole token sold, in the same unit.
    """
    initial_price: int = Field(gt=0)
    slope: int = Field(0, ge=0)


class LinearPricingCurve(PricingCurve):
    """
    A linear bonding curve:
      price(s) = initial_price + slope * s / 1e18

    The integral for a purchase from supply s to s+Δs is:
      cost(Δs) = [initial_price*Δs + (slope / 2e18)*((s+Δs)² - s²)] / 1e18

    Buys round tokens down and consumed payment up; sells round payment down,
    so a round trip never pays out more than it took in.
    """
    curve_type = CurveType.LINEAR
    params_model = LinearCurveParams

    def get_spot_price(self, supply: int, parameters: Any) -> int:
        """Return the spot price (normalized payment per whole token) at the given 'supply'."""
        p = self.parse_parameters(parameters)
        return p.initial_price + (p.slope * supply) // WAD

    def quote_buy(self, payment_in: int, baseline: int, parameters: Any) -> Tuple[int, int]:
        p = self.parse_parameters(parameters)
        if payment_in <= 0:
            return 0, 0

        tokens = helper.max_tokens_for(payment_in, baseline, p.initial_price, p.slope)
        consumed = helper.cost_ceil(baseline, baseline + tokens, p.initial_price, p.slope)
        return tokens, consumed

    def quote_sell(self, tokens_in: int, baseline: int, parameters: Any) -> Tuple[int, int]:
        p = self.parse_parameters(parameters)
        tokens = min(tokens_in, baseline)
        if tokens <= 0:
            return 0, 0

        payment = helper.cost_floor(baseline - tokens, baseline, p.initial_price, p.slope)
        return tokens, payment
