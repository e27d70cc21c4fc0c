from decimal import Decimal, localcontext
from typing import Any, Tuple

from pydantic import BaseModel, Field

from curve_sale.common.enums import CurveType
from curve_sale.common.math import WAD
from curve_sale.curves.base import PricingCurve
from curve_sale.curves.utils.exponential_curve_helper import ExponentialCurveHelper as exponential_helper


class ExponentialCurveParams(BaseModel):
    """
    initial_price: normalized payment per whole token at zero supply sold (p0 > 0).
    growth: exponent added per whole token sold, scaled by 1e18 (alpha >= 0).
    """
    initial_price: int = Field(gt=0)
    growth: int = Field(0, ge=0)


class ExponentialPricingCurve(PricingCurve):
    """
    A bonding curve where the price function is modeled as:
        price(s) = p0 * exp(growth * s / 1e36)

    Integrals are evaluated in Decimal at ExponentialCurveHelper.PRECISION digits and
    rounded in the pool's favour: tokens out and sale proceeds down, buy consumption up.
    """
    curve_type = CurveType.EXPONENTIAL
    params_model = ExponentialCurveParams

    def get_spot_price(self, supply: int, parameters: Any) -> Decimal:
        p = self.parse_parameters(parameters)
        with localcontext() as ctx:
            ctx.prec = exponential_helper.PRECISION
            if p.growth == 0:
                return Decimal(p.initial_price)
            return Decimal(p.initial_price) * (Decimal(p.growth) * supply / (WAD * WAD)).exp()

    def quote_buy(self, payment_in: int, baseline: int, parameters: Any) -> Tuple[int, int]:
        p = self.parse_parameters(parameters)
        if payment_in <= 0:
            return 0, 0

        tokens = exponential_helper.max_tokens_for(payment_in, baseline, p.initial_price, p.growth)
        consumed = exponential_helper.cost_ceil(baseline, baseline + tokens, p.initial_price, p.growth)
        return tokens, consumed

    def quote_sell(self, tokens_in: int, baseline: int, parameters: Any) -> Tuple[int, int]:
        p = self.parse_parameters(parameters)
        tokens = min(tokens_in, baseline)
        if tokens <= 0:
            return 0, 0

        payment = exponential_helper.cost_floor(baseline - tokens, baseline, p.initial_price, p.growth)
        return tokens, payment
