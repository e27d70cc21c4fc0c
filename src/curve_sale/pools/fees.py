from typing import Tuple

from curve_sale.common.errors import InvalidArgumentError
from curve_sale.common.math import BASIS_POINTS, mul_div


class FeeCalculator:
    """Platform fee arithmetic in basis points. All rounding is floor."""

    @staticmethod
    def _check_rate(rate_bps: int):
        if rate_bps < 0 or rate_bps >= BASIS_POINTS:
            raise InvalidArgumentError(f"Tax rate {rate_bps} bps outside [0, {BASIS_POINTS}).")

    @staticmethod
    def apply_fee(gross: int, rate_bps: int) -> Tuple[int, int]:
        """
        Skims the fee off a gross amount.

        :return: (net, fee) with fee = floor(gross * rate / 10000)
        """
        FeeCalculator._check_rate(rate_bps)
        fee = mul_div(gross, rate_bps, BASIS_POINTS)
        return gross - fee, fee

    @staticmethod
    def gross_up(net: int, rate_bps: int) -> Tuple[int, int]:
        """
        Inverts apply_fee: the gross amount whose net is `net`.

        gross = floor(net * 10000 / (10000 - rate)); fee = floor(gross * rate / 10000).
        The fee can differ by a rounding unit from one computed on a different pulled amount.

        :return: (gross, fee)
        """
        FeeCalculator._check_rate(rate_bps)
        gross = mul_div(net, BASIS_POINTS, BASIS_POINTS - rate_bps)
        fee = mul_div(gross, rate_bps, BASIS_POINTS)
        return gross, fee
