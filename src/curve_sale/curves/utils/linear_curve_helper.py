from math import isqrt

from curve_sale.common.math import WAD, ceil_div


class LinearCurveHelper:
    """A separate helper class for the exact integer math used by LinearPricingCurve."""

    # cost numerators share this denominator so every comparison stays in integers
    DENOMINATOR = 2 * WAD * WAD

    @staticmethod
    def cost_numerator(start: int, end: int, i: int, m: int) -> int:
        """
        Integral of the linear price from 'start' to 'end', scaled by DENOMINATOR:
            cost = [i*(end - start) + m*(end^2 - start^2) / (2*WAD)] / WAD
        """
        return 2 * WAD * i * (end - start) + m * (end * end - start * start)

    @staticmethod
    def cost_ceil(start: int, end: int, i: int, m: int) -> int:
        return ceil_div(LinearCurveHelper.cost_numerator(start, end, i, m), LinearCurveHelper.DENOMINATOR)

    @staticmethod
    def cost_floor(start: int, end: int, i: int, m: int) -> int:
        return LinearCurveHelper.cost_numerator(start, end, i, m) // LinearCurveHelper.DENOMINATOR

    @staticmethod
    def max_tokens_for(payment: int, start: int, i: int, m: int) -> int:
        """
        Largest t with cost(start, start + t) <= payment.

        Solves m*t^2 + (2*WAD*i + 2*m*start)*t - payment*DENOMINATOR <= 0, then nudges the
        integer root so the bound holds exactly.
        """
        budget = payment * LinearCurveHelper.DENOMINATOR
        b = 2 * WAD * i + 2 * m * start
        if m == 0:
            return budget // b

        t = (isqrt(b * b + 4 * m * budget) - b) // (2 * m)
        while LinearCurveHelper.cost_numerator(start, start + t + 1, i, m) <= budget:
            t += 1
        while t > 0 and LinearCurveHelper.cost_numerator(start, start + t, i, m) > budget:
            t -= 1
        return t
