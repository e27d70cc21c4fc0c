from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, localcontext

from curve_sale.common.math import WAD


class ExponentialCurveHelper:
    """
    A helper class for exponential bonding curve logic, including:
      - Cost for purchase (integral from s...s+Δs)
      - Return for sale (integral from s-Δs...s)
      - Inverting the integral to find how far a payment reaches

    With c = growth / 1e36 (exponent per smallest token unit):
        price(s) = p0 * e^(c*s)
        cost(s0, s1) = p0 * 1e18 / growth * (e^(c*s1) - e^(c*s0))
    """

    PRECISION = 60

    @staticmethod
    def cost_between(start: int, end: int, p0: int, growth: int) -> Decimal:
        with localcontext() as ctx:
            ctx.prec = ExponentialCurveHelper.PRECISION
            if growth == 0:
                return Decimal(p0) * (end - start) / WAD

            c = Decimal(growth) / (WAD * WAD)
            return Decimal(p0) * WAD / growth * ((c * end).exp() - (c * start).exp())

    @staticmethod
    def cost_ceil(start: int, end: int, p0: int, growth: int) -> int:
        return int(ExponentialCurveHelper.cost_between(start, end, p0, growth).to_integral_value(ROUND_CEILING))

    @staticmethod
    def cost_floor(start: int, end: int, p0: int, growth: int) -> int:
        return int(ExponentialCurveHelper.cost_between(start, end, p0, growth).to_integral_value(ROUND_FLOOR))

    @staticmethod
    def max_tokens_for(payment: int, start: int, p0: int, growth: int) -> int:
        """
        Largest t with ceil(cost(start, start + t)) <= payment.
        The closed-form inverse gets within a unit; the integer bound is then enforced directly.
        """
        if growth == 0:
            return payment * WAD // p0

        with localcontext() as ctx:
            ctx.prec = ExponentialCurveHelper.PRECISION
            c = Decimal(growth) / (WAD * WAD)
            target = Decimal(payment) * growth / (Decimal(p0) * WAD) + (c * start).exp()
            end = target.ln() / c
            t = max(int((end - start).to_integral_value(ROUND_FLOOR)), 0)

        while t > 0 and ExponentialCurveHelper.cost_ceil(start, start + t, p0, growth) > payment:
            t -= 1
        while ExponentialCurveHelper.cost_ceil(start, start + t + 1, p0, growth) <= payment:
            t += 1
        return t
