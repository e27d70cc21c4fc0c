from curve_sale.common.errors import InvalidArgumentError

NORMALIZED_DECIMALS = 18
WAD = 10 ** NORMALIZED_DECIMALS
BASIS_POINTS = 10000


def decimal_gap(decimals: int) -> int:
    """
    Scaling factor that lifts an amount of a token with `decimals` places into
    the fixed 18-decimal unit the pricing curves work in.

    :param decimals: int - decimal count of the raising token
    :return: int - 10 ** (18 - decimals)
    """
    if decimals < 0 or decimals > NORMALIZED_DECIMALS:
        raise InvalidArgumentError(f"Unsupported token decimals {decimals}; expected 0..{NORMALIZED_DECIMALS}.")
    return 10 ** (NORMALIZED_DECIMALS - decimals)


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator) for non-negative integers."""
    return (a * b) // denominator


def ceil_div(a: int, b: int) -> int:
    return -((-a) // b)
