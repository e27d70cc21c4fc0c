from typing import Any, Dict, List

from curve_sale.common.model import NATIVE_TOKEN
from curve_sale.curves.base import PricingCurve


class PoolValidator:
    """
    Validator for pool creation arguments.
    1) Sale checks (amount, end time, token pair)
    2) Curve parameter checks, delegated to the curve itself

    Returns a dict with:
      {
        "errors": [str...],
        "warnings": [str...],
        "info": {...}
      }
    """

    @staticmethod
    def validate_sale(
        raising_token: str,
        token: str,
        sell_amount: int,
        end_time: int,
        now: int,
    ) -> Dict[str, Any]:
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}

        if sell_amount is None or sell_amount <= 0:
            errors.append("Pool: 'sell_amount' must be > 0.")
        if end_time is None or end_time < 0:
            errors.append("Pool: 'end_time' must be 0 (auto) or a timestamp.")
        elif end_time != 0 and end_time <= now:
            errors.append(f"Pool: 'end_time' {end_time} is not in the future (now {now}).")
        if token == NATIVE_TOKEN:
            errors.append("Pool: the token being sold cannot be native currency.")
        if token == raising_token:
            errors.append("Pool: 'token' and 'raising_token' must differ.")

        if end_time == 0:
            warnings.append("Pool: no end time set; the pool only ends once its supply is nearly sold out.")

        info["sale_summary"] = {
            "raising_token": raising_token,
            "token": token,
            "sell_amount": str(sell_amount),
            "end_time": str(end_time),
        }

        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def validate_create(
        raising_token: str,
        token: str,
        sell_amount: int,
        end_time: int,
        now: int,
        curve: "PricingCurve",
        parameters: Any,
    ) -> Dict[str, Any]:
        """
        Aggregates the sale checks and the curve's own parameter checks.
        """
        results = {
            "errors": [],
            "warnings": [],
            "info": {}
        }

        for check in (
            PoolValidator.validate_sale(raising_token, token, sell_amount, end_time, now),
            curve.validate_parameters(parameters),
        ):
            results["errors"].extend(check["errors"])
            results["warnings"].extend(check["warnings"])
            results["info"].update(check["info"])

        return results
