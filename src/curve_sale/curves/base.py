from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple, Type

from pydantic import BaseModel, ValidationError

from curve_sale.common.enums import CurveType
from curve_sale.common.errors import InvalidArgumentError


class PricingCurve(ABC):
    """
    Abstract base class defining the pricing capability a pool consults on every trade.

    Payment quantities crossing this interface are always in the normalized 18-decimal
    unit; token quantities are in the sold token's smallest unit. Implementations are
    stateless: the baseline supply and the opaque parameter blob arrive with each call.
    """
    curve_type: CurveType
    params_model: Type[BaseModel]

    def parse_parameters(self, parameters: Any) -> BaseModel:
        """
        Interprets the opaque parameter blob stored on the pool.

        :param parameters: dict or params model instance
        :return: the curve's params model
        """
        if isinstance(parameters, self.params_model):
            return parameters
        try:
            return self.params_model.model_validate(parameters or {})
        except ValidationError as exc:
            raise InvalidArgumentError(f"{self.curve_type}: invalid curve parameters: {exc}") from exc

    def validate_parameters(self, parameters: Any) -> Dict[str, Any]:
        """
        Checks a parameter blob without raising.

        :return: dict with keys errors, warnings, info
        """
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}

        try:
            parsed = self.parse_parameters(parameters)
        except InvalidArgumentError as exc:
            errors.append(str(exc))
        else:
            info["param_summary"] = {k: str(v) for k, v in parsed.model_dump().items()}

        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @abstractmethod
    def quote_buy(self, payment_in: int, baseline: int, parameters: Any) -> Tuple[int, int]:
        """
        How many tokens a normalized payment buys starting at `baseline` supply sold.

        :param payment_in: int - normalized payment offered
        :param baseline: int - cumulative tokens sold before this trade
        :param parameters: opaque curve parameters
        :return: (tokens_out, normalized_payment_consumed), consumption never above payment_in
        """
        pass

    @abstractmethod
    def quote_sell(self, tokens_in: int, baseline: int, parameters: Any) -> Tuple[int, int]:
        """
        What redeeming `tokens_in` pays out, walking the curve down from `baseline`.

        :param tokens_in: int - tokens to redeem
        :param baseline: int - cumulative tokens sold before this trade
        :param parameters: opaque curve parameters
        :return: (tokens_consumed, normalized_payment_out)
        """
        pass
