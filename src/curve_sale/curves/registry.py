import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple, Union

from curve_sale.common.enums import CurveType
from curve_sale.common.errors import CurveNotFoundError, InvalidArgumentError
from curve_sale.common.math import BASIS_POINTS
from curve_sale.curves.base import PricingCurve
from curve_sale.curves.exponential import ExponentialPricingCurve
from curve_sale.curves.linear import LinearPricingCurve

log = logging.getLogger(__name__)


class CurveRegistry(ABC):
    """Platform registry: curve implementations by type name, the tax rates, and the treasury."""

    @abstractmethod
    def resolve_curve(self, type_name: Union[str, CurveType]) -> PricingCurve:
        pass

    @abstractmethod
    def get_tax_rate(self) -> Tuple[int, int]:
        """:return: (buy_rate_bps, sell_rate_bps), each out of 10000"""
        pass

    @abstractmethod
    def get_treasury(self) -> str:
        pass


class InMemoryRegistry(CurveRegistry):
    """
    Registry kept in process memory. Comes with the linear and exponential curves
    registered under their CurveType names; further types can be added by name.
    """

    def __init__(
        self,
        treasury: str,
        buy_tax_bps: int = 0,
        sell_tax_bps: int = 0,
        curves: Optional[Dict[str, PricingCurve]] = None,
    ):
        self._treasury = treasury
        self._buy_tax_bps = 0
        self._sell_tax_bps = 0
        self.set_tax_rate(buy_tax_bps, sell_tax_bps)

        self._curves: Dict[str, PricingCurve] = {
            CurveType.LINEAR.name: LinearPricingCurve(),
            CurveType.EXPONENTIAL.name: ExponentialPricingCurve(),
        }
        for name, curve in (curves or {}).items():
            self.register_curve(name, curve)

    @staticmethod
    def _key(type_name: Union[str, CurveType]) -> str:
        if isinstance(type_name, CurveType):
            return type_name.name
        return str(type_name).upper()

    def register_curve(self, type_name: Union[str, CurveType], curve: PricingCurve):
        self._curves[self._key(type_name)] = curve
        log.info("Registered pricing curve %s", self._key(type_name))

    def resolve_curve(self, type_name: Union[str, CurveType]) -> PricingCurve:
        try:
            return self._curves[self._key(type_name)]
        except KeyError:
            raise CurveNotFoundError(f"No pricing curve registered for {type_name}") from None

    def set_tax_rate(self, buy_tax_bps: int, sell_tax_bps: int):
        # buy rate must stay below 100% so a net quote can be grossed back up
        for rate in (buy_tax_bps, sell_tax_bps):
            if rate < 0 or rate >= BASIS_POINTS:
                raise InvalidArgumentError(f"Tax rate {rate} bps outside [0, {BASIS_POINTS}).")
        self._buy_tax_bps = buy_tax_bps
        self._sell_tax_bps = sell_tax_bps

    def get_tax_rate(self) -> Tuple[int, int]:
        return self._buy_tax_bps, self._sell_tax_bps

    def set_treasury(self, treasury: str):
        self._treasury = treasury

    def get_treasury(self) -> str:
        return self._treasury
