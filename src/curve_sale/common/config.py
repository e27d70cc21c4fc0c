import os
from typing import Optional

from pydantic import BaseModel, Field

from curve_sale.common.math import BASIS_POINTS
from curve_sale.common.model import ZERO_ADDRESS


class EngineConfig(BaseModel):
    """
    Runtime settings for a PoolLedger and the in-memory collaborators the web API wires up.

    auto_end_divisor: a pool without a fixed end time closes once fewer than
        token_to_sell // auto_end_divisor tokens remain unsold.
    custody_address: the holder that pooled tokens and proceeds are kept under.
    treasury / buy_tax_bps / sell_tax_bps: seed values for the in-memory registry.
    """
    auto_end_divisor: int = Field(1_000_000, gt=0)
    custody_address: str = "curve-sale-custody"
    treasury: str = ZERO_ADDRESS
    buy_tax_bps: int = Field(0, ge=0, lt=BASIS_POINTS)
    sell_tax_bps: int = Field(0, ge=0, lt=BASIS_POINTS)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, prefix: str = "CURVE_SALE_") -> "EngineConfig":
        """Build a config from CURVE_SALE_* environment variables, falling back to the defaults."""
        values = {}
        for name in cls.model_fields:
            raw: Optional[str] = os.getenv(f"{prefix}{name.upper()}")
            if raw is not None:
                values[name] = raw
        return cls(**values)
