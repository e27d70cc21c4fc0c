from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from curve_sale.common.enums import OrderSide, PoolStatus


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
# Raising with the null identity means paying in native currency.
NATIVE_TOKEN = ZERO_ADDRESS


@dataclass
class Pool:
    """Authoritative state of one bonding-curve sale."""
    raising_token: str = ZERO_ADDRESS
    token: str = ZERO_ADDRESS
    curve_type: Optional[str] = None
    curve: Optional[Any] = None
    parameters: Optional[Any] = None
    owner: str = ZERO_ADDRESS
    token_to_sell: int = 0
    token_sold: int = 0
    raising_amount: int = 0
    end_time: int = 0
    gap: int = 0
    status: PoolStatus = PoolStatus.ACTIVE

    @classmethod
    def ended(cls) -> "Pool":
        """The zero value a pool is reset to once its proceeds are released."""
        return cls(status=PoolStatus.ENDED)

    @property
    def remaining(self) -> int:
        return self.token_to_sell - self.token_sold

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raising_token": self.raising_token,
            "token": self.token,
            "curve_type": self.curve_type,
            "parameters": self.parameters,
            "owner": self.owner,
            "token_to_sell": self.token_to_sell,
            "token_sold": self.token_sold,
            "raising_amount": self.raising_amount,
            "end_time": self.end_time,
            "gap": self.gap,
            "status": str(self.status),
        }


@dataclass(frozen=True)
class BuyQuote:
    """Tokens a gross payment buys, and the platform fee skimmed from it."""
    tokens_received: int
    fee: int


@dataclass(frozen=True)
class BuyNeedQuote:
    """Gross payment needed for a number of tokens, and the fee inside it."""
    amount_pay: int
    fee: int


@dataclass(frozen=True)
class SellQuote:
    """Net payout for selling tokens back, and the platform fee skimmed from it."""
    return_amount: int
    fee: int


@dataclass
class TradeResult:
    """Outcome of a committed buy or sell."""
    side: OrderSide
    pool_id: int
    token_amount: int
    payment_amount: int
    fee: int
    new_token_sold: int
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class PoolCreated:
    raising_token: str
    token: str
    index: int


@dataclass(frozen=True)
class TokensBought:
    index: int
    buyer: str
    amount_pay: int
    tokens_received: int
    fee: int


@dataclass(frozen=True)
class TokensSold:
    index: int
    seller: str
    token_amount: int
    return_amount: int
    fee: int


@dataclass(frozen=True)
class PoolEnded:
    index: int
    owner: str
    raising_amount: int


@dataclass(frozen=True)
class OwnerChanged:
    index: int
    old_owner: str
    new_owner: str


@dataclass(frozen=True)
class PlatformFeeClaimed:
    raising_token: str
    treasury: str
    amount: int
