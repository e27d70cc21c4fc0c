import logging
from contextlib import contextmanager
from dataclasses import fields, replace
from datetime import datetime
from typing import Any, Callable, List, Optional, Union

from curve_sale.common.config import EngineConfig
from curve_sale.common.enums import CurveType, OrderSide, PoolStatus
from curve_sale.common.errors import (
    CapacityError,
    InvalidArgumentError,
    LedgerInvariantError,
    PoolEndedError,
    PoolNotEndedError,
    PoolNotFoundError,
    ReentrancyError,
    UnauthorizedError,
)
from curve_sale.common.math import decimal_gap
from curve_sale.common.model import (
    BuyNeedQuote,
    BuyQuote,
    OwnerChanged,
    PlatformFeeClaimed,
    Pool,
    PoolCreated,
    PoolEnded,
    SellQuote,
    TokensBought,
    TokensSold,
    TradeResult,
    ZERO_ADDRESS,
)
from curve_sale.curves.registry import CurveRegistry
from curve_sale.pools.fees import FeeCalculator as fees
from curve_sale.pools.transfer import TransferAdapter
from curve_sale.pools.treasury import FeeTreasuryLedger
from curve_sale.validation.pool_validator import PoolValidator

log = logging.getLogger(__name__)


def _unix_now() -> int:
    return int(datetime.now().timestamp())


def _overwrite(target: Pool, source: Pool):
    for f in fields(Pool):
        setattr(target, f.name, getattr(source, f.name))


class PoolLedger:
    """
    The authoritative book of every bonding-curve sale.

    Each mutating call runs to completion or not at all: a failure anywhere, including
    inside a transfer, restores the touched pool, the pool list, the platform fee
    accumulator and (through TransferAdapter.atomic) the custody balances. Mutating
    calls may not re-enter the ledger from a transfer callback.

    Amounts pulled from callers are always measured, never assumed: quotes are
    recomputed from what actually arrived before any capacity check or commit.
    """

    def __init__(
        self,
        registry: CurveRegistry,
        transfers: TransferAdapter,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.registry = registry
        self.transfers = transfers
        self.config = config or EngineConfig()
        self._clock = clock or _unix_now
        self._pools: List[Pool] = []
        self._fees = FeeTreasuryLedger()
        self._listeners: List[Callable[[Any], None]] = []
        self._entered = False

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def pool_count(self) -> int:
        return len(self._pools)

    @property
    def pools(self) -> List[Pool]:
        """Copies of every pool, indexed by pool id."""
        return [replace(pool) for pool in self._pools]

    def get_pool(self, pool_id: int) -> Pool:
        return replace(self._pool(pool_id))

    def platform_fee_owed(self, raising_token: str) -> int:
        return self._fees.owed(raising_token)

    def subscribe(self, listener: Callable[[Any], None]):
        """
        Registers a callable that receives every event once its call has committed.
        Exceptions raised by a listener are logged and never reach the ledger caller.
        """
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _pool(self, pool_id: int) -> Pool:
        if not isinstance(pool_id, int) or pool_id < 0 or pool_id >= len(self._pools):
            raise PoolNotFoundError(f"No pool with index {pool_id}")
        return self._pools[pool_id]

    def _active_pool(self, pool_id: int) -> Pool:
        pool = self._pool(pool_id)
        if pool.status == PoolStatus.ENDED:
            raise PoolEndedError(f"Pool {pool_id} has ended")
        return pool

    @staticmethod
    def _require_non_negative(amount: int, what: str):
        if amount < 0:
            raise InvalidArgumentError(f"{what} cannot be negative.")

    @staticmethod
    def _has_passed(end_time: int, now: int) -> bool:
        return end_time != 0 and now > end_time

    def _emit(self, event: Any):
        # runs after commit; a failing listener is logged and skipped
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                log.exception("Listener %r failed on %s", listener, type(event).__name__)

    @contextmanager
    def _atomic(self, pool_id: Optional[int] = None):
        if self._entered:
            raise ReentrancyError("Ledger call re-entered while another call is in progress")
        self._entered = True
        try:
            pool = None
            if isinstance(pool_id, int) and 0 <= pool_id < len(self._pools):
                pool = self._pools[pool_id]
            saved_pool = replace(pool) if pool is not None else None
            saved_count = len(self._pools)
            saved_fees = self._fees.snapshot()
            try:
                with self.transfers.atomic():
                    yield
            except Exception:
                if pool is not None:
                    _overwrite(pool, saved_pool)
                del self._pools[saved_count:]
                self._fees.restore(saved_fees)
                raise
        finally:
            self._entered = False

    def _quote_buy(self, pool: Pool, gross_pay: int) -> BuyQuote:
        buy_rate, _ = self.registry.get_tax_rate()
        net, fee = fees.apply_fee(gross_pay, buy_rate)
        tokens, _ = pool.curve.quote_buy(net * pool.gap, pool.token_sold, pool.parameters)
        return BuyQuote(tokens_received=tokens, fee=fee)

    def _quote_sell(self, pool: Pool, token_amount: int) -> SellQuote:
        _, sell_rate = self.registry.get_tax_rate()
        _, normalized = pool.curve.quote_sell(token_amount, pool.token_sold, pool.parameters)
        net, fee = fees.apply_fee(normalized // pool.gap, sell_rate)
        return SellQuote(return_amount=net, fee=fee)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_pool(
        self,
        caller: str,
        raising_token: str,
        token: str,
        curve_type: Union[str, CurveType],
        sell_amount: int,
        end_time: int = 0,
        parameters: Any = None,
    ) -> int:
        """
        Opens a sale of `sell_amount` of `token` priced in `raising_token`.

        The cap is fixed to `sell_amount` even when a fee-on-transfer token delivers less;
        under-funding the pool is the creator's responsibility.

        :return: int - index of the new pool
        """
        with self._atomic():
            now = self._clock()
            curve = self.registry.resolve_curve(curve_type)
            results = PoolValidator.validate_create(
                raising_token, token, sell_amount, end_time, now, curve, parameters
            )
            if results["errors"]:
                raise InvalidArgumentError("; ".join(results["errors"]))
            for warning in results["warnings"]:
                log.debug(warning)

            gap = decimal_gap(self.transfers.decimals(raising_token))
            received = self.transfers.pull(token, caller, sell_amount)
            if received < sell_amount:
                log.warning(
                    "Pool for %s funded with %s of %s requested; cap stays at the requested amount",
                    token, received, sell_amount,
                )

            type_name = curve_type.name if isinstance(curve_type, CurveType) else str(curve_type).upper()
            self._pools.append(Pool(
                raising_token=raising_token,
                token=token,
                curve_type=type_name,
                curve=curve,
                parameters=parameters,
                owner=caller,
                token_to_sell=sell_amount,
                end_time=end_time,
                gap=gap,
            ))
            index = len(self._pools) - 1

        log.info("Created pool %s selling %s %s for %s (%s curve)", index, sell_amount, token, raising_token, type_name)
        self._emit(PoolCreated(raising_token=raising_token, token=token, index=index))
        return index

    # ------------------------------------------------------------------
    # Estimates
    # ------------------------------------------------------------------

    def estimate_buy(self, pool_id: int, gross_pay: int) -> BuyQuote:
        """Tokens that `gross_pay` of the raising token buys right now, and the fee taken from it."""
        pool = self._active_pool(pool_id)
        self._require_non_negative(gross_pay, "Payment")
        return self._quote_buy(pool, gross_pay)

    def estimate_buy_need(self, pool_id: int, tokens_wanted: int) -> BuyNeedQuote:
        """
        Gross payment for `tokens_wanted`, clamped to the unsold remainder.

        Prices the range [token_sold, token_sold + wanted] through the curve's sell side,
        then grosses the net figure up by the buy tax.
        """
        pool = self._active_pool(pool_id)
        self._require_non_negative(tokens_wanted, "Token amount")
        wanted = min(tokens_wanted, pool.remaining)
        _, normalized = pool.curve.quote_sell(wanted, pool.token_sold + wanted, pool.parameters)
        buy_rate, _ = self.registry.get_tax_rate()
        amount_pay, fee = fees.gross_up(normalized // pool.gap, buy_rate)
        return BuyNeedQuote(amount_pay=amount_pay, fee=fee)

    def estimate_sell(self, pool_id: int, token_amount: int) -> SellQuote:
        """Net raising-token payout for selling `token_amount` back, and the fee taken from it."""
        pool = self._active_pool(pool_id)
        self._require_non_negative(token_amount, "Token amount")
        return self._quote_sell(pool, token_amount)

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    def buy(self, pool_id: int, amount_pay: int, caller: str, value: int = 0) -> TradeResult:
        """
        Pays `amount_pay` of the raising token into the pool for as many tokens as it buys.

        :param value: native currency attached to the call, used when the pool raises in native currency
        """
        if amount_pay <= 0:
            raise InvalidArgumentError("Buy amount must be > 0.")

        with self._atomic(pool_id):
            pool = self._active_pool(pool_id)
            now = self._clock()
            if self._has_passed(pool.end_time, now):
                raise CapacityError(f"Mint/burn limited: pool {pool_id} ended at {pool.end_time}")

            actual_pay = self.transfers.pull(pool.raising_token, caller, amount_pay, value=value)
            quote = self._quote_buy(pool, actual_pay)
            if pool.token_sold + quote.tokens_received > pool.token_to_sell:
                raise CapacityError(
                    f"Mint/burn limited: pool {pool_id} has {pool.remaining} left, buy needs {quote.tokens_received}"
                )

            self._fees.accrue(pool.raising_token, quote.fee)
            pool.token_sold += quote.tokens_received
            pool.raising_amount += actual_pay - quote.fee
            self.transfers.push(pool.token, caller, quote.tokens_received)

            auto_ended = False
            dust = pool.token_to_sell // self.config.auto_end_divisor
            if pool.end_time == 0 and pool.token_sold >= pool.token_to_sell - dust:
                pool.end_time = now - 1
                auto_ended = True
            new_token_sold = pool.token_sold

        log.debug("Pool %s: %s paid %s for %s tokens (fee %s)", pool_id, caller, actual_pay, quote.tokens_received, quote.fee)
        if auto_ended:
            log.info("Pool %s sold through its dust threshold and is now claimable", pool_id)
        self._emit(TokensBought(
            index=pool_id, buyer=caller, amount_pay=actual_pay, tokens_received=quote.tokens_received, fee=quote.fee
        ))
        return TradeResult(
            side=OrderSide.BUY,
            pool_id=pool_id,
            token_amount=quote.tokens_received,
            payment_amount=actual_pay,
            fee=quote.fee,
            new_token_sold=new_token_sold,
            timestamp=datetime.fromtimestamp(now),
        )

    def buy_exact(self, pool_id: int, tokens_wanted: int, caller: str, value: int = 0) -> TradeResult:
        """Buys (up to) `tokens_wanted`, paying what estimate_buy_need quotes."""
        quote = self.estimate_buy_need(pool_id, tokens_wanted)
        return self.buy(pool_id, quote.amount_pay, caller, value=value)

    def sell(self, pool_id: int, token_amount: int, caller: str) -> TradeResult:
        """Returns `token_amount` of the sold token to the pool for raising-token proceeds."""
        if token_amount <= 0:
            raise InvalidArgumentError("Sell amount must be > 0.")

        with self._atomic(pool_id):
            pool = self._active_pool(pool_id)
            now = self._clock()
            if self._has_passed(pool.end_time, now):
                raise CapacityError(f"Mint/burn limited: pool {pool_id} ended at {pool.end_time}")

            actual_sell = self.transfers.pull(pool.token, caller, token_amount)
            if actual_sell > pool.token_sold:
                log.error("Pool %s: sell of %s exceeds %s sold", pool_id, actual_sell, pool.token_sold)
                raise LedgerInvariantError(f"Pool {pool_id}: selling {actual_sell} exceeds {pool.token_sold} sold")

            quote = self._quote_sell(pool, actual_sell)
            payout = quote.return_amount + quote.fee
            if payout > pool.raising_amount:
                log.error("Pool %s: payout %s exceeds %s raised", pool_id, payout, pool.raising_amount)
                raise LedgerInvariantError(f"Pool {pool_id}: payout {payout} exceeds {pool.raising_amount} raised")

            pool.token_sold -= actual_sell
            pool.raising_amount -= payout
            self._fees.accrue(pool.raising_token, quote.fee)
            self.transfers.push(pool.raising_token, caller, quote.return_amount)
            new_token_sold = pool.token_sold

        log.debug("Pool %s: %s sold %s tokens for %s (fee %s)", pool_id, caller, actual_sell, quote.return_amount, quote.fee)
        self._emit(TokensSold(
            index=pool_id, seller=caller, token_amount=actual_sell, return_amount=quote.return_amount, fee=quote.fee
        ))
        return TradeResult(
            side=OrderSide.SELL,
            pool_id=pool_id,
            token_amount=actual_sell,
            payment_amount=quote.return_amount,
            fee=quote.fee,
            new_token_sold=new_token_sold,
            timestamp=datetime.fromtimestamp(now),
        )

    # ------------------------------------------------------------------
    # Lifecycle & ownership
    # ------------------------------------------------------------------

    def end_pool(self, pool_id: int, caller: str) -> int:
        """
        Releases everything raised to the owner and retires the pool.

        :return: int - raising-token amount paid to the owner
        """
        with self._atomic(pool_id):
            pool = self._active_pool(pool_id)
            if caller != pool.owner:
                raise UnauthorizedError(f"{caller} does not own pool {pool_id}")
            if not self._has_passed(pool.end_time, self._clock()):
                raise PoolNotEndedError(f"Pool {pool_id} has not reached its end time")

            owner = pool.owner
            amount = pool.raising_amount
            self.transfers.push(pool.raising_token, owner, amount)
            _overwrite(pool, Pool.ended())

        log.info("Ended pool %s, released %s to %s", pool_id, amount, owner)
        self._emit(PoolEnded(index=pool_id, owner=owner, raising_amount=amount))
        return amount

    def change_owner(self, pool_id: int, caller: str, new_owner: str):
        with self._atomic(pool_id):
            pool = self._active_pool(pool_id)
            if caller != pool.owner:
                raise UnauthorizedError(f"{caller} does not own pool {pool_id}")
            if not new_owner or new_owner == ZERO_ADDRESS:
                raise InvalidArgumentError("New owner cannot be the null address.")
            pool.owner = new_owner

        log.info("Pool %s ownership moved from %s to %s", pool_id, caller, new_owner)
        self._emit(OwnerChanged(index=pool_id, old_owner=caller, new_owner=new_owner))

    # ------------------------------------------------------------------
    # Platform fees
    # ------------------------------------------------------------------

    def claim_platform_fee(self, caller: str, raising_token: str) -> int:
        """
        Pays every accumulated fee in `raising_token` to the treasury. No partial claims.

        :return: int - amount paid, 0 when nothing was owed
        """
        with self._atomic():
            treasury = self.registry.get_treasury()
            if treasury == ZERO_ADDRESS:
                raise UnauthorizedError("No platform treasury is configured")
            if caller != treasury:
                raise UnauthorizedError(f"{caller} is not the platform treasury")
            amount = self._fees.drain(raising_token)
            if amount:
                self.transfers.push(raising_token, treasury, amount)

        if amount:
            log.info("Treasury claimed %s of %s in platform fees", amount, raising_token)
            self._emit(PlatformFeeClaimed(raising_token=raising_token, treasury=treasury, amount=amount))
        return amount
