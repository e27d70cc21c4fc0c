import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Dict, List, Set, Tuple

from curve_sale.common.errors import InsufficientValueError, InvalidArgumentError, TransferFailedError
from curve_sale.common.math import BASIS_POINTS, NORMALIZED_DECIMALS, mul_div
from curve_sale.common.model import NATIVE_TOKEN

log = logging.getLogger(__name__)

TransferHook = Callable[[str, str, str, int], None]


class TransferAdapter(ABC):
    """
    Moves fungible tokens and native currency in and out of the pool ledger's custody,
    reporting what actually arrived so fee-on-transfer tokens cannot skew the books.
    """

    @abstractmethod
    def decimals(self, token: str) -> int:
        pass

    @abstractmethod
    def pull(self, token: str, sender: str, amount: int, value: int = 0) -> int:
        """
        Moves `amount` of `token` from `sender` into custody.

        For native currency `value` is the attached value; it must cover `amount` and the
        requested amount is returned verbatim. For tokens the return value is the custody
        balance difference, measured before control returns to the ledger.

        :return: int - amount actually received
        """
        pass

    @abstractmethod
    def push(self, token: str, recipient: str, amount: int):
        """Moves `amount` of `token` out of custody, failing loudly if it cannot be delivered."""
        pass

    @contextmanager
    def atomic(self):
        """Savepoint around one ledger call. Adapters that cannot roll back rely on the host to revert."""
        yield


class InMemoryTransferAdapter(TransferAdapter):
    """
    Balances kept in process memory.

    Supports fee-on-transfer tokens (a bps cut burned on every move), recipients that
    refuse native currency, and per-token hooks invoked mid-transfer to model tokens
    that call back into the receiver.
    """

    def __init__(self, custody: str = "curve-sale-custody"):
        self.custody = custody
        self._balances: Dict[Tuple[str, str], int] = {}
        self._decimals: Dict[str, int] = {NATIVE_TOKEN: NORMALIZED_DECIMALS}
        self._transfer_fee_bps: Dict[str, int] = {}
        self._hooks: Dict[str, List[TransferHook]] = {}
        self._rejects_native: Set[str] = set()

    def register_token(self, token: str, decimals: int = 18, transfer_fee_bps: int = 0):
        if token == NATIVE_TOKEN:
            raise InvalidArgumentError("Native currency is always registered.")
        self._decimals[token] = decimals
        self._transfer_fee_bps[token] = transfer_fee_bps

    def mint(self, token: str, holder: str, amount: int):
        self._require_known(token)
        self._balances[(token, holder)] = self.balance_of(token, holder) + amount

    def balance_of(self, token: str, holder: str) -> int:
        return self._balances.get((token, holder), 0)

    def add_hook(self, token: str, hook: TransferHook):
        self._hooks.setdefault(token, []).append(hook)

    def reject_native(self, recipient: str):
        self._rejects_native.add(recipient)

    def decimals(self, token: str) -> int:
        self._require_known(token)
        return self._decimals[token]

    def _require_known(self, token: str):
        if token not in self._decimals:
            raise TransferFailedError(f"Unknown token {token}")

    def _move(self, token: str, sender: str, recipient: str, amount: int):
        self._require_known(token)
        if self.balance_of(token, sender) < amount:
            raise TransferFailedError(
                f"{sender} holds {self.balance_of(token, sender)} of {token}, cannot move {amount}"
            )

        burned = mul_div(amount, self._transfer_fee_bps.get(token, 0), BASIS_POINTS)
        self._balances[(token, sender)] = self.balance_of(token, sender) - amount
        self._balances[(token, recipient)] = self.balance_of(token, recipient) + amount - burned

        for hook in self._hooks.get(token, []):
            hook(token, sender, recipient, amount)

    def pull(self, token: str, sender: str, amount: int, value: int = 0) -> int:
        if amount < 0:
            raise InvalidArgumentError("Transfer amount cannot be negative.")

        if token == NATIVE_TOKEN:
            if value < amount:
                raise InsufficientValueError(f"Attached value {value} below stated amount {amount}")
            self._move(token, sender, self.custody, amount)
            return amount

        before = self.balance_of(token, self.custody)
        self._move(token, sender, self.custody, amount)
        received = self.balance_of(token, self.custody) - before
        if received != amount:
            log.debug("Pulled %s of %s from %s, %s arrived", amount, token, sender, received)
        return received

    def push(self, token: str, recipient: str, amount: int):
        if amount < 0:
            raise InvalidArgumentError("Transfer amount cannot be negative.")
        if token == NATIVE_TOKEN and recipient in self._rejects_native:
            raise TransferFailedError(f"{recipient} refused native currency")
        if self.balance_of(token, self.custody) < amount:
            raise InsufficientValueError(
                f"Custody holds {self.balance_of(token, self.custody)} of {token}, cannot pay out {amount}"
            )
        self._move(token, self.custody, recipient, amount)

    @contextmanager
    def atomic(self):
        saved = dict(self._balances)
        try:
            yield
        except Exception:
            self._balances = saved
            raise
