from typing import Dict


class FeeTreasuryLedger:
    """
    Platform fees owed to the treasury, one accumulator per raising token.
    Balances only grow through accrue() and only reset through drain().
    """

    def __init__(self):
        self._owed: Dict[str, int] = {}

    def accrue(self, raising_token: str, amount: int):
        if amount < 0:
            raise ValueError("Fee accrual cannot be negative.")
        if amount:
            self._owed[raising_token] = self._owed.get(raising_token, 0) + amount

    def owed(self, raising_token: str) -> int:
        return self._owed.get(raising_token, 0)

    def drain(self, raising_token: str) -> int:
        """Zeroes the accumulator for `raising_token` and returns what it held."""
        return self._owed.pop(raising_token, 0)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._owed)

    def restore(self, snapshot: Dict[str, int]):
        self._owed = dict(snapshot)
