"""
conftest.py - Shared pytest fixtures for curve_sale tests

Provides:
- A controllable clock
- An in-memory transfer adapter with funded test tokens
- A registry with a 1% buy/sell tax
- A PoolLedger wired to all of the above
"""

import pytest

from curve_sale.common.math import WAD
from curve_sale.common.model import NATIVE_TOKEN
from curve_sale.curves.registry import InMemoryRegistry
from curve_sale.pools.pool_ledger import PoolLedger
from curve_sale.pools.transfer import InMemoryTransferAdapter


TOKEN_A = "0xaaaa000000000000000000000000000000000001"
TOKEN_B = "0xbbbb000000000000000000000000000000000002"
USDC = "0xcccc000000000000000000000000000000000006"

OWNER = "0x0000000000000000000000000000000000000a11"
ALICE = "0x00000000000000000000000000000000000a11ce"
BOB = "0x0000000000000000000000000000000000000b0b"
TREASURY = "0x00000000000000000000000000000000000fee00"

START_TIME = 1_700_000_000
SUPPLY = 1_000_000 * WAD

FLAT_PARAMS = {"initial_price": WAD, "slope": 0}
SLOPED_PARAMS = {"initial_price": 10 ** 15, "slope": 10 ** 12}


class FakeClock:
    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int):
        self.now += seconds


def make_ledger(buy_tax_bps=100, sell_tax_bps=100, clock=None):
    """
    Builds a funded ledger without pytest fixtures (usable from hypothesis tests).
    OWNER holds the sale supply of B, ALICE and BOB hold A, USDC and native currency.
    """
    transfers = InMemoryTransferAdapter()
    transfers.register_token(TOKEN_A, decimals=18)
    transfers.register_token(TOKEN_B, decimals=18)
    transfers.register_token(USDC, decimals=6)

    transfers.mint(TOKEN_B, OWNER, 10 * SUPPLY)
    for holder in (ALICE, BOB):
        transfers.mint(TOKEN_A, holder, 10 ** 30)
        transfers.mint(USDC, holder, 10 ** 18)
        transfers.mint(NATIVE_TOKEN, holder, 10 ** 30)

    registry = InMemoryRegistry(TREASURY, buy_tax_bps=buy_tax_bps, sell_tax_bps=sell_tax_bps)
    ledger = PoolLedger(registry, transfers, clock=clock or FakeClock())
    return ledger, transfers, registry


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def setup(clock):
    return make_ledger(clock=clock)


@pytest.fixture
def ledger(setup):
    return setup[0]


@pytest.fixture
def transfers(setup):
    return setup[1]


@pytest.fixture
def registry(setup):
    return setup[2]


@pytest.fixture
def flat_pool(ledger):
    """A pool selling SUPPLY of B for A at a flat 1 A per B."""
    return ledger.create_pool(OWNER, TOKEN_A, TOKEN_B, "linear", SUPPLY, parameters=FLAT_PARAMS)


@pytest.fixture
def sloped_pool(ledger):
    """A pool selling SUPPLY of B for A, starting at 0.001 A and rising 1e-6 A per B sold."""
    return ledger.create_pool(OWNER, TOKEN_A, TOKEN_B, "linear", SUPPLY, parameters=SLOPED_PARAMS)
