import pytest

from curve_sale.pools.treasury import FeeTreasuryLedger


@pytest.fixture
def treasury():
    return FeeTreasuryLedger()


def test_accrue_per_token(treasury):
    treasury.accrue("0xa", 10)
    treasury.accrue("0xa", 5)
    treasury.accrue("0xb", 7)
    assert treasury.owed("0xa") == 15
    assert treasury.owed("0xb") == 7
    assert treasury.owed("0xc") == 0


def test_drain_zeroes_and_is_idempotent(treasury):
    treasury.accrue("0xa", 42)
    assert treasury.drain("0xa") == 42
    assert treasury.owed("0xa") == 0
    assert treasury.drain("0xa") == 0


def test_negative_accrual_rejected(treasury):
    with pytest.raises(ValueError):
        treasury.accrue("0xa", -1)


def test_snapshot_restore(treasury):
    treasury.accrue("0xa", 3)
    saved = treasury.snapshot()
    treasury.accrue("0xa", 100)
    treasury.accrue("0xb", 1)
    treasury.restore(saved)
    assert treasury.owed("0xa") == 3
    assert treasury.owed("0xb") == 0
