import pytest
from pydantic import ValidationError

from curve_sale.common.config import EngineConfig


def test_defaults():
    config = EngineConfig()
    assert config.auto_end_divisor == 1_000_000
    assert config.buy_tax_bps == 0
    assert config.sell_tax_bps == 0


def test_from_env(monkeypatch):
    monkeypatch.setenv("CURVE_SALE_BUY_TAX_BPS", "250")
    monkeypatch.setenv("CURVE_SALE_TREASURY", "0xfee")
    monkeypatch.setenv("CURVE_SALE_AUTO_END_DIVISOR", "1000")

    config = EngineConfig.from_env()
    assert config.buy_tax_bps == 250
    assert config.treasury == "0xfee"
    assert config.auto_end_divisor == 1000
    assert config.sell_tax_bps == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"buy_tax_bps": 10000},
        {"sell_tax_bps": -1},
        {"auto_end_divisor": 0},
    ]
)
def test_rejects_invalid_values(overrides):
    with pytest.raises(ValidationError):
        EngineConfig(**overrides)
