import os
import sys
from typing import List

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.models import MarketTrade, PricePoint, StrategyParams  # noqa: E402


def make_points(prices, start: int = 1_700_000_000, step: int = 60) -> List[PricePoint]:
    return [PricePoint(timestamp=start + i * step, price=p) for i, p in enumerate(prices)]


def make_trades(prices, start: int = 1_700_000_000, step: int = 60) -> List[MarketTrade]:
    return [
        MarketTrade(
            id=f"0xtx{i:04d}-0",
            timestamp=str(start + i * step),
            price_eth=repr(float(p)),
            side="buy",
            tx_hash=f"0xtx{i:04d}",
        )
        for i, p in enumerate(prices)
    ]


@pytest.fixture
def dip_params() -> StrategyParams:
    return StrategyParams.from_dict({
        "entryType": "price_dip",
        "entryThresholdPercent": -5,
        "lookbackTrades": 20,
        "takeProfitPercent": 20,
        "stopLossPercent": -10,
        "positionSizeEth": 0.1,
    })
