"""Typed data models for the strategy engine."""

from core.models.backtest import (
    BacktestResult,
    BacktestTrade,
    EquityPoint,
    ExitReason,
    TradeOutcome,
)
from core.models.live import (
    LiveExecutedTrade,
    LiveStrategyResult,
    SessionStatus,
    Side,
    TradeStatus,
    TxReceipt,
)
from core.models.price import CurveInfo, MarketTrade, PricePoint
from core.models.strategy import EntryType, StrategyParams

__all__ = [
    "BacktestResult",
    "BacktestTrade",
    "CurveInfo",
    "EntryType",
    "EquityPoint",
    "ExitReason",
    "LiveExecutedTrade",
    "LiveStrategyResult",
    "MarketTrade",
    "PricePoint",
    "SessionStatus",
    "Side",
    "StrategyParams",
    "TradeOutcome",
    "TradeStatus",
    "TxReceipt",
]
