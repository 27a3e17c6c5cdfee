"""Deterministic single-position backtester."""

from typing import List, Optional

from core.config import settings
from core.logging_utils import get_logger
from core.models import (
    BacktestResult,
    BacktestTrade,
    EquityPoint,
    ExitReason,
    PricePoint,
    StrategyParams,
    TradeOutcome,
)
from core.trading_interfaces import MarketDataSource
from datafeeds.normalizer import normalize_trades, sample_for_display
from logic.metrics import compute_metrics
from logic.rules import pnl_percent, reference_price, should_enter, should_exit

logger = get_logger(__name__)


def min_points_required(params: StrategyParams) -> int:
    """Series must be strictly longer than this to simulate."""
    return params.lookback_trades + settings.min_history_padding


def _close_trade(
    entry_price: float,
    entry_timestamp: int,
    exit_point: PricePoint,
    equity: float,
    reason: ExitReason,
) -> BacktestTrade:
    pnl_pct = pnl_percent(exit_point.price, entry_price)
    return BacktestTrade(
        entry_timestamp=entry_timestamp,
        exit_timestamp=exit_point.timestamp,
        entry_price=entry_price,
        exit_price=exit_point.price,
        pnl_percent=pnl_pct,
        pnl_eth=equity * (pnl_pct / 100),
        outcome=TradeOutcome.WIN if pnl_pct >= 0 else TradeOutcome.LOSS,
        exit_reason=reason,
    )


def simulate(points: List[PricePoint], params: StrategyParams) -> BacktestResult:
    """
    Replay a normalized price series once.

    Equity compounds trade by trade: each exit's ETH P&L is taken on the
    equity at that moment. Short series return an empty result with the
    price history still populated.
    """
    price_history = sample_for_display(points, settings.price_history_max_points)

    if len(points) <= min_points_required(params):
        return BacktestResult(price_history=price_history, final_equity=params.position_size_eth)

    trades: List[BacktestTrade] = []
    equity = params.position_size_eth
    equity_curve: List[EquityPoint] = [EquityPoint(points[0].timestamp, equity)]

    entry_price: Optional[float] = None
    entry_timestamp = 0

    for i in range(params.lookback_trades, len(points)):
        current = points[i]

        if entry_price is None:
            ref = reference_price(points, i, params.lookback_trades)
            if should_enter(params, current.price, ref):
                entry_price = current.price
                entry_timestamp = current.timestamp
        else:
            signal = should_exit(params, current.price, entry_price)
            if signal:
                trade = _close_trade(entry_price, entry_timestamp, current, equity, signal.reason)
                trades.append(trade)
                equity += trade.pnl_eth
                entry_price = None

        equity_curve.append(EquityPoint(current.timestamp, equity))

    # Never leave a position dangling
    if entry_price is not None:
        trade = _close_trade(entry_price, entry_timestamp, points[-1], equity, ExitReason.END_OF_DATA)
        trades.append(trade)
        equity += trade.pnl_eth

    metrics = compute_metrics(trades, equity_curve, params.position_size_eth)

    return BacktestResult(
        total_trades=metrics.total_trades,
        winning_trades=metrics.winning_trades,
        losing_trades=metrics.losing_trades,
        win_rate=metrics.win_rate,
        total_pnl_percent=metrics.total_pnl_percent,
        total_pnl_eth=metrics.total_pnl_eth,
        max_drawdown_percent=metrics.max_drawdown_percent,
        sharpe_ratio=metrics.sharpe_ratio,
        trades=trades,
        equity_curve=equity_curve,
        price_history=price_history,
        final_equity=equity,
    )


async def run_backtest(
    market_id: str,
    params: StrategyParams,
    source: Optional[MarketDataSource] = None,
) -> BacktestResult:
    """Fetch a market's history (oldest first) and simulate it."""
    if source is None:
        from datafeeds.subgraph_client import SubgraphClient
        source = SubgraphClient()

    raw_trades = await source.fetch_trades(market_id, settings.backtest_trade_limit, "asc")
    points = normalize_trades(raw_trades)

    if len(points) <= min_points_required(params):
        logger.info(
            "[BACKTEST] %s: %d usable points, need > %d; returning empty result",
            market_id, len(points), min_points_required(params),
        )

    result = simulate(points, params)
    logger.info(
        "[BACKTEST] %s %s: %d trades, win rate %.1f%%, P&L %.6f ETH (%.2f%%), max DD %.2f%%",
        market_id,
        params.to_dict()["entryType"],
        result.total_trades,
        result.win_rate,
        result.total_pnl_eth,
        result.total_pnl_percent,
        result.max_drawdown_percent,
    )
    return result
