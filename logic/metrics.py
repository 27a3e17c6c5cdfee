"""Performance metrics over a completed backtest ledger."""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from core.models import BacktestTrade, EquityPoint


@dataclass(frozen=True)
class PerformanceMetrics:
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float
    total_pnl_eth: float
    total_pnl_percent: float
    max_drawdown_percent: float
    sharpe_ratio: float


def max_drawdown(values: Sequence[float], initial: float) -> float:
    """Largest peak-to-trough drop in percent, with the peak seeded at `initial`."""
    if len(values) == 0:
        return 0.0
    equity = np.asarray(values, dtype=float)
    peaks = np.maximum.accumulate(np.maximum(equity, initial))
    with np.errstate(divide="ignore", invalid="ignore"):
        drawdowns = np.where(peaks > 0, (peaks - equity) / peaks * 100, 0.0)
    return max(0.0, float(drawdowns.max()))


def sharpe_ratio(returns: Sequence[float]) -> float:
    """Mean per-trade return over its sample standard deviation.

    Fewer than two returns: std defaults to 1, so the ratio is the mean.
    Zero dispersion: ratio is 0.
    """
    if len(returns) == 0:
        return 0.0
    values = np.asarray(returns, dtype=float)
    mean = float(values.mean())
    std = float(values.std(ddof=1)) if len(values) > 1 else 1.0
    return mean / std if std > 0 else 0.0


def compute_metrics(
    trades: List[BacktestTrade],
    equity_curve: List[EquityPoint],
    position_size_eth: float,
) -> PerformanceMetrics:
    wins = sum(1 for t in trades if t.is_win)
    losses = len(trades) - wins

    total_pnl_eth = 0.0
    for t in trades:
        total_pnl_eth += t.pnl_eth

    # Normalized to the initial capital unit, not compounded equity
    total_pnl_percent = (total_pnl_eth / position_size_eth * 100) if position_size_eth else 0.0

    return PerformanceMetrics(
        total_trades=len(trades),
        winning_trades=wins,
        losing_trades=losses,
        win_rate=(wins / len(trades) * 100) if trades else 0.0,
        total_pnl_eth=total_pnl_eth,
        total_pnl_percent=total_pnl_percent,
        max_drawdown_percent=max_drawdown([p.equity for p in equity_curve], position_size_eth),
        sharpe_ratio=sharpe_ratio([t.pnl_percent for t in trades]),
    )
