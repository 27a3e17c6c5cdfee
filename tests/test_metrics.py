"""Performance metric tests."""

import pytest

from core.models import BacktestTrade, EquityPoint, ExitReason, TradeOutcome
from logic.metrics import compute_metrics, max_drawdown, sharpe_ratio


def _trade(pnl_pct: float, pnl_eth: float) -> BacktestTrade:
    return BacktestTrade(
        entry_timestamp=1,
        exit_timestamp=2,
        entry_price=1.0,
        exit_price=1.0 + pnl_pct / 100,
        pnl_percent=pnl_pct,
        pnl_eth=pnl_eth,
        outcome=TradeOutcome.WIN if pnl_pct >= 0 else TradeOutcome.LOSS,
        exit_reason=ExitReason.TAKE_PROFIT if pnl_pct >= 0 else ExitReason.STOP_LOSS,
    )


class TestMaxDrawdown:

    def test_empty(self):
        assert max_drawdown([], 1.0) == 0.0

    def test_monotonic_rise_has_no_drawdown(self):
        assert max_drawdown([1.0, 1.1, 1.2], 1.0) == 0.0

    def test_peak_to_trough(self):
        assert max_drawdown([1.0, 1.2, 0.9, 1.3, 1.1], 1.0) == pytest.approx(25.0)

    def test_peak_seeded_with_initial(self):
        # Curve never revisits the initial capital
        assert max_drawdown([0.8, 0.9], 1.0) == pytest.approx(20.0)


class TestSharpe:

    def test_single_return_uses_unit_std(self):
        assert sharpe_ratio([12.0]) == pytest.approx(12.0)

    def test_zero_dispersion(self):
        assert sharpe_ratio([5.0, 5.0, 5.0]) == 0.0

    def test_sample_std(self):
        # mean 2, sample std sqrt(2)
        returns = [1.0, 3.0]
        assert sharpe_ratio(returns) == pytest.approx(2.0 / (2 ** 0.5))

    def test_empty(self):
        assert sharpe_ratio([]) == 0.0


class TestComputeMetrics:

    def test_counts_and_rates(self):
        trades = [_trade(20, 0.02), _trade(-10, -0.012), _trade(0, 0.0)]
        curve = [EquityPoint(0, 0.1), EquityPoint(1, 0.12), EquityPoint(2, 0.108), EquityPoint(3, 0.108)]
        metrics = compute_metrics(trades, curve, 0.1)

        assert metrics.total_trades == 3
        assert metrics.winning_trades == 2  # zero P&L counts as a win
        assert metrics.losing_trades == 1
        assert metrics.win_rate == pytest.approx(200 / 3)
        assert metrics.total_pnl_eth == pytest.approx(0.008)
        assert metrics.total_pnl_percent == pytest.approx(8.0)
        assert metrics.max_drawdown_percent == pytest.approx(10.0)

    def test_no_trades(self):
        metrics = compute_metrics([], [EquityPoint(0, 0.1)], 0.1)
        assert metrics.total_trades == 0
        assert metrics.win_rate == 0.0
        assert metrics.sharpe_ratio == 0.0
        assert metrics.max_drawdown_percent == 0.0
