"""
Dashboard module - terminal reports for backtests and live sessions.

Built with Rich; each panel is a separate renderer.
"""

from dashboard.panels import (
    render_backtest_summary,
    render_backtest_trades,
    render_live_result,
    render_live_trade,
)

__all__ = [
    "render_backtest_summary",
    "render_backtest_trades",
    "render_live_result",
    "render_live_trade",
]
