"""
Report panels - rich renderables for backtest and live results.
"""

from typing import Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.models import (
    BacktestResult,
    LiveExecutedTrade,
    LiveStrategyResult,
    Side,
    StrategyParams,
)


def _pnl_style(value: float) -> str:
    return "green" if value >= 0 else "red"


def render_backtest_summary(result: BacktestResult, params: StrategyParams, market_id: str = "") -> Panel:
    """Headline metrics for a backtest run."""
    table = Table(box=None, padding=(0, 1), show_header=False)
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")

    table.add_row("Strategy", str(params.to_dict()["entryType"]))
    table.add_row("Trades", str(result.total_trades))
    table.add_row("Win rate", f"{result.win_rate:.1f}% ({result.winning_trades}W / {result.losing_trades}L)")
    table.add_row(
        "Total P&L",
        Text(f"{result.total_pnl_eth:+.6f} ETH ({result.total_pnl_percent:+.2f}%)",
             style=_pnl_style(result.total_pnl_eth)),
    )
    table.add_row("Final equity", f"{result.final_equity:.6f} ETH")
    table.add_row("Max drawdown", f"{result.max_drawdown_percent:.2f}%")
    table.add_row("Sharpe", f"{result.sharpe_ratio:.2f}")
    table.add_row("Price points", str(len(result.price_history)))

    title = f"Backtest {market_id}" if market_id else "Backtest"
    return Panel(table, title=title, border_style="cyan")


def render_backtest_trades(result: BacktestResult, limit: Optional[int] = 20) -> Panel:
    """Trade ledger, most recent last."""
    table = Table(box=None, padding=(0, 1), expand=True)
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Entry", justify="right")
    table.add_column("Exit", justify="right")
    table.add_column("P&L %", justify="right")
    table.add_column("P&L ETH", justify="right")
    table.add_column("Reason", style="yellow")

    trades = result.trades[-limit:] if limit else result.trades
    offset = len(result.trades) - len(trades)
    for idx, trade in enumerate(trades, start=offset + 1):
        style = _pnl_style(trade.pnl_percent)
        table.add_row(
            str(idx),
            f"{trade.entry_price:.10g}",
            f"{trade.exit_price:.10g}",
            Text(f"{trade.pnl_percent:+.2f}", style=style),
            Text(f"{trade.pnl_eth:+.6f}", style=style),
            trade.exit_reason.value,
        )

    if not result.trades:
        table.add_row("", "", "", "", "", "no trades")
    return Panel(table, title=f"Trades ({result.total_trades})", border_style="blue")


def render_live_trade(trade: LiveExecutedTrade) -> Text:
    """One-line event for a confirmed live trade."""
    line = Text()
    side_style = "green" if trade.side == Side.BUY else "magenta"
    line.append(f"[{trade.trade_index}] ", style="dim")
    line.append(trade.side.value.upper(), style=f"bold {side_style}")
    line.append(f" {trade.token_amount:,.0f} tokens for {trade.eth_amount:.6f} ETH")
    if trade.pnl_eth is not None:
        line.append(f" ({trade.pnl_percent:+.1f}%)", style=_pnl_style(trade.pnl_eth))
    if trade.tx_hash:
        line.append(f" {trade.tx_hash[:10]}", style="dim")
    return line


def render_live_result(
    result: LiveStrategyResult,
    eth_usd: Optional[float] = None,
    elapsed_s: Optional[float] = None,
) -> Panel:
    table = Table(box=None, padding=(0, 1), show_header=False)
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    table.add_row(
        "P&L",
        Text(f"{result.total_pnl_eth:+.6f} ETH ({result.total_pnl_percent:+.2f}%)",
             style=_pnl_style(result.total_pnl_eth)),
    )
    if eth_usd:
        table.add_row("P&L (USD)", f"{result.total_pnl_eth * eth_usd:+,.2f} USD (ETH at {eth_usd:,.0f} USD)")
    table.add_row("Volume", f"{result.total_volume_eth:.6f} ETH")
    table.add_row("Executed", f"{result.trades_executed} ({result.buys} buys / {result.sells} sells)")
    table.add_row("Wins / losses", f"{result.wins} / {result.losses}")
    if elapsed_s is not None:
        table.add_row("Elapsed", f"{elapsed_s:.1f}s")
    return Panel(table, title="Live session", border_style="green")
