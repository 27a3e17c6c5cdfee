#!/usr/bin/env python3
"""
CurveTrader - backtest and paper-execute bonding-curve strategies.

Usage:
    python run.py backtest <market_id>                  # Backtest with default params
    python run.py backtest <market_id> --entry-type momentum --threshold 10
    python run.py backtest <market_id> --json           # Machine-readable output
    python run.py paper <market_id> --funding 0.5 --duration-s 600
    python run.py --help                                # Show all options
"""

import argparse
import asyncio
import json
import signal

from rich.console import Console
from rich.markup import escape

from core.config import settings
from core.events import SessionEventBus
from core.logging_utils import setup_logging
from core.models import StrategyParams
from dashboard import (
    render_backtest_summary,
    render_backtest_trades,
    render_live_result,
    render_live_trade,
)
from datafeeds.subgraph_client import SubgraphClient
from execution.paper_venue import PaperVenue
from execution.strategy_executor import StrategyExecutor
from logic.backtest import run_backtest

PAPER_WALLET = "0xpaper00000000000000000000000000000wallet"

console = Console()


def _add_strategy_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('market_id', help='Bonding-curve market (curve) id')
    parser.add_argument('--entry-type', default=None,
                        choices=['price_dip', 'momentum', 'mean_reversion', 'threshold'],
                        help=f'Entry predicate (default: {settings.default_entry_type})')
    parser.add_argument('--threshold', type=float, default=None,
                        help='Entry threshold percent, e.g. -5 or 10')
    parser.add_argument('--lookback', type=int, default=None,
                        help='Trades averaged for the reference price')
    parser.add_argument('--take-profit', type=float, default=None, help='Take-profit percent')
    parser.add_argument('--stop-loss', type=float, default=None, help='Stop-loss percent (negative)')
    parser.add_argument('--size', type=float, default=None, help='Simulated position size in ETH')


def _params_from_args(args: argparse.Namespace) -> StrategyParams:
    return StrategyParams.from_dict({
        "entry_type": args.entry_type,
        "entry_threshold_percent": args.threshold,
        "lookback_trades": args.lookback,
        "take_profit_percent": args.take_profit,
        "stop_loss_percent": args.stop_loss,
        "position_size_eth": args.size,
    })


async def _backtest(args: argparse.Namespace) -> int:
    params = _params_from_args(args)
    result = await run_backtest(args.market_id, params, SubgraphClient())

    if args.json:
        print(json.dumps({"params": params.to_dict(), "result": result.to_dict()}, indent=2))
        return 0

    console.print(render_backtest_summary(result, params, args.market_id))
    console.print(render_backtest_trades(result))
    return 0


async def _paper(args: argparse.Namespace) -> int:
    params = _params_from_args(args)
    client = SubgraphClient()

    curve = await client.fetch_curve(args.market_id)
    if curve is not None and curve.graduated:
        console.print(f"[red]{escape(curve.symbol or args.market_id)} has graduated off its curve; nothing to trade.[/red]")
        return 1

    result = await run_backtest(args.market_id, params, client)
    console.print(render_backtest_summary(result, params, args.market_id))

    if not result.trades or not result.price_history:
        console.print("[yellow]Backtest produced no trades; nothing to execute.[/yellow]")
        return 1

    venue = PaperVenue.seeded_at_price(
        PAPER_WALLET,
        result.price_history[-1].price,
        fee_bps=args.fee_bps,
    )
    events = SessionEventBus.from_callbacks(
        on_trade_executed=lambda trade: console.print(render_live_trade(trade)),
        on_status_update=lambda msg: console.print(f"[dim]{escape(msg)}[/dim]"),
        on_error=lambda msg: console.print(f"[red]{escape(msg)}[/red]"),
    )

    executor = StrategyExecutor()
    session = executor.start(
        result.trades,
        args.funding,
        args.duration_s * 1000,
        venue,
        PAPER_WALLET,
        events,
    )

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, session.cancel)
    except NotImplementedError:
        pass  # Windows event loops

    live_result = await session.wait()
    eth_usd = await client.fetch_eth_usd_price()
    console.print(render_live_result(live_result, eth_usd=eth_usd, elapsed_s=session.elapsed_seconds))
    return 0


def main():
    parser = argparse.ArgumentParser(
        prog='curvetrader',
        description='CurveTrader - bonding-curve strategy backtester and executor',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py backtest 0xabc... --entry-type price_dip --threshold -5
  python run.py paper 0xabc... --funding 0.2 --duration-s 300
"""
    )
    parser.add_argument('--log-level', default=None, help='Override LOG_LEVEL')
    sub = parser.add_subparsers(dest='command', required=True)

    bt = sub.add_parser('backtest', help='Run a historical backtest')
    _add_strategy_args(bt)
    bt.add_argument('--json', action='store_true', help='Print the result as JSON')

    paper = sub.add_parser('paper', help='Backtest, then execute the plan on a paper venue')
    _add_strategy_args(paper)
    paper.add_argument('--funding', type=float, required=True, help='Total ETH to deploy')
    paper.add_argument('--duration-s', type=float, required=True, help='Wall-clock duration in seconds')
    paper.add_argument('--fee-bps', type=int, default=100, help='Paper curve fee (default: 100)')

    args = parser.parse_args()
    setup_logging(args.log_level)

    handler = _backtest if args.command == 'backtest' else _paper
    raise SystemExit(asyncio.run(handler(args)))


if __name__ == "__main__":
    main()
