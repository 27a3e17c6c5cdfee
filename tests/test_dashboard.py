"""Report panel and CLI rendering tests."""

import json

import pytest
from rich.console import Console

from conftest import make_trades
from core.models import CurveInfo, LiveExecutedTrade, LiveStrategyResult, Side, StrategyParams, TradeStatus
from dashboard import (
    render_backtest_summary,
    render_backtest_trades,
    render_live_result,
    render_live_trade,
)
from datafeeds.normalizer import normalize_trades
from execution.strategy_executor import StrategyExecutor
from logic.backtest import simulate

PRICES = [1.1] * 3 + [1.0] + [1.05] * 5 + [1.2] * 5


def _render(renderable) -> str:
    console = Console(record=True, width=120)
    console.print(renderable)
    return console.export_text()


def _params() -> StrategyParams:
    return StrategyParams.from_dict({"lookbackTrades": 3, "takeProfitPercent": 15})


def test_backtest_panels():
    result = simulate(normalize_trades(make_trades(PRICES)), _params())

    summary = _render(render_backtest_summary(result, _params(), "0xcurve"))
    assert "Backtest 0xcurve" in summary
    assert "price_dip" in summary
    assert "+0.020000 ETH" in summary

    ledger = _render(render_backtest_trades(result))
    assert "take_profit" in ledger
    assert "Trades (1)" in ledger


def test_empty_ledger():
    result = simulate([], _params())
    assert "no trades" in _render(render_backtest_trades(result))


def test_live_renderers():
    sell = LiveExecutedTrade(Side.SELL, 0.55, 1_000_000, 5.5e-7, TradeStatus.CONFIRMED, 2,
                             tx_hash="0x" + "ab" * 32, pnl_percent=10.0, pnl_eth=0.05)
    line = _render(render_live_trade(sell))
    assert "[2] SELL" in line
    assert "1,000,000 tokens" in line
    assert "+10.0%" in line

    panel = _render(render_live_result(LiveStrategyResult.from_trades([sell]), eth_usd=3000.0, elapsed_s=12.34))
    assert "Live session" in panel
    assert "1 / 0" in panel
    assert "+1,650.00 USD" in panel
    assert "12.3s" in panel


class _FakeClient:
    graduated = False

    async def fetch_trades(self, market_id, limit=1000, order="desc"):
        return make_trades(PRICES)

    async def fetch_curve(self, market_id):
        return CurveInfo.from_dict({"id": market_id, "symbol": "TST", "graduated": self.graduated})

    async def fetch_eth_usd_price(self):
        return 3000.0


class _GraduatedClient(_FakeClient):
    graduated = True


def test_cli_backtest_json(monkeypatch, capsys):
    import run

    monkeypatch.setattr(run, "SubgraphClient", _FakeClient)
    monkeypatch.setattr("sys.argv", ["curvetrader", "backtest", "0xcurve",
                                     "--lookback", "3", "--take-profit", "15", "--json"])
    with pytest.raises(SystemExit) as exit_info:
        run.main()

    assert exit_info.value.code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["params"]["lookbackTrades"] == 3
    assert payload["result"]["total_trades"] == 1
    assert payload["result"]["trades"][0]["exitReason"] == "take_profit"


def test_cli_paper_session(monkeypatch):
    import run

    monkeypatch.setattr(run, "SubgraphClient", _FakeClient)
    monkeypatch.setattr(run, "StrategyExecutor", lambda: StrategyExecutor(
        hold_fraction=0, min_hold_seconds=0, pacing_fraction=0, min_pacing_seconds=0,
    ))
    monkeypatch.setattr("sys.argv", ["curvetrader", "paper", "0xcurve", "--lookback", "3",
                                     "--take-profit", "15", "--funding", "0.2", "--duration-s", "0"])
    with pytest.raises(SystemExit) as exit_info:
        run.main()
    assert exit_info.value.code == 0


def test_cli_paper_refuses_graduated_curve(monkeypatch, capsys):
    import run

    monkeypatch.setattr(run, "SubgraphClient", _GraduatedClient)
    monkeypatch.setattr("sys.argv", ["curvetrader", "paper", "0xcurve",
                                     "--funding", "0.2", "--duration-s", "0"])
    with pytest.raises(SystemExit) as exit_info:
        run.main()
    assert exit_info.value.code == 1
    assert "graduated" in capsys.readouterr().out
