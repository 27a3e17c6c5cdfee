"""Entry/exit rule tests."""

import pytest

from conftest import make_points
from core.models import ExitReason, StrategyParams
from logic.rules import pnl_percent, reference_price, should_enter, should_exit


def _params(entry_type="price_dip", threshold=-5.0, tp=20.0, sl=-10.0):
    return StrategyParams.from_dict({
        "entryType": entry_type,
        "entryThresholdPercent": threshold,
        "lookbackTrades": 3,
        "takeProfitPercent": tp,
        "stopLossPercent": sl,
        "positionSizeEth": 0.1,
    })


class TestReferencePrice:

    def test_mean_of_preceding_window(self):
        points = make_points([1.0, 2.0, 3.0, 4.0, 100.0])
        # Window for index 4 is prices 2,3,4; the current price is excluded
        assert reference_price(points, 4, 3) == pytest.approx(3.0)

    def test_window_starts_at_first_point(self):
        points = make_points([2.0, 4.0, 9.0])
        assert reference_price(points, 2, 2) == pytest.approx(3.0)


class TestShouldEnter:

    def test_price_dip_at_threshold(self):
        params = _params("price_dip", -5)
        assert should_enter(params, 0.95, 1.0)
        assert not should_enter(params, 0.96, 1.0)

    def test_momentum(self):
        params = _params("momentum", 10)
        assert should_enter(params, 1.10, 1.0)
        assert not should_enter(params, 1.05, 1.0)

    def test_mean_reversion_matches_dip(self):
        dip = _params("price_dip", -5)
        mr = _params("mean_reversion", -5)
        for price in (0.90, 0.95, 0.97, 1.05):
            assert should_enter(dip, price, 1.0) == should_enter(mr, price, 1.0)

    def test_threshold_uses_absolute_multiple(self):
        params = _params("threshold", 10)
        assert should_enter(params, 1.1, 1.0)
        assert not should_enter(params, 1.09, 1.0)

    def test_unknown_entry_type_never_enters(self):
        params = _params("moon_shot", -100)
        assert not should_enter(params, 0.01, 1.0)
        assert not should_enter(params, 100.0, 1.0)


class TestShouldExit:

    def test_take_profit(self):
        signal = should_exit(_params(tp=20), 1.25, 1.0)
        assert signal is not None
        assert signal.exit
        assert signal.reason == ExitReason.TAKE_PROFIT

    def test_stop_loss(self):
        signal = should_exit(_params(sl=-10), 0.85, 1.0)
        assert signal is not None
        assert signal.reason == ExitReason.STOP_LOSS

    def test_exact_threshold_follows_float_pnl(self):
        # (1.2 - 1.0) / 1.0 * 100 evaluates just under 20
        assert pnl_percent(1.2, 1.0) < 20
        assert should_exit(_params(tp=20), 1.2, 1.0) is None

    def test_hold_inside_band(self):
        assert should_exit(_params(), 1.05, 1.0) is None
        assert should_exit(_params(), 0.95, 1.0) is None

    def test_take_profit_checked_first(self):
        # Degenerate band where both conditions hold
        params = _params(tp=-20, sl=-10)
        signal = should_exit(params, 0.85, 1.0)
        assert signal.reason == ExitReason.TAKE_PROFIT

    def test_pnl_percent(self):
        assert pnl_percent(1.5, 1.0) == pytest.approx(50.0)
        assert pnl_percent(0.5, 1.0) == pytest.approx(-50.0)
