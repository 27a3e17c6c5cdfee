"""Entry/exit rule evaluation shared by backtests and live planning.

Pure functions only: no state, no I/O.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from core.models import EntryType, ExitReason, PricePoint, StrategyParams


@dataclass(frozen=True)
class ExitSignal:
    exit: bool
    reason: ExitReason


def pnl_percent(current_price: float, entry_price: float) -> float:
    return (current_price - entry_price) / entry_price * 100


def reference_price(points: Sequence[PricePoint], index: int, lookback: int) -> float:
    """Mean of the `lookback` prices immediately before `index`."""
    window = points[index - lookback:index]
    total = 0.0
    for point in window:
        total += point.price
    return total / len(window)


def should_enter(params: StrategyParams, current_price: float, reference: float) -> bool:
    change_percent = (current_price - reference) / reference * 100
    entry_type = params.entry_type

    if entry_type == EntryType.PRICE_DIP:
        return change_percent <= params.entry_threshold_percent
    if entry_type == EntryType.MOMENTUM:
        return change_percent >= params.entry_threshold_percent
    if entry_type == EntryType.MEAN_REVERSION:
        # Dip-buy for a bounce; same test as price_dip
        return change_percent <= params.entry_threshold_percent
    if entry_type == EntryType.THRESHOLD:
        return current_price >= reference * (1 + params.entry_threshold_percent / 100)

    # Unrecognized entry type: never enter
    return False


def should_exit(params: StrategyParams, current_price: float, entry_price: float) -> Optional[ExitSignal]:
    """Take-profit wins ties with stop-loss."""
    pnl = pnl_percent(current_price, entry_price)

    if pnl >= params.take_profit_percent:
        return ExitSignal(exit=True, reason=ExitReason.TAKE_PROFIT)
    if pnl <= params.stop_loss_percent:
        return ExitSignal(exit=True, reason=ExitReason.STOP_LOSS)
    return None
