"""Backtest ledger and result models."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List

from core.helpers.serialization import to_jsonable
from core.models.price import PricePoint


class TradeOutcome(str, Enum):
    WIN = "win"
    LOSS = "loss"


class ExitReason(str, Enum):
    TAKE_PROFIT = "take_profit"
    STOP_LOSS = "stop_loss"
    END_OF_DATA = "end_of_data"


@dataclass(frozen=True)
class EquityPoint:
    timestamp: int
    equity: float


@dataclass(frozen=True)
class BacktestTrade:
    """One completed entry+exit cycle. Appended once, at exit."""
    entry_timestamp: int
    exit_timestamp: int
    entry_price: float
    exit_price: float
    pnl_percent: float
    pnl_eth: float
    outcome: TradeOutcome
    exit_reason: ExitReason

    @property
    def is_win(self) -> bool:
        return self.outcome == TradeOutcome.WIN

    def to_dict(self) -> dict:
        return {
            "entryTimestamp": self.entry_timestamp,
            "exitTimestamp": self.exit_timestamp,
            "entryPrice": self.entry_price,
            "exitPrice": self.exit_price,
            "pnlPercent": self.pnl_percent,
            "pnlEth": self.pnl_eth,
            "type": self.outcome.value,
            "exitReason": self.exit_reason.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BacktestTrade":
        """Accepts the wire form (camelCase, `type`) or snake_case keys."""
        def pick(wire: str, snake: str, default=None):
            return data.get(wire, data.get(snake, default))

        return cls(
            entry_timestamp=int(pick("entryTimestamp", "entry_timestamp", 0)),
            exit_timestamp=int(pick("exitTimestamp", "exit_timestamp", 0)),
            entry_price=float(pick("entryPrice", "entry_price", 0.0)),
            exit_price=float(pick("exitPrice", "exit_price", 0.0)),
            pnl_percent=float(pick("pnlPercent", "pnl_percent", 0.0)),
            pnl_eth=float(pick("pnlEth", "pnl_eth", 0.0)),
            outcome=TradeOutcome(pick("type", "outcome", "loss")),
            exit_reason=ExitReason(pick("exitReason", "exit_reason", "end_of_data")),
        )


@dataclass(frozen=True)
class BacktestResult:
    """Aggregate of one simulation run. Computed once, never updated."""
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    total_pnl_percent: float = 0.0
    total_pnl_eth: float = 0.0
    max_drawdown_percent: float = 0.0
    sharpe_ratio: float = 0.0
    trades: List[BacktestTrade] = field(default_factory=list)
    equity_curve: List[EquityPoint] = field(default_factory=list)
    price_history: List[PricePoint] = field(default_factory=list)
    final_equity: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.total_trades == 0

    def to_dict(self) -> dict:
        data = to_jsonable(asdict(self))
        data["trades"] = [t.to_dict() for t in self.trades]
        return data
