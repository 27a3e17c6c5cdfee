"""Live execution ledger and session result models."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from core.helpers.serialization import to_jsonable


class Side(str, Enum):
    BUY = "buy"
    SELL = "sell"


class TradeStatus(str, Enum):
    CONFIRMED = "confirmed"
    FAILED = "failed"


class SessionStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TxReceipt:
    """Confirmation returned by a venue once a transaction is mined."""
    tx_hash: str
    status: str = "success"
    amount_out: Optional[int] = None   # Realized output in base units, if known


@dataclass(frozen=True)
class LiveExecutedTrade:
    """One on-chain buy or sell attempt. Failed attempts are recorded too."""
    side: Side
    eth_amount: float
    token_amount: float
    price: float
    status: TradeStatus
    trade_index: int = 0          # 1-based planned trade number
    tx_hash: Optional[str] = None
    pnl_percent: Optional[float] = None   # Sell only
    pnl_eth: Optional[float] = None       # Sell only
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_confirmed(self) -> bool:
        return self.status == TradeStatus.CONFIRMED

    @classmethod
    def failed(cls, side: Side, trade_index: int) -> "LiveExecutedTrade":
        return cls(
            side=side,
            eth_amount=0.0,
            token_amount=0.0,
            price=0.0,
            status=TradeStatus.FAILED,
            trade_index=trade_index,
        )

    def to_dict(self) -> dict:
        return to_jsonable(asdict(self))


@dataclass(frozen=True)
class LiveStrategyResult:
    total_pnl_eth: float = 0.0
    total_pnl_percent: float = 0.0
    total_volume_eth: float = 0.0
    trades_executed: int = 0
    buys: int = 0
    sells: int = 0
    wins: int = 0
    losses: int = 0

    @classmethod
    def from_trades(cls, trades: Iterable[LiveExecutedTrade]) -> "LiveStrategyResult":
        """Aggregate confirmed trades; failed attempts only appear in the ledger."""
        total_buy_eth = 0.0
        total_sell_eth = 0.0
        buys = sells = wins = losses = 0

        for trade in trades:
            if not trade.is_confirmed:
                continue
            if trade.side == Side.BUY:
                buys += 1
                total_buy_eth += trade.eth_amount
            else:
                sells += 1
                total_sell_eth += trade.eth_amount
                if (trade.pnl_eth or 0.0) >= 0:
                    wins += 1
                else:
                    losses += 1

        total_pnl_eth = total_sell_eth - total_buy_eth
        return cls(
            total_pnl_eth=total_pnl_eth,
            total_pnl_percent=(total_pnl_eth / total_buy_eth * 100) if total_buy_eth > 0 else 0.0,
            total_volume_eth=total_buy_eth + total_sell_eth,
            trades_executed=buys + sells,
            buys=buys,
            sells=sells,
            wins=wins,
            losses=losses,
        )

    def to_dict(self) -> dict:
        return asdict(self)
