"""Market data records and normalized price points."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PricePoint:
    timestamp: int   # Unix seconds
    price: float


@dataclass
class MarketTrade:
    """Raw trade record as served by the market-data subgraph."""
    id: str
    timestamp: str           # Unix seconds, as a string on the wire
    price_eth: str           # Decimal string
    side: str = ""           # "buy" | "sell"
    amount_eth: str = "0"
    amount_token: str = "0"
    trader: str = ""
    tx_hash: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "MarketTrade":
        return cls(
            id=str(data.get("id", "")),
            timestamp=str(data.get("timestamp", "")),
            price_eth=str(data.get("priceEth", data.get("price_eth", ""))),
            side=str(data.get("side", "")),
            amount_eth=str(data.get("amountEth", data.get("amount_eth", "0"))),
            amount_token=str(data.get("amountToken", data.get("amount_token", "0"))),
            trader=str(data.get("trader", "")),
            tx_hash=str(data.get("txHash", data.get("tx_hash", ""))),
        )


@dataclass
class CurveInfo:
    """Bonding-curve market metadata."""
    id: str
    token: str
    name: str
    symbol: str
    graduated: bool
    last_price_eth: float
    last_price_usd: float
    trade_count: int
    total_volume_eth: float
    last_trade_at: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CurveInfo":
        last_trade_at = data.get("lastTradeAt")
        return cls(
            id=str(data.get("id", "")),
            token=str(data.get("token", "")),
            name=str(data.get("name", "")),
            symbol=str(data.get("symbol", "")),
            graduated=bool(data.get("graduated", False)),
            last_price_eth=float(data.get("lastPriceEth") or 0),
            last_price_usd=float(data.get("lastPriceUsd") or 0),
            trade_count=int(data.get("tradeCount") or 0),
            total_volume_eth=float(data.get("totalVolumeEth") or 0),
            last_trade_at=int(last_trade_at) if last_trade_at else None,
        )
