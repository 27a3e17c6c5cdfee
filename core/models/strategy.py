"""Strategy parameter model."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from core.config import settings


class EntryType(str, Enum):
    PRICE_DIP = "price_dip"
    MOMENTUM = "momentum"
    MEAN_REVERSION = "mean_reversion"
    THRESHOLD = "threshold"


# Wire (camelCase) key -> field name
_WIRE_KEYS = {
    "entryType": "entry_type",
    "entryThresholdPercent": "entry_threshold_percent",
    "lookbackTrades": "lookback_trades",
    "takeProfitPercent": "take_profit_percent",
    "stopLossPercent": "stop_loss_percent",
    "positionSizeEth": "position_size_eth",
}


def parse_entry_type(value: Any) -> Union[EntryType, str]:
    """Map a raw value onto EntryType; unrecognized values stay raw strings."""
    if isinstance(value, EntryType):
        return value
    try:
        return EntryType(str(value))
    except ValueError:
        return str(value)


@dataclass(frozen=True)
class StrategyParams:
    """Immutable strategy configuration passed into every engine operation."""
    entry_type: Union[EntryType, str]
    entry_threshold_percent: float
    lookback_trades: int
    take_profit_percent: float
    stop_loss_percent: float      # Negative, e.g. -10 for a 10% loss
    position_size_eth: float      # Simulation capital unit only

    def __post_init__(self):
        if self.lookback_trades < 1:
            raise ValueError(f"lookback_trades must be >= 1, got {self.lookback_trades}")

    @property
    def is_known_entry_type(self) -> bool:
        return isinstance(self.entry_type, EntryType)

    def to_dict(self) -> dict:
        entry_type = self.entry_type.value if isinstance(self.entry_type, EntryType) else self.entry_type
        return {
            "entryType": entry_type,
            "entryThresholdPercent": self.entry_threshold_percent,
            "lookbackTrades": self.lookback_trades,
            "takeProfitPercent": self.take_profit_percent,
            "stopLossPercent": self.stop_loss_percent,
            "positionSizeEth": self.position_size_eth,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StrategyParams":
        """Build from wire or snake_case keys, filling gaps from settings."""
        values = {
            "entry_type": settings.default_entry_type,
            "entry_threshold_percent": settings.default_entry_threshold_pct,
            "lookback_trades": settings.default_lookback_trades,
            "take_profit_percent": settings.default_take_profit_pct,
            "stop_loss_percent": settings.default_stop_loss_pct,
            "position_size_eth": settings.default_position_size_eth,
        }
        for key, value in (data or {}).items():
            name = _WIRE_KEYS.get(key, key)
            if name in values and value is not None:
                values[name] = value

        return cls(
            entry_type=parse_entry_type(values["entry_type"]),
            entry_threshold_percent=float(values["entry_threshold_percent"]),
            lookback_trades=int(values["lookback_trades"]),
            take_profit_percent=float(values["take_profit_percent"]),
            stop_loss_percent=float(values["stop_loss_percent"]),
            position_size_eth=float(values["position_size_eth"]),
        )
