"""Engine configuration."""

from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

DEFAULT_SUBGRAPH_URL = (
    "https://api.goldsky.com/api/public/project_cmjjrebt3mxpt01rm9yi04vqq"
    "/subgraphs/pump-charts/v2/gn"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Market data
    subgraph_url: str = Field(default=DEFAULT_SUBGRAPH_URL, alias="SUBGRAPH_URL")
    subgraph_timeout_s: float = 15.0
    subgraph_max_retries: int = 3
    subgraph_rps: float = 4.0
    eth_usd_fallback: float = 2500.0  # Used when the bundle query fails

    # Backtest
    backtest_trade_limit: int = Field(default=1000, alias="BACKTEST_TRADE_LIMIT")
    min_history_padding: int = 10       # Need > lookback + padding points
    price_history_max_points: int = 1000

    # Live execution
    slippage_bps: int = Field(default=200, alias="SLIPPAGE_BPS")  # 2%
    deadline_seconds: int = 20 * 60
    hold_fraction: float = 0.6          # Share of a slot spent holding
    min_hold_seconds: float = 5.0
    pacing_fraction: float = 0.3        # Gap before the next trade's buy
    min_pacing_seconds: float = 2.0

    # Default strategy parameters
    default_entry_type: Literal["price_dip", "momentum", "mean_reversion", "threshold"] = "price_dip"
    default_entry_threshold_pct: float = -5.0
    default_lookback_trades: int = 20
    default_take_profit_pct: float = 20.0
    default_stop_loss_pct: float = -10.0
    default_position_size_eth: float = 0.1

    def default_strategy_params(self):
        """StrategyParams built from the configured defaults."""
        from core.models.strategy import StrategyParams

        return StrategyParams.from_dict({})


settings = Settings()
