"""Collaborator interfaces for market data and on-chain execution."""

from typing import List, Literal, Protocol

from core.models import MarketTrade, TxReceipt


class MarketDataSource(Protocol):
    """Serves ordered trade records for a market."""

    async def fetch_trades(
        self,
        market_id: str,
        limit: int = 1000,
        order: Literal["asc", "desc"] = "desc",
    ) -> List[MarketTrade]:
        ...


class TradeVenue(Protocol):
    """Bonding-curve style execution venue reached through a signing wallet.

    All quantities are integer base units (18 decimals). Submission methods
    return a transaction handle to pass to ``await_confirmation``, which raises
    when the transaction reverts or cannot be confirmed.
    """

    @property
    def address(self) -> str:
        """Venue contract address, used as the token spender."""
        ...

    async def simulate_buy(self, eth_in: int) -> int:
        ...

    async def buy(self, eth_in: int, min_tokens_out: int, deadline: int) -> str:
        ...

    async def sell(self, tokens_in: int, min_eth_out: int, deadline: int) -> str:
        ...

    async def get_eth_for_tokens(self, tokens_in: int) -> int:
        ...

    async def balance_of(self, address: str) -> int:
        ...

    async def allowance(self, owner: str, spender: str) -> int:
        ...

    async def approve(self, spender: str, amount: int) -> str:
        ...

    async def await_confirmation(self, tx_handle: str) -> TxReceipt:
        ...
