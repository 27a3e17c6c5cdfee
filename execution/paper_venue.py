"""Paper trade venue: an in-memory constant-product bonding curve."""

import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional

from core.helpers import from_base_units, to_base_units
from core.logging_utils import get_logger
from core.models import TxReceipt
from execution.order_utils import VenueError, deadline_from_now

logger = get_logger(__name__)

PAPER_CURVE_ADDRESS = "0xpaper000000000000000000000000000000curve"


@dataclass
class _PendingTx:
    receipt: Optional[TxReceipt] = None
    error: Optional[str] = None


class PaperVenue:
    """Simulated venue for paper runs and tests.

    Transactions settle at submission; ``await_confirmation`` returns the
    receipt or raises ``VenueError`` for a reverted transaction, the way a
    chain client reports a mined revert.
    """

    def __init__(
        self,
        wallet: str,
        virtual_eth_reserve: float = 1.5,
        virtual_token_reserve: float = 1_073_000_000.0,
        fee_bps: int = 0,
        wallet_eth: Optional[float] = None,
        confirmation_delay_s: float = 0.0,
    ):
        self.wallet = wallet
        self.eth_reserve = to_base_units(virtual_eth_reserve)
        self.token_reserve = to_base_units(virtual_token_reserve)
        self.fee_bps = fee_bps
        self.wallet_eth = to_base_units(wallet_eth) if wallet_eth is not None else None
        self.confirmation_delay_s = confirmation_delay_s
        self.graduated = False
        self.balances: Dict[str, int] = {}
        self.allowances: Dict[tuple, int] = {}
        self.transactions: List[dict] = []
        self._pending: Dict[str, _PendingTx] = {}
        self._nonce = 0

    @classmethod
    def seeded_at_price(cls, wallet: str, price_eth: float, virtual_eth_reserve: float = 1.5, **kwargs) -> "PaperVenue":
        """Curve whose spot price equals `price_eth` (ETH per token)."""
        if price_eth <= 0:
            raise ValueError(f"price_eth must be positive, got {price_eth}")
        return cls(
            wallet,
            virtual_eth_reserve=virtual_eth_reserve,
            virtual_token_reserve=virtual_eth_reserve / price_eth,
            **kwargs,
        )

    @property
    def address(self) -> str:
        return PAPER_CURVE_ADDRESS

    @property
    def spot_price(self) -> float:
        return from_base_units(self.eth_reserve) / from_base_units(self.token_reserve)

    # Curve math

    def _net_of_fee(self, amount: int) -> int:
        return amount * (10_000 - self.fee_bps) // 10_000

    def _quote_buy(self, eth_in: int) -> int:
        if eth_in <= 0 or self.graduated:
            return 0
        k = self.eth_reserve * self.token_reserve
        new_eth = self.eth_reserve + self._net_of_fee(eth_in)
        new_tokens = -(-k // new_eth)  # ceil
        return max(0, self.token_reserve - new_tokens)

    def _gross_sell(self, tokens_in: int) -> int:
        if tokens_in <= 0:
            return 0
        k = self.eth_reserve * self.token_reserve
        new_tokens = self.token_reserve + tokens_in
        new_eth = -(-k // new_tokens)
        return max(0, self.eth_reserve - new_eth)

    def _quote_sell(self, tokens_in: int) -> int:
        return self._net_of_fee(self._gross_sell(tokens_in))

    # Read-only

    async def simulate_buy(self, eth_in: int) -> int:
        return self._quote_buy(eth_in)

    async def get_eth_for_tokens(self, tokens_in: int) -> int:
        return self._quote_sell(tokens_in)

    async def balance_of(self, address: str) -> int:
        return self.balances.get(address, 0)

    async def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)

    # Transactions

    def _submit(self, kind: str, settle) -> str:
        self._nonce += 1
        tx_hash = f"0x{self._nonce:064x}"
        pending = _PendingTx()
        try:
            amount_out = settle()
            pending.receipt = TxReceipt(tx_hash=tx_hash, amount_out=amount_out)
        except VenueError as e:
            pending.error = str(e)
            logger.info("[PAPER] %s %s reverted: %s", kind, tx_hash[:10], e)
        self._pending[tx_hash] = pending
        self.transactions.append({"hash": tx_hash, "kind": kind, "reverted": pending.error is not None})
        return tx_hash

    async def buy(self, eth_in: int, min_tokens_out: int, deadline: int) -> str:
        def settle() -> int:
            if deadline < deadline_from_now(0):
                raise VenueError("deadline expired")
            if self.graduated:
                raise VenueError("curve graduated")
            if self.wallet_eth is not None and eth_in > self.wallet_eth:
                raise VenueError("insufficient ETH balance")
            tokens_out = self._quote_buy(eth_in)
            if tokens_out < min_tokens_out or tokens_out <= 0:
                raise VenueError("slippage exceeded")
            self.eth_reserve += self._net_of_fee(eth_in)
            self.token_reserve -= tokens_out
            if self.wallet_eth is not None:
                self.wallet_eth -= eth_in
            self.balances[self.wallet] = self.balances.get(self.wallet, 0) + tokens_out
            return tokens_out

        return self._submit("buy", settle)

    async def sell(self, tokens_in: int, min_eth_out: int, deadline: int) -> str:
        def settle() -> int:
            if deadline < deadline_from_now(0):
                raise VenueError("deadline expired")
            if self.balances.get(self.wallet, 0) < tokens_in:
                raise VenueError("insufficient token balance")
            if self.allowances.get((self.wallet, self.address), 0) < tokens_in:
                raise VenueError("insufficient allowance")
            eth_out = self._quote_sell(tokens_in)
            if eth_out < min_eth_out:
                raise VenueError("slippage exceeded")
            gross = self._gross_sell(tokens_in)
            self.token_reserve += tokens_in
            self.eth_reserve -= gross
            self.balances[self.wallet] -= tokens_in
            self.allowances[(self.wallet, self.address)] -= tokens_in
            if self.wallet_eth is not None:
                self.wallet_eth += eth_out
            return eth_out

        return self._submit("sell", settle)

    async def approve(self, spender: str, amount: int) -> str:
        def settle() -> None:
            self.allowances[(self.wallet, spender)] = amount
            return None

        return self._submit("approve", settle)

    async def await_confirmation(self, tx_handle: str) -> TxReceipt:
        if self.confirmation_delay_s > 0:
            await asyncio.sleep(self.confirmation_delay_s)
        pending = self._pending.get(tx_handle)
        if pending is None:
            raise VenueError(f"unknown transaction {tx_handle}")
        if pending.error:
            raise VenueError(f"transaction {tx_handle[:10]} reverted: {pending.error}")
        return pending.receipt

    def external_transfer(self, address: str, tokens: int) -> None:
        """Move tokens out of a wallet behind the engine's back."""
        self.balances[address] = max(0, self.balances.get(address, 0) - tokens)
