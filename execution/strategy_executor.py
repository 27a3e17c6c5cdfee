"""Live strategy executor: replays a backtest plan against a trade venue.

Each planned trade becomes one buy -> hold -> sell cycle sized at
``funding / n`` and paced across ``duration / n`` of wall-clock time. Cycles run
strictly one after another. Cancellation stops new cycles and cuts waits short,
but a confirmed buy is always followed by a sell attempt.
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from core.config import settings
from core.events import SessionEventBus
from core.helpers import from_base_units, to_base_units
from core.logging_utils import get_logger
from core.models import (
    BacktestTrade,
    LiveExecutedTrade,
    LiveStrategyResult,
    SessionStatus,
    Side,
    TradeStatus,
)
from core.trading_interfaces import TradeVenue
from execution.order_utils import (
    EmptyPlanError,
    SessionAlreadyRunningError,
    VenueError,
    deadline_from_now,
    describe_error,
    implied_price,
    min_amount_out,
)

logger = get_logger(__name__)


class LiveSession:
    """Handle for one live run, owned by whoever started it."""

    def __init__(
        self,
        plan: Sequence[BacktestTrade],
        funding_eth: float,
        duration_ms: float,
        address: str,
        events: SessionEventBus,
    ):
        self.session_id = uuid.uuid4().hex
        self.plan: List[BacktestTrade] = list(plan)
        self.funding_eth = funding_eth
        self.duration_ms = duration_ms
        self.address = address
        self.events = events
        self.status = SessionStatus.RUNNING
        self.trades: List[LiveExecutedTrade] = []
        self.started_at = datetime.now(timezone.utc)
        self.finished_at: Optional[datetime] = None
        self._cancel_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def planned_trades(self) -> int:
        return len(self.plan)

    @property
    def capital_per_trade_eth(self) -> float:
        return self.funding_eth / self.planned_trades

    @property
    def slot_seconds(self) -> float:
        return self.duration_ms / 1000 / self.planned_trades

    @property
    def is_running(self) -> bool:
        return self.status == SessionStatus.RUNNING

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def elapsed_seconds(self) -> float:
        end = self.finished_at or datetime.now(timezone.utc)
        return (end - self.started_at).total_seconds()

    @property
    def result(self) -> LiveStrategyResult:
        return LiveStrategyResult.from_trades(self.trades)

    def cancel(self) -> None:
        """Request a stop; in-flight chain calls and open positions still finish."""
        if self.is_running and not self.cancelled:
            logger.info("[EXEC] Session %s: cancellation requested", self.session_id[:8])
            self._cancel_event.set()

    async def wait(self) -> LiveStrategyResult:
        if self._task is not None:
            await self._task
        return self.result

    async def sleep(self, seconds: float) -> bool:
        """Wait up to `seconds`, returning early (True) on cancellation."""
        if self.cancelled:
            return True
        if seconds <= 0:
            return False
        try:
            await asyncio.wait_for(self._cancel_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    def record(self, trade: LiveExecutedTrade) -> None:
        self.trades.append(trade)
        if trade.is_confirmed:
            self.events.emit_trade_executed(trade)

    def _finish(self) -> None:
        self.status = SessionStatus.CANCELLED if self.cancelled else SessionStatus.COMPLETED
        self.finished_at = datetime.now(timezone.utc)


class StrategyExecutor:
    """Runs at most one live session at a time.

    Independent strategies use independent executors.
    """

    def __init__(
        self,
        slippage_bps: Optional[int] = None,
        deadline_seconds: Optional[int] = None,
        hold_fraction: Optional[float] = None,
        min_hold_seconds: Optional[float] = None,
        pacing_fraction: Optional[float] = None,
        min_pacing_seconds: Optional[float] = None,
    ):
        self.slippage_bps = settings.slippage_bps if slippage_bps is None else slippage_bps
        self.deadline_seconds = settings.deadline_seconds if deadline_seconds is None else deadline_seconds
        self.hold_fraction = settings.hold_fraction if hold_fraction is None else hold_fraction
        self.min_hold_seconds = settings.min_hold_seconds if min_hold_seconds is None else min_hold_seconds
        self.pacing_fraction = settings.pacing_fraction if pacing_fraction is None else pacing_fraction
        self.min_pacing_seconds = settings.min_pacing_seconds if min_pacing_seconds is None else min_pacing_seconds
        self._session: Optional[LiveSession] = None

    @property
    def is_running(self) -> bool:
        return self._session is not None and self._session.is_running

    @property
    def current_session(self) -> Optional[LiveSession]:
        return self._session

    def hold_seconds(self, slot_seconds: float) -> float:
        return max(slot_seconds * self.hold_fraction, self.min_hold_seconds)

    def pacing_seconds(self, slot_seconds: float) -> float:
        return max(slot_seconds * self.pacing_fraction, self.min_pacing_seconds)

    def start(
        self,
        plan: Sequence[BacktestTrade],
        funding_eth: float,
        duration_ms: float,
        venue: TradeVenue,
        address: str,
        events: Optional[SessionEventBus] = None,
    ) -> LiveSession:
        """Validate and schedule a session on the running event loop."""
        events = events or SessionEventBus()

        if self.is_running:
            message = "A strategy is already running"
            events.emit_error(message)
            raise SessionAlreadyRunningError(message)
        if not plan:
            message = "No trades to execute"
            events.emit_error(message)
            raise EmptyPlanError(message)
        if funding_eth <= 0:
            message = f"Funding must be positive, got {funding_eth}"
            events.emit_error(message)
            raise ValueError(message)
        if duration_ms < 0:
            message = f"Duration must be non-negative, got {duration_ms}"
            events.emit_error(message)
            raise ValueError(message)

        loop = asyncio.get_running_loop()
        session = LiveSession(plan, funding_eth, duration_ms, address, events)
        self._session = session
        session._task = loop.create_task(
            self._run(session, venue),
            name=f"live-session-{session.session_id[:8]}",
        )
        logger.info(
            "[EXEC] Session %s started: %d trades, %.6f ETH over %.0fs",
            session.session_id[:8], session.planned_trades, funding_eth, duration_ms / 1000,
        )
        return session

    def cancel(self, session: Optional[LiveSession] = None) -> None:
        target = session or self._session
        if target is not None:
            target.cancel()

    async def _run(self, session: LiveSession, venue: TradeVenue) -> LiveStrategyResult:
        try:
            await self._execute_plan(session, venue)
        finally:
            session._finish()
            if self._session is session:
                self._session = None

        result = session.result
        if session.status == SessionStatus.CANCELLED:
            session.events.emit_status_update(
                f"Strategy cancelled: {result.buys} buys, {result.sells} sells, "
                f"P&L {result.total_pnl_eth:+.6f} ETH"
            )
        else:
            session.events.emit_status_update(
                f"Strategy complete: {result.buys} buys, {result.sells} sells, "
                f"P&L {result.total_pnl_eth:+.6f} ETH"
            )
        session.events.emit_strategy_complete(result)
        return result

    async def _execute_plan(self, session: LiveSession, venue: TradeVenue) -> None:
        total = session.planned_trades
        slot_s = session.slot_seconds
        events = session.events

        events.emit_status_update(
            f"Starting strategy: {total} trades, {session.capital_per_trade_eth:.6f} ETH each"
        )

        for i in range(total):
            if session.cancelled:
                break
            trade_no = i + 1

            tokens_bought = await self._buy(session, venue, trade_no)
            if tokens_bought is None:
                continue  # Nothing to sell

            if await session.sleep(self.hold_seconds(slot_s)):
                events.emit_status_update(
                    f"Strategy stopped - selling remaining tokens from trade {trade_no}..."
                )

            await self._sell(session, venue, trade_no, tokens_bought)

            if i < total - 1 and not session.cancelled:
                await session.sleep(self.pacing_seconds(slot_s))

    async def _buy(self, session: LiveSession, venue: TradeVenue, trade_no: int) -> Optional[int]:
        """Returns tokens received (base units), or None when the buy failed."""
        capital_eth = session.capital_per_trade_eth
        events = session.events
        events.emit_status_update(
            f"Trade {trade_no}/{session.planned_trades}: Buying with {capital_eth:.6f} ETH..."
        )

        try:
            eth_in = to_base_units(capital_eth)
            tokens_quoted = await venue.simulate_buy(eth_in)
            if tokens_quoted <= 0:
                raise VenueError("simulateBuy returned 0 tokens - curve may be graduated")

            tx_handle = await venue.buy(
                eth_in,
                min_amount_out(tokens_quoted, self.slippage_bps),
                deadline_from_now(self.deadline_seconds),
            )
            receipt = await venue.await_confirmation(tx_handle)
        except Exception as e:
            logger.error("[EXEC] Trade %d buy failed: %s", trade_no, e)
            session.record(LiveExecutedTrade.failed(Side.BUY, trade_no))
            events.emit_error(f"Trade {trade_no} buy failed: {describe_error(e)}")
            return None

        tokens_received = receipt.amount_out if receipt.amount_out is not None else tokens_quoted
        token_amount = from_base_units(tokens_received)
        session.record(LiveExecutedTrade(
            side=Side.BUY,
            eth_amount=capital_eth,
            token_amount=token_amount,
            price=implied_price(eth_in, tokens_received),
            status=TradeStatus.CONFIRMED,
            trade_index=trade_no,
            tx_hash=receipt.tx_hash or tx_handle,
        ))
        events.emit_status_update(f"Trade {trade_no}: Bought {token_amount:,.0f} tokens")
        return tokens_received

    async def _sell(self, session: LiveSession, venue: TradeVenue, trade_no: int, tokens_bought: int) -> None:
        capital_eth = session.capital_per_trade_eth
        events = session.events

        try:
            # Fresh reads: balance and allowance can change outside this engine
            balance = await venue.balance_of(session.address)
            if balance <= 0:
                raise VenueError("no tokens to sell (balance is 0)")
            tokens_to_sell = min(tokens_bought, balance)

            eth_quoted = await venue.get_eth_for_tokens(tokens_to_sell)

            allowance = await venue.allowance(session.address, venue.address)
            if allowance < tokens_to_sell:
                events.emit_status_update(f"Trade {trade_no}: Approving token spend...")
                approve_handle = await venue.approve(venue.address, tokens_to_sell)
                await venue.await_confirmation(approve_handle)

            events.emit_status_update(
                f"Trade {trade_no}: Selling tokens for ~{from_base_units(eth_quoted):.6f} ETH..."
            )
            tx_handle = await venue.sell(
                tokens_to_sell,
                min_amount_out(eth_quoted, self.slippage_bps),
                deadline_from_now(self.deadline_seconds),
            )
            receipt = await venue.await_confirmation(tx_handle)
        except Exception as e:
            logger.error("[EXEC] Trade %d sell failed: %s", trade_no, e)
            session.record(LiveExecutedTrade.failed(Side.SELL, trade_no))
            events.emit_error(f"Trade {trade_no} sell failed: {describe_error(e)}")
            return

        eth_units = receipt.amount_out if receipt.amount_out is not None else eth_quoted
        eth_received = from_base_units(eth_units)
        pnl_eth = eth_received - capital_eth
        pnl_pct = pnl_eth / capital_eth * 100

        session.record(LiveExecutedTrade(
            side=Side.SELL,
            eth_amount=eth_received,
            token_amount=from_base_units(tokens_to_sell),
            price=implied_price(eth_units, tokens_to_sell),
            status=TradeStatus.CONFIRMED,
            trade_index=trade_no,
            tx_hash=receipt.tx_hash or tx_handle,
            pnl_percent=pnl_pct,
            pnl_eth=pnl_eth,
        ))
        events.emit_status_update(
            f"Trade {trade_no}: Sold for {eth_received:.6f} ETH ({pnl_pct:+.1f}%)"
        )
