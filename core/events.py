"""Event channel for live strategy sessions.

The scheduler reports through four streams: executed trades, the terminal
result, status messages and non-fatal errors. Handlers run synchronously, in
registration order, at the point the scheduler emits.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from core.logging_utils import get_logger
from core.models import LiveExecutedTrade, LiveStrategyResult

logger = get_logger(__name__)


class SessionEventBus:
    """Minimal sync bus; a failing handler never breaks the execution loop."""

    def __init__(self):
        self._trade_handlers: List[Callable[[LiveExecutedTrade], None]] = []
        self._complete_handlers: List[Callable[[LiveStrategyResult], None]] = []
        self._status_handlers: List[Callable[[str], None]] = []
        self._error_handlers: List[Callable[[str], None]] = []

    @classmethod
    def from_callbacks(
        cls,
        on_trade_executed: Optional[Callable[[LiveExecutedTrade], None]] = None,
        on_strategy_complete: Optional[Callable[[LiveStrategyResult], None]] = None,
        on_status_update: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> "SessionEventBus":
        bus = cls()
        if on_trade_executed:
            bus.on_trade_executed(on_trade_executed)
        if on_strategy_complete:
            bus.on_strategy_complete(on_strategy_complete)
        if on_status_update:
            bus.on_status_update(on_status_update)
        if on_error:
            bus.on_error(on_error)
        return bus

    # Subscription helpers
    def on_trade_executed(self, handler: Callable[[LiveExecutedTrade], None]) -> None:
        self._trade_handlers.append(handler)

    def on_strategy_complete(self, handler: Callable[[LiveStrategyResult], None]) -> None:
        self._complete_handlers.append(handler)

    def on_status_update(self, handler: Callable[[str], None]) -> None:
        self._status_handlers.append(handler)

    def on_error(self, handler: Callable[[str], None]) -> None:
        self._error_handlers.append(handler)

    # Emitters
    def emit_trade_executed(self, trade: LiveExecutedTrade) -> None:
        self._dispatch(self._trade_handlers, trade, "trade")

    def emit_strategy_complete(self, result: LiveStrategyResult) -> None:
        self._dispatch(self._complete_handlers, result, "complete")

    def emit_status_update(self, message: str) -> None:
        logger.info("[EXEC] %s", message)
        self._dispatch(self._status_handlers, message, "status")

    def emit_error(self, message: str) -> None:
        logger.warning("[EXEC] %s", message)
        self._dispatch(self._error_handlers, message, "error")

    def _dispatch(self, handlers: list, payload, kind: str) -> None:
        for handler in list(handlers):
            try:
                handler(payload)
            except Exception as e:
                logger.warning("[EVENT] %s handler error: %s", kind, e)
                continue
