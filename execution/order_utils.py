"""
Order helpers and error taxonomy for venue execution.
"""

import time
from typing import Optional

from core.helpers import apply_slippage, from_base_units


class OrderError(Exception):
    """Base exception for execution errors."""
    pass


class VenueError(OrderError):
    """A venue query, submission or confirmation failed (revert, RPC error)."""
    pass


class SessionAlreadyRunningError(OrderError):
    """Start requested while this executor already runs a session."""
    pass


class EmptyPlanError(OrderError, ValueError):
    """Start requested with a plan that has no trades."""
    pass


def deadline_from_now(seconds: int, now: Optional[float] = None) -> int:
    """Unix-seconds deadline for a submitted transaction."""
    return int(now if now is not None else time.time()) + int(seconds)


def min_amount_out(quoted: int, slippage_bps: int) -> int:
    """Slippage guard: smallest output accepted for a quoted amount."""
    return apply_slippage(quoted, slippage_bps)


def implied_price(eth_units: int, token_units: int) -> float:
    """ETH per token from two base-unit amounts."""
    if token_units <= 0:
        return 0.0
    return from_base_units(eth_units) / from_base_units(token_units)


def describe_error(error: BaseException) -> str:
    return str(error) or type(error).__name__
