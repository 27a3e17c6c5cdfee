"""Turn raw market trades into a clean, ordered price series."""

from __future__ import annotations

from typing import Iterable, List

from core.helpers import finite_float, parse_timestamp
from core.logging_utils import get_logger
from core.models import MarketTrade, PricePoint

logger = get_logger(__name__)


def normalize_trades(trades: Iterable[MarketTrade]) -> List[PricePoint]:
    """
    Convert trade records to price points.

    Drops records with a non-positive or non-finite price or an unparseable
    timestamp, de-duplicates repeated records and returns the series sorted
    oldest to newest. Records sharing a timestamp keep their input order.
    """
    points: List[PricePoint] = []
    seen: set = set()
    dropped = 0

    for trade in trades:
        price = finite_float(trade.price_eth, default=0.0)
        timestamp = parse_timestamp(trade.timestamp)
        if price <= 0 or timestamp is None:
            dropped += 1
            continue

        key = trade.id or (trade.tx_hash, timestamp, price)
        if key in seen:
            dropped += 1
            continue
        seen.add(key)
        points.append(PricePoint(timestamp=timestamp, price=price))

    if dropped:
        logger.debug("[NORMALIZE] Dropped %d unusable/duplicate trades", dropped)

    points.sort(key=lambda p: p.timestamp)
    return points


def sample_for_display(points: List[PricePoint], max_points: int) -> List[PricePoint]:
    """Evenly down-sample, always keeping the first and last point."""
    if max_points <= 0 or len(points) <= max_points:
        return list(points)
    if max_points == 1:
        return [points[-1]]

    step = (len(points) - 1) / (max_points - 1)
    return [points[round(i * step)] for i in range(max_points)]
