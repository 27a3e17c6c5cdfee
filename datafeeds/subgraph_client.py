"""Bonding-curve subgraph client: trade history, curve metadata, ETH/USD."""

from __future__ import annotations

import asyncio
import threading
import time
from typing import Any, Dict, List, Optional

import requests

from core.config import settings
from core.logging_utils import get_logger
from core.models import CurveInfo, MarketTrade

logger = get_logger(__name__)

CURVE_FIELDS = """
  id
  token
  name
  symbol
  graduated
  lastPriceEth
  lastPriceUsd
  lastTradeAt
  totalVolumeEth
  tradeCount
"""

TRADE_FIELDS = """
  id
  side
  amountEth
  amountToken
  priceEth
  trader
  timestamp
  txHash
"""

_ORDERS = ("asc", "desc")


class SubgraphError(Exception):
    """Subgraph request failed or returned no usable data."""
    pass


class _TransientStatus(SubgraphError):
    """Rate-limited or 5xx response; retried with backoff."""

    def __init__(self, status_code: int, reason: str):
        super().__init__(f"Subgraph request failed: {status_code} {reason}")
        self.status_code = status_code


def _is_transient(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class _TokenBucket:
    """Request rate limiter shared by the executor threads running queries."""

    def __init__(self, rps: float = 4.0, burst: float = 4.0):
        self.capacity = burst
        self.tokens = burst
        self.rps = rps
        self.last_refill = time.monotonic()
        self._lock = threading.Lock()

    def acquire(self, cost: float = 1.0) -> None:
        # Waiters queue on the lock so concurrent queries never overdraw
        with self._lock:
            now = time.monotonic()
            self.tokens = min(self.capacity, self.tokens + (now - self.last_refill) * self.rps)
            self.last_refill = now
            if self.tokens < cost:
                time.sleep((cost - self.tokens) / self.rps)
                self.tokens = cost
                self.last_refill = time.monotonic()
            self.tokens -= cost


class SubgraphClient:
    """GraphQL client; blocking HTTP runs in the loop's default executor."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = url or settings.subgraph_url
        self.timeout = timeout if timeout is not None else settings.subgraph_timeout_s
        self.max_retries = max(1, max_retries if max_retries is not None else settings.subgraph_max_retries)
        self.session = session or requests.Session()
        self._bucket = _TokenBucket(rps=settings.subgraph_rps, burst=settings.subgraph_rps)

    def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run a query synchronously.

        Transport errors, 429 and 5xx responses are retried with backoff; other
        HTTP errors and GraphQL `errors` fail at once.
        """
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                self._bucket.acquire()
                resp = self.session.post(
                    self.url,
                    json={"query": query, "variables": variables or {}},
                    timeout=self.timeout,
                )
                if _is_transient(resp.status_code):
                    raise _TransientStatus(resp.status_code, resp.reason)
                if not resp.ok:
                    raise SubgraphError(f"Subgraph request failed: {resp.status_code} {resp.reason}")
                payload = resp.json()
            except (requests.RequestException, _TransientStatus) as e:
                last_error = e
                if attempt < self.max_retries - 1:
                    rate_limited = isinstance(e, _TransientStatus) and e.status_code == 429
                    delay = min(30, 2 ** attempt) if rate_limited else 0.5 * (2 ** attempt)
                    logger.warning("[SUBGRAPH] Retry %s/%s in %.1fs: %s", attempt + 1, self.max_retries, delay, e)
                    time.sleep(delay)
                continue

            errors = payload.get("errors") or []
            if errors:
                # Query errors are not transient
                raise SubgraphError(f"Subgraph error: {errors[0].get('message', errors[0])}")
            data = payload.get("data")
            if not data:
                raise SubgraphError("No data returned from subgraph")
            return data

        raise SubgraphError(f"Subgraph unreachable after {self.max_retries} attempts: {last_error}")

    async def _aquery(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self.query(query, variables))

    async def fetch_trades(self, market_id: str, limit: int = 1000, order: str = "desc") -> List[MarketTrade]:
        """Trades for a curve ordered by timestamp."""
        if order not in _ORDERS:
            raise ValueError(f"order must be one of {_ORDERS}, got {order!r}")

        query = f"""
        query Trades($curve: String!, $first: Int!) {{
          trades(
            where: {{ curve: $curve }}
            orderBy: timestamp
            orderDirection: {order}
            first: $first
          ) {{
            {TRADE_FIELDS}
          }}
        }}
        """
        data = await self._aquery(query, {"curve": market_id.lower(), "first": int(limit)})
        trades = [MarketTrade.from_dict(t) for t in data.get("trades") or []]
        logger.debug("[SUBGRAPH] %s: fetched %d trades (%s)", market_id, len(trades), order)
        return trades

    async def fetch_curve(self, market_id: str) -> Optional[CurveInfo]:
        query = f"""
        query Curve($id: ID!) {{
          curve(id: $id) {{
            {CURVE_FIELDS}
          }}
        }}
        """
        data = await self._aquery(query, {"id": market_id.lower()})
        curve = data.get("curve")
        return CurveInfo.from_dict(curve) if curve else None

    async def fetch_eth_usd_price(self) -> float:
        """Latest ETH/USD from the bundle entity, or the configured fallback."""
        query = """
        {
          bundles(first: 1) {
            ethUsd
            updatedAt
          }
        }
        """
        try:
            data = await self._aquery(query)
            bundles = data.get("bundles") or []
            if bundles:
                return float(bundles[0]["ethUsd"])
        except (SubgraphError, KeyError, TypeError, ValueError) as e:
            logger.warning("[SUBGRAPH] ETH/USD lookup failed, using fallback: %s", e)
        return settings.eth_usd_fallback
