"""Polygon.io REST client for fetching aggregate candles."""

import asyncio
import logging
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from quantcore.errors import EmptySeriesError, MalformedDataError, ProviderError
from quantcore.models import Candle, Market, datetime_to_ms

logger = logging.getLogger(__name__)

# timeframe -> (multiplier, timespan)
TIMEFRAME_RANGES: dict[str, tuple[int, str]] = {
    "1m": (1, "minute"),
    "5m": (5, "minute"),
    "15m": (15, "minute"),
    "30m": (30, "minute"),
    "60m": (1, "hour"),
    "1h": (1, "hour"),
    "4h": (4, "hour"),
    "1d": (1, "day"),
}
DEFAULT_RANGE = (1, "hour")

_MARKET_PREFIXES = {
    Market.CRYPTO: "X:",
    Market.FOREX: "C:",
}


def resolve_provider_symbol(symbol: str, market: Market | str) -> str:
    """
    Map a display symbol to Polygon's ticker form.

    CRYPTO → ``X:BTCUSD``, FOREX → ``C:EURUSD``, STOCK → upper-cased as-is.
    Symbols that already carry the prefix are returned unchanged.
    """
    market = Market(market.upper()) if isinstance(market, str) else market
    prefix = _MARKET_PREFIXES.get(market)
    if prefix is None:
        return symbol.upper()
    if symbol.startswith(prefix):
        return symbol
    return f"{prefix}{symbol.replace('/', '').upper()}"


def resolve_timeframe(timeframe: str) -> tuple[int, str]:
    """Polygon ``(multiplier, timespan)`` for a timeframe; unknown → 1 hour."""
    return TIMEFRAME_RANGES.get(timeframe, DEFAULT_RANGE)


class RateLimiter:
    """Simple rate limiter for API calls."""

    def __init__(self, calls_per_minute: int = 300):
        self.calls_per_minute = calls_per_minute
        self.interval = 60.0 / calls_per_minute
        self.last_call = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait if necessary to respect rate limit."""
        async with self._lock:
            loop = asyncio.get_running_loop()
            wait_time = self.last_call + self.interval - loop.time()
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self.last_call = loop.time()


class PolygonRestClient:
    """Polygon aggregates client implementing the CandleProvider protocol."""

    BASE_URL = "https://api.polygon.io"

    def __init__(
        self,
        api_key: str = "",
        base_url: str | None = None,
        timeout: float = 15.0,
        calls_per_minute: int = 300,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url or self.BASE_URL
        self.timeout = timeout
        self.rate_limiter = RateLimiter(calls_per_minute)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, endpoint: str, params: dict[str, Any]) -> Any:
        """GET with rate limiting. Transport and HTTP failures become ProviderError."""
        if not self.api_key:
            raise ProviderError("POLYGON_API_KEY not configured")

        await self.rate_limiter.acquire()
        client = await self._get_client()
        try:
            response = await client.get(endpoint, params={**params, "apiKey": self.api_key})
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            raise ProviderError(f"timeout fetching {endpoint}") from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"{endpoint} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"request to {endpoint} failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"invalid JSON from {endpoint}") from e

    async def get_candles(
        self,
        symbol: str,
        timeframe: str,
        start: datetime,
        end: datetime,
    ) -> list[Candle]:
        """
        Fetch aggregate candles from Polygon.

        Args:
            symbol: Provider ticker (e.g., "AAPL", "X:BTCUSD")
            timeframe: Candle timeframe (e.g., "5m", "1h")
            start: Range start (inclusive)
            end: Range end (inclusive)

        Returns:
            Ascending list of Candle objects

        Raises:
            ProviderError: transport failure, timeout or non-success response
            EmptySeriesError: Polygon returned no results
            MalformedDataError: a result row could not be parsed
        """
        multiplier, timespan = resolve_timeframe(timeframe)
        endpoint = (
            f"/v2/aggs/ticker/{symbol}/range/{multiplier}/{timespan}"
            f"/{datetime_to_ms(start)}/{datetime_to_ms(end)}"
        )
        data = await self._request(
            endpoint,
            {"adjusted": "true", "sort": "asc", "limit": 50000},
        )

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            raise EmptySeriesError(f"no candles for {symbol} {timeframe}")

        try:
            candles = [
                Candle(
                    t=item["t"],
                    o=item["o"],
                    h=item["h"],
                    l=item["l"],
                    c=item["c"],
                    v=item.get("v", 0),
                )
                for item in results
            ]
        except (KeyError, TypeError, ValidationError) as e:
            raise MalformedDataError(f"unparseable candle for {symbol}: {e}") from e

        logger.debug(f"Fetched {len(candles)} candles for {symbol} {timeframe}")
        return candles
