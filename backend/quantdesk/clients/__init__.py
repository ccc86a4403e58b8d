"""Market data clients."""

from quantdesk.clients.polygon_rest import (
    PolygonRestClient,
    RateLimiter,
    resolve_provider_symbol,
    resolve_timeframe,
)

__all__ = [
    "PolygonRestClient",
    "RateLimiter",
    "resolve_provider_symbol",
    "resolve_timeframe",
]
