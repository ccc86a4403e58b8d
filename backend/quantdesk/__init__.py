"""Service layer: Polygon candle client, trade analysis storage, outcome batches and HTTP API."""

__version__ = "0.1.0"
