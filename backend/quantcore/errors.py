"""Error taxonomy shared by the indicator engine and the outcome evaluator."""


class QuantCoreError(Exception):
    """Base class for all quantcore errors."""


class InsufficientHistoryError(QuantCoreError):
    """Too few values for an indicator.

    Raised by the series utilities. The indicator engine always resolves it
    locally by falling back to a neutral or degraded value.
    """

    def __init__(self, required: int, available: int, what: str = "values"):
        self.required = required
        self.available = available
        super().__init__(f"need {required} {what}, got {available}")


class ProviderError(QuantCoreError):
    """Candle fetch failed (transport error, timeout, non-success response)."""


class EmptySeriesError(QuantCoreError):
    """The candle source returned no candles."""


class MalformedDataError(QuantCoreError, ValueError):
    """A candle or series violates the OHLC / ordering invariants."""
