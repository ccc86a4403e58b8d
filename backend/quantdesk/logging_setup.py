"""Logging configuration for the service and the CLI."""

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# Third-party loggers that are too chatty at INFO
_NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "httpx",
    "httpcore",
    "asyncio",
)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once, before the rest of the app logs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
