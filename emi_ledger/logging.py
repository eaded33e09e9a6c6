"""Structured logging configuration for emi-ledger.

Ledger modules attach identifiers to a record with
``extra=log_context(loan_id=..., wallet_id=...)``. Both formatters render
them, so every line about a payment or disbursement names its loan.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Rendered first and in this order; other context keys follow alphabetically
CONTEXT_FIELDS = ("loan_id", "wallet_id", "owner_id", "transaction_id", "code")

# Third-party loggers held at WARNING whatever the ledger level is
QUIET_LOGGERS = ("confluent_kafka", "faker")


def log_context(**fields: Any) -> dict[str, Any]:
    """Build an ``extra`` mapping for a ledger log call.

    Unset identifiers are dropped.

    Examples
    --------
    >>> logger.info("Applied payment", extra=log_context(loan_id=loan.loan_id))
    """
    return {"ledger": {k: v for k, v in fields.items() if v is not None}}


def _ordered_context(record: logging.LogRecord) -> list[tuple[str, Any]]:
    context: dict[str, Any] = getattr(record, "ledger", None) or {}
    first = [(k, context[k]) for k in CONTEXT_FIELDS if k in context]
    rest = sorted((k, v) for k, v in context.items() if k not in CONTEXT_FIELDS)
    return first + rest


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
) -> None:
    """Configure logging for emi-ledger.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    format_type : str
        Format type: "standard" or "json".
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter: logging.Formatter = JsonFormatter() if format_type == "json" else LedgerFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("emi_ledger").setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class LedgerFormatter(logging.Formatter):
    """Pipe-separated lines with ledger context appended as ``key=value``."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _ordered_context(record)
        if context:
            line += " | " + " ".join(f"{k}={v}" for k, v in context)
        return line


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Decimal amounts in the context serialize as strings
        log_data.update(_ordered_context(record))
        return json.dumps(log_data, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Parameters
    ----------
    name : str
        Logger name (usually __name__).

    Returns
    -------
    logging.Logger
        Configured logger.
    """
    return logging.getLogger(name)
