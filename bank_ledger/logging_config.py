"""
Structured logging configuration.

Every module logs through ``logging.getLogger(__name__)``; this
module attaches a single handler to the package logger so that
ledger events come out as one JSON object per line.
"""

import json
import logging
from datetime import datetime, timezone

PACKAGE_LOGGER = "bank_ledger"

# Attributes that callers pass through ``extra=`` and that we
# want to keep as top-level fields in the JSON output.
CONTEXT_FIELDS = (
    "operation",
    "account_id",
    "counterparty_account_id",
    "amount",
    "reference",
    "user_id",
    "error",
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", json_output: bool = True) -> logging.Logger:
    """
    Configure the package logger.

    Calling this more than once replaces the previous handler
    instead of stacking duplicates.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s"
        ))

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    return logger
