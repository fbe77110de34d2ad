"""
Structured logging configuration.

Log records are emitted as one JSON object per line so they can be shipped
to any log aggregator without parsing rules. Fields passed through `extra=`
(user_id, account_number, transaction_id, ...) are copied into the object.

Usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Account opened", extra={"account_number": "1000000000"})
"""

import json
import logging
from datetime import datetime, timezone

# Attributes present on every LogRecord; anything else came from `extra=`
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message"}


class JSONFormatter(logging.Formatter):
    """Render a LogRecord as a single-line JSON document."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and value is not None:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", logger_name: str = "app") -> logging.Logger:
    """
    Attach a JSON stream handler to the application's root logger.

    Safe to call more than once: existing handlers are replaced, not stacked.
    """
    logger = logging.getLogger(logger_name)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    return logger
