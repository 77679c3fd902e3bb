"""Logging setup for the px500 client.

Every px500 logger hangs under the ``px500`` namespace and logs snake_case
event names with their details passed through ``extra=``. The handler
installed here renders those records either as one JSON document per line
(default) or as text with the details appended as ``key=value`` pairs.

The consumer key travels in every query string, so redaction covers both
sensitive field names and ``name=value`` pairs embedded in strings such as
URLs or error messages.

Environment Variables:
    PX500_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR. Default: WARNING
    PX500_LOG_FORMAT: json or text. Default: json
"""

import json
import logging
import os
import re
from datetime import datetime, timezone
from typing import Any, Optional

__all__ = [
    "SENSITIVE_KEYS",
    "StructuredFormatter",
    "TextFormatter",
    "configure_logging",
    "record_context",
    "redact",
]

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = {
    "password",
    "token",
    "secret",
    "apikey",
    "api_key",
    "authorization",
    "credential",
    "auth",
    "key",
    "bearer",
    "consumer_key",
}

# consumer_key=abc in a URL or an httpx error message
_SECRET_PARAM = re.compile(
    r"\b(consumer_key|api_key|apikey|token|secret|password)=[^&\s\"']+",
    re.IGNORECASE,
)

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def redact(value: Any, key: Optional[str] = None) -> Any:
    """Mask secrets in a log value.

    Values under a sensitive key are replaced whole; dicts and lists are
    walked; strings have ``secret=...`` pairs masked.
    """
    if key is not None and key.lower() in SENSITIVE_KEYS:
        return REDACTED
    if isinstance(value, dict):
        return {k: redact(v, str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact(v) for v in value]
    if isinstance(value, str):
        return _SECRET_PARAM.sub(lambda m: f"{m.group(1)}={REDACTED}", value)
    return value


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """The ``extra=`` fields of a record, redacted."""
    return {
        k: redact(v, k)
        for k, v in vars(record).items()
        if k not in _RECORD_ATTRS and not k.startswith("_")
    }


class StructuredFormatter(logging.Formatter):
    """One JSON document per record.

    Keys: timestamp (UTC, ``Z`` suffix), level, logger, message, and when
    present context (the redacted extras) and exception.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": redact(record.getMessage()),
        }

        context = record_context(record)
        if context:
            log_data["context"] = context

        if record.exc_info:
            log_data["exception"] = redact(self.formatException(record.exc_info))

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Readable single-line output for local runs (PX500_LOG_FORMAT=text).

    Example:
        2016-05-04 10:00:00 [INFO] px500.streaming: stream_finished endpoint=list reason=empty_page
    """

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = redact(super().format(record))
        context = record_context(record)
        if not context:
            return line
        details = " ".join(f"{k}={v}" for k, v in context.items())
        return f"{line} {details}"


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Install the px500 handler.

    Safe to call repeatedly: the single handler is reused and only its level
    and formatter change. Records do not propagate to the root logger.

    Args:
        level: Log level name; defaults to PX500_LOG_LEVEL, then WARNING
        log_format: json or text; defaults to PX500_LOG_FORMAT, then json
    """
    level = level or os.getenv("PX500_LOG_LEVEL", "WARNING")
    log_format = (log_format or os.getenv("PX500_LOG_FORMAT", "json")).lower()

    formatter: logging.Formatter = TextFormatter() if log_format == "text" else StructuredFormatter()

    logger = logging.getLogger("px500")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    if not logger.handlers:
        logger.addHandler(logging.StreamHandler())
    for handler in logger.handlers:
        handler.setFormatter(formatter)

    logger.propagate = False
