"""Structured JSON logging for the ``dtxclient`` logger tree.

Only the package logger is touched. The root logger and handlers installed
by the embedding application are left alone.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from logging.handlers import SysLogHandler
from typing import Any

import msgspec

from ..const import LOG_HANDLER_SYSLOG
from .settings import ClientConfig

LOGGER_NAME = "dtxclient"
HANDLER_NAME = "dtxclient-structured"
SYSLOG_IDENT = "dtxclient "

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


def _json_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return f"[{bytes(value).hex(' ').upper()}]"
    return str(value)


class StructuredLogFormatter(logging.Formatter):
    """One JSON object per record, logger names relative to ``dtxclient``."""

    def format(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith(f"{LOGGER_NAME}."):
            name = name[len(LOGGER_NAME) + 1 :]

        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": name,
            "message": record.getMessage(),
        }
        extra = {
            key: _json_value(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return msgspec.json.encode(entry).decode("utf-8")


def build_handler(config: ClientConfig) -> logging.Handler:
    """Create the handler selected by ``config.log_handler``."""
    handler: logging.Handler
    if config.log_handler == LOG_HANDLER_SYSLOG:
        syslog = SysLogHandler(address=config.syslog_address, facility=SysLogHandler.LOG_USER)
        syslog.ident = SYSLOG_IDENT
        handler = syslog
    else:
        handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(StructuredLogFormatter())
    return handler


def configure_logging(config: ClientConfig) -> logging.Handler:
    """Attach a structured handler to the ``dtxclient`` logger.

    Calling it again replaces the handler installed by the previous call.
    """
    level = logging.DEBUG if config.debug_logging else logging.INFO
    package_logger = logging.getLogger(LOGGER_NAME)
    for existing in list(package_logger.handlers):
        if existing.get_name() == HANDLER_NAME:
            package_logger.removeHandler(existing)
            existing.close()

    handler = build_handler(config)
    handler.setLevel(level)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.debug("Logging configured", extra={"handler": config.log_handler})
    return handler


__all__ = ["StructuredLogFormatter", "build_handler", "configure_logging"]
