"""Base interfaces for service components."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ..protocol.structures import WireRecord


class DiagnosticSink(Protocol):
    """Receives per-record diagnostics from the decoder and subscriptions."""

    def record_decoded(self, kind: str, record: WireRecord) -> None: ...

    def record_skipped(self, kind: str, raw: Any, error: Exception) -> None: ...

    def telemetry_dropped(self, raw: Any, reason: str) -> None: ...


class LoggingSink:
    """Default sink writing diagnostics to the ``dtxclient.diagnostics`` logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("dtxclient.diagnostics")

    def record_decoded(self, kind: str, record: WireRecord) -> None:
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug("Decoded %s: %r", kind, record)

    def record_skipped(self, kind: str, raw: Any, error: Exception) -> None:
        self._logger.warning("Skipping malformed %s record: %s", kind, error, extra={"raw_record": repr(raw)})

    def telemetry_dropped(self, raw: Any, reason: str) -> None:
        self._logger.warning("Dropping telemetry message: %s", reason, extra={"raw_message": repr(raw)})


__all__ = ["DiagnosticSink", "LoggingSink"]
