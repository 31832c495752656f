"""Service components built on the invocation layer."""

from __future__ import annotations

from .base import DiagnosticSink, LoggingSink
from .decoder import DecodeReport, decode_many, decode_one
from .instruments import InstrumentsService, as_signed_pid
from .sysmontap import SysmontapSubscription, TelemetryCallback

__all__ = [
    "DecodeReport",
    "DiagnosticSink",
    "InstrumentsService",
    "LoggingSink",
    "SysmontapSubscription",
    "TelemetryCallback",
    "as_signed_pid",
    "decode_many",
    "decode_one",
]
