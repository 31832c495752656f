"""Conversion of generic reply objects into typed records.

Single-record decodes are all-or-nothing. Collection decodes isolate failures:
a malformed entry is reported to the sink, remembered in the report and
skipped, and never fails the whole call.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import msgspec

from ..metrics import ClientMetrics
from ..protocol.structures import WireRecord
from ..rpc.errors import DecodeError
from .base import DiagnosticSink, LoggingSink

logger = logging.getLogger("dtxclient.decoder")

R = TypeVar("R", bound=WireRecord)


@dataclass(slots=True)
class DecodeReport(Generic[R]):
    """Outcome of a collection decode."""

    items: list[R] = field(default_factory=list)
    skipped: list[Any] = field(default_factory=list)

    @property
    def kept(self) -> int:
        return len(self.items)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def __iter__(self) -> Iterator[R]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> R:
        return self.items[index]


@functools.lru_cache(maxsize=None)
def _required_keys(record_type: type[WireRecord]) -> frozenset[str]:
    return frozenset(fi.encode_name for fi in msgspec.structs.fields(record_type) if fi.required)


def decode_one(raw: Any, record_type: type[R]) -> R:
    """Convert one generic record into *record_type* or raise ``DecodeError``.

    A null optional field falls back to its default; a null required field
    fails the record.
    """
    name = record_type.__name__
    if not isinstance(raw, Mapping):
        raise DecodeError(f"expected a {name} record, got {type(raw).__name__}", raw=raw)
    required = _required_keys(record_type)
    fields = {key: value for key, value in raw.items() if value is not None or key in required}
    try:
        return msgspec.convert(fields, record_type)
    except msgspec.ValidationError as exc:
        raise DecodeError(f"invalid {name} record: {exc}", raw=raw) from exc


def decode_many(
    raw: Any,
    record_type: type[R],
    *,
    sink: DiagnosticSink | None = None,
    metrics: ClientMetrics | None = None,
    kind: str | None = None,
) -> DecodeReport[R]:
    """Decode a list of generic records, dropping the malformed ones."""
    label = kind or record_type.__name__.lower()
    if not isinstance(raw, list):
        raise DecodeError(f"expected a list of {label} records, got {type(raw).__name__}", raw=raw)

    diagnostics = sink if sink is not None else LoggingSink()
    report: DecodeReport[R] = DecodeReport()
    for entry in raw:
        try:
            record = decode_one(entry, record_type)
        except DecodeError as exc:
            report.skipped.append(entry)
            diagnostics.record_skipped(label, entry, exc)
            continue
        report.items.append(record)
        diagnostics.record_decoded(label, record)

    if metrics is not None:
        metrics.record_decode(kept=report.kept, skipped=report.skipped_count)
    if report.skipped:
        logger.info(
            "Decoded %d %s records, skipped %d malformed",
            report.kept,
            label,
            report.skipped_count,
        )
    return report


__all__ = ["DecodeReport", "decode_many", "decode_one"]
