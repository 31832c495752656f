"""Client-side counters and their Prometheus projection."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

logger = logging.getLogger("dtxclient.metrics")

_SANITIZE_RE = re.compile(r"[^a-zA-Z0-9_]")
_GAUGE_DOC = "dtxclient auto-generated metric"
_SELECTOR_METRIC = "dtxclient_invocations_by_selector"
_SELECTOR_DOC = "Invocations sent per selector"


@dataclass(slots=True)
class ClientMetrics:
    """Counters updated by the invocation layer, decoder and subscriptions."""

    channels_opened: int = 0
    channel_open_failures: int = 0
    invocations: int = 0
    fire_and_forget: int = 0
    replies: int = 0
    remote_faults: int = 0
    transport_errors: int = 0
    records_decoded: int = 0
    records_skipped: int = 0
    telemetry_messages: int = 0
    telemetry_dropped: int = 0
    selector_counts: dict[str, int] = field(default_factory=dict)

    def record_invocation(self, selector: str, *, expects_reply: bool) -> None:
        self.invocations += 1
        if not expects_reply:
            self.fire_and_forget += 1
        self.selector_counts[selector] = self.selector_counts.get(selector, 0) + 1

    def record_decode(self, *, kept: int, skipped: int) -> None:
        self.records_decoded += kept
        self.records_skipped += skipped

    def snapshot(self) -> dict[str, Any]:
        return {
            "channels_opened": self.channels_opened,
            "channel_open_failures": self.channel_open_failures,
            "invocations": self.invocations,
            "fire_and_forget": self.fire_and_forget,
            "replies": self.replies,
            "remote_faults": self.remote_faults,
            "transport_errors": self.transport_errors,
            "records_decoded": self.records_decoded,
            "records_skipped": self.records_skipped,
            "telemetry_messages": self.telemetry_messages,
            "telemetry_dropped": self.telemetry_dropped,
            "selector_counts": dict(self.selector_counts),
        }


class ClientMetricsCollector(Collector):
    """Prometheus collector that projects ClientMetrics snapshots."""

    def __init__(self, metrics: ClientMetrics) -> None:
        self._metrics = metrics

    def collect(self) -> Iterator[Any]:
        snapshot = self._metrics.snapshot()
        selector_counts: dict[str, int] = snapshot.pop("selector_counts", {})

        for name, value in self._flatten("dtxclient", snapshot):
            metric = GaugeMetricFamily(_sanitize_metric_name(name), _GAUGE_DOC)
            metric.add_metric((), value)
            yield metric

        if selector_counts:
            by_selector = GaugeMetricFamily(_SELECTOR_METRIC, _SELECTOR_DOC, labels=("selector",))
            for selector, count in sorted(selector_counts.items()):
                by_selector.add_metric((selector,), float(count))
            yield by_selector

    def _flatten(self, prefix: str, value: Any) -> Iterator[tuple[str, float]]:
        if isinstance(value, dict):
            for key, sub_value in value.items():
                yield from self._flatten(f"{prefix}_{key}", sub_value)
            return
        if isinstance(value, bool):
            yield (prefix, 1.0 if value else 0.0)
            return
        if isinstance(value, (int, float)):
            yield (prefix, float(value))


def build_registry(metrics: ClientMetrics) -> CollectorRegistry:
    """Return a dedicated registry exporting *metrics*."""
    registry = CollectorRegistry(auto_describe=True)
    registry.register(ClientMetricsCollector(metrics))
    logger.debug("Prometheus collector registered for client metrics")
    return registry


def render_metrics(registry: CollectorRegistry) -> bytes:
    return generate_latest(registry)


def _sanitize_metric_name(name: str) -> str:
    cleaned = _SANITIZE_RE.sub("_", name.lower())
    cleaned = cleaned.strip("_") or "dtxclient_metric"
    if cleaned[0].isdigit():
        cleaned = f"_{cleaned}"
    return cleaned


__all__ = [
    "ClientMetrics",
    "ClientMetricsCollector",
    "build_registry",
    "render_metrics",
]
