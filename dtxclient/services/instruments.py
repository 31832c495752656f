"""Public operations of the instruments services.

Every operation opens its own channel through the invocation layer; callers
re-issue the operation when a channel or transport error surfaces.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from prometheus_client import CollectorRegistry

from ..config.settings import ClientConfig
from ..metrics import ClientMetrics, build_registry
from ..protocol import protocol
from ..protocol.objects import Object
from ..protocol.protocol import Selector, Service
from ..protocol.structures import Application, DeviceInfo, LaunchConfig, Process, SysmontapConfig
from ..rpc.errors import DecodeError
from ..rpc.invocation import Channel, InvocationLayer
from ..transport.base import ChannelTransport
from .base import DiagnosticSink, LoggingSink
from .decoder import DecodeReport, decode_many, decode_one
from .sysmontap import SysmontapSubscription

logger = logging.getLogger("dtxclient.instruments")

_CONTROL_CHANNEL = Channel(service="control", identifier=protocol.CONTROL_CHANNEL_ID)


def as_signed_pid(value: Object, selector: str) -> int:
    """Reinterpret an unsigned 64-bit pid reply as a signed integer.

    No range check is applied: values at or above 2**63 come back negative,
    exactly as the remote encoding dictates.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"{selector} returned {type(value).__name__}, expected an integer pid", raw=value)
    unsigned = value & protocol.UINT64_MASK
    if unsigned & protocol.INT64_SIGN_BIT:
        return unsigned - (protocol.UINT64_MASK + 1)
    return unsigned


class InstrumentsService:
    """Launch, kill and inspect processes and apps on the remote device."""

    def __init__(
        self,
        transport: ChannelTransport,
        *,
        config: ClientConfig | None = None,
        sink: DiagnosticSink | None = None,
        metrics: ClientMetrics | None = None,
    ) -> None:
        self.config = config if config is not None else ClientConfig()
        self.sink = sink if sink is not None else LoggingSink()
        self.metrics = metrics if metrics is not None else ClientMetrics()
        self.invoker = InvocationLayer(
            transport,
            timeout=self.config.invoke_timeout,
            metrics=self.metrics,
        )
        self.registry: CollectorRegistry | None = (
            build_registry(self.metrics) if self.config.metrics_enabled else None
        )

    async def notify_published_capabilities(self, capabilities: Mapping[str, Object] | None = None) -> None:
        """Announce client capabilities on the root channel."""
        published = dict(capabilities) if capabilities is not None else dict(protocol.DEFAULT_PUBLISHED_CAPABILITIES)
        await self.invoker.invoke_on(
            _CONTROL_CHANNEL,
            Selector.NOTIFY_PUBLISHED_CAPABILITIES,
            [published],
            expects_reply=False,
        )

    async def launch_app(
        self,
        bundle_id: str,
        config: LaunchConfig | None = None,
        **options: Any,
    ) -> int:
        """Launch *bundle_id* and return its pid.

        Keyword *options* are merged over ``config.options`` and passed
        through to the remote side unvalidated.
        """
        launch = config if config is not None else LaunchConfig()
        if options:
            launch = launch.with_options(options)

        value = await self.invoker.call(
            Service.PROCESS_CONTROL,
            Selector.LAUNCH_SUSPENDED_PROCESS,
            launch.to_arguments(bundle_id),
        )
        pid = as_signed_pid(value, Selector.LAUNCH_SUSPENDED_PROCESS)
        logger.info("Launched %s with pid %d", bundle_id, pid)
        return pid

    async def pid_for_bundle_id(self, bundle_id: str) -> int:
        value = await self.invoker.call(
            Service.PROCESS_CONTROL,
            Selector.PID_FOR_BUNDLE_ID,
            [bundle_id],
        )
        return as_signed_pid(value, Selector.PID_FOR_BUNDLE_ID)

    async def start_observing(self, pid: int) -> None:
        await self.invoker.call(Service.PROCESS_CONTROL, Selector.START_OBSERVING_PID, [pid])
        logger.debug("Observing pid %d", pid)

    async def kill_app(self, pid: int) -> None:
        """Ask the remote side to kill *pid*; no acknowledgement is awaited."""
        await self.invoker.notify(Service.PROCESS_CONTROL, Selector.KILL_PID, [pid])
        logger.info("Kill requested for pid %d", pid)

    async def running_processes(self) -> DecodeReport[Process]:
        raw = await self.invoker.call(Service.DEVICE_INFO, Selector.RUNNING_PROCESSES)
        return decode_many(raw, Process, sink=self.sink, metrics=self.metrics, kind="process")

    async def installed_applications(
        self,
        matching: Mapping[str, Object] | None = None,
        update_token: str = "",
    ) -> DecodeReport[Application]:
        """List installed apps, optionally filtered by a match mapping.

        *update_token* registers an incremental query on the remote side.
        """
        arguments: list[Object] = [dict(matching or {}), update_token]
        raw = await self.invoker.call(
            Service.APPLICATION_LISTING,
            Selector.INSTALLED_APPLICATIONS,
            arguments,
        )
        return decode_many(raw, Application, sink=self.sink, metrics=self.metrics, kind="application")

    async def device_info(self) -> DeviceInfo:
        raw = await self.invoker.call(Service.DEVICE_INFO, Selector.SYSTEM_INFORMATION)
        info = decode_one(raw, DeviceInfo)
        self.sink.record_decoded("device_info", info)
        return info

    def sysmontap(self, config: SysmontapConfig | None = None) -> SysmontapSubscription:
        """Create a new, idle telemetry subscription bound to this service."""
        tap_config = config if config is not None else SysmontapConfig.from_config(self.config)
        return SysmontapSubscription(self.invoker, tap_config, sink=self.sink)


__all__ = ["InstrumentsService", "as_signed_pid"]
