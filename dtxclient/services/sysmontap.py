"""Streaming subscription to the sysmontap telemetry channel.

Each ``SysmontapSubscription`` owns its callback, channel and state, so
independent subscriptions can run side by side on separate channels.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from types import TracebackType
from typing import TYPE_CHECKING, Any

from transitions import Machine

from ..protocol.objects import Object, fault_description, to_object
from ..protocol.protocol import Selector, Service
from ..protocol.structures import SysmontapConfig
from ..rpc.errors import SubscriptionStateError, TransportError
from ..rpc.invocation import Channel, InvocationLayer
from .base import DiagnosticSink, LoggingSink

logger = logging.getLogger("dtxclient.sysmontap")

TelemetryCallback = Callable[[Object], None]


class SysmontapSubscription:
    """Start/stop lifecycle and push delivery for one telemetry stream."""

    if TYPE_CHECKING:
        # FSM generated methods and attributes for static analysis
        fsm_state: str
        activate: Callable[[], None]
        deactivate: Callable[[], None]

    # FSM States
    STATE_IDLE = "idle"
    STATE_ACTIVE = "active"

    def __init__(
        self,
        invoker: InvocationLayer,
        config: SysmontapConfig,
        *,
        sink: DiagnosticSink | None = None,
        service: str = Service.SYSMONTAP,
    ) -> None:
        self._invoker = invoker
        self._config = config
        self._sink = sink if sink is not None else LoggingSink()
        self._service = service
        self._callback: TelemetryCallback | None = None
        self._channel: Channel | None = None
        self._lock = asyncio.Lock()

        # FSM Initialization
        self.state_machine = Machine(
            model=self,
            states=[self.STATE_IDLE, self.STATE_ACTIVE],
            initial=self.STATE_IDLE,
            auto_transitions=False,
            model_attribute="fsm_state",
        )

        # FSM Transitions
        self.state_machine.add_transition(trigger="activate", source=self.STATE_IDLE, dest=self.STATE_ACTIVE)
        self.state_machine.add_transition(trigger="deactivate", source=self.STATE_ACTIVE, dest=self.STATE_IDLE)

    @property
    def active(self) -> bool:
        return self.fsm_state == self.STATE_ACTIVE

    @property
    def channel(self) -> Channel | None:
        return self._channel

    @property
    def config(self) -> SysmontapConfig:
        return self._config

    async def start(self, callback: TelemetryCallback) -> None:
        """Configure the remote sampler and begin delivering pushes to *callback*.

        Raises ``SubscriptionStateError`` when already active; the running
        stream is left untouched in that case.
        """
        async with self._lock:
            if self.active:
                raise SubscriptionStateError("sysmontap subscription already active; stop it before starting again")

            channel = await self._invoker.open_channel(self._service)
            reply = await self._invoker.invoke_on(
                channel,
                Selector.SET_CONFIG,
                [self._config.to_record()],
                expects_reply=True,
            )
            assert reply is not None
            ack = reply.unwrap()
            logger.debug("setConfig acknowledged on channel %d: %r", channel.identifier, ack)

            self._invoker.transport.register_push_handler(channel.identifier, self._on_push)
            self._callback = callback
            self._channel = channel
            try:
                await self._invoker.invoke_on(channel, Selector.START, expects_reply=False)
            except TransportError:
                self._release(channel)
                raise

            self.activate()
            logger.info("Sysmontap streaming started on channel %d", channel.identifier)

    async def stop(self) -> None:
        """Ask the remote side to stop pushing. No-op when idle.

        Best effort: a message already in flight may still reach the transport
        after this returns, it is discarded.
        """
        async with self._lock:
            channel = self._channel
            if not self.active or channel is None:
                logger.debug("Sysmontap stop requested while idle; nothing to do")
                return
            try:
                await self._invoker.invoke_on(channel, Selector.STOP, expects_reply=False)
            finally:
                self._release(channel)
                self.deactivate()
            logger.info("Sysmontap streaming stopped on channel %d", channel.identifier)

    def _release(self, channel: Channel) -> None:
        self._invoker.transport.unregister_push_handler(channel.identifier)
        self._callback = None
        self._channel = None

    def _on_push(self, message: Any) -> None:
        callback = self._callback
        if callback is None:
            logger.debug("Discarding telemetry message received after stop")
            return

        metrics = self._invoker.metrics
        try:
            payload = to_object(message)
        except TypeError as exc:
            metrics.telemetry_dropped += 1
            self._sink.telemetry_dropped(message, str(exc))
            return

        fault = fault_description(payload)
        if fault is not None:
            metrics.telemetry_dropped += 1
            self._sink.telemetry_dropped(message, f"remote fault: {fault}")
            return

        metrics.telemetry_messages += 1
        try:
            callback(payload)
        except Exception:
            logger.exception("Telemetry callback raised; stream continues")

    async def __aenter__(self) -> SysmontapSubscription:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()


__all__ = ["SysmontapSubscription", "TelemetryCallback"]
