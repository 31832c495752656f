"""Selector invocation over named channels.

Every call opens its own channel; ids are never cached or reused here. Replies
are classified into ``Value`` or ``Fault``; transport failures are raised.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Sequence
from typing import Any, TypeVar

import msgspec

from ..const import DEFAULT_INVOKE_TIMEOUT
from ..metrics import ClientMetrics
from ..protocol.objects import Object, fault_description, is_object, to_object
from ..transport.base import ChannelTransport
from .errors import ChannelOpenError, DecodeError, RemoteFault, TransportError

logger = logging.getLogger("dtxclient.rpc")

T = TypeVar("T")

_WRAPPED_FAILURES = (OSError, EOFError, ConnectionError)


class Channel(msgspec.Struct, frozen=True):
    """A logical channel allocated by the transport for one service."""

    service: str
    identifier: int


class Invocation(msgspec.Struct, frozen=True):
    """One selector call, immutable once built."""

    selector: str
    channel: Channel
    arguments: tuple[Any, ...] = ()
    expects_reply: bool = True


class Value(msgspec.Struct, frozen=True):
    """Successful reply payload, possibly empty."""

    value: Any = None

    def unwrap(self) -> Object:
        return self.value


class Fault(msgspec.Struct, frozen=True):
    """Remote error object returned in place of a result."""

    message: str
    selector: str | None = None

    def unwrap(self) -> Object:
        raise RemoteFault(self.message, selector=self.selector)


Reply = Value | Fault


def classify_reply(raw: Object, selector: str | None = None) -> Reply:
    """Map a raw reply object onto ``Fault`` or ``Value``."""
    message = fault_description(raw)
    if message is not None:
        return Fault(message=message, selector=selector)
    return Value(value=raw)


def _as_object(raw: Any, selector: str) -> Object:
    if is_object(raw):
        return raw
    try:
        return to_object(raw)
    except TypeError as exc:
        raise DecodeError(f"{selector} reply is not a valid Object: {exc}", raw=raw) from exc


class InvocationLayer:
    """Builds invocations, drives the transport and classifies outcomes."""

    def __init__(
        self,
        transport: ChannelTransport,
        *,
        timeout: float = DEFAULT_INVOKE_TIMEOUT,
        metrics: ClientMetrics | None = None,
    ) -> None:
        self.transport = transport
        self.timeout = max(0.0, timeout)
        self.metrics = metrics if metrics is not None else ClientMetrics()

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        if self.timeout <= 0:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=self.timeout)

    async def open_channel(self, service: str) -> Channel:
        """Allocate a fresh channel; failures are never retried here."""
        try:
            identifier = await self._bounded(self.transport.open_channel(service))
        except ChannelOpenError:
            self.metrics.channel_open_failures += 1
            raise
        except asyncio.TimeoutError as exc:
            self.metrics.channel_open_failures += 1
            raise ChannelOpenError(service, f"timed out opening channel for {service}") from exc
        except (TransportError, *_WRAPPED_FAILURES) as exc:
            self.metrics.channel_open_failures += 1
            raise ChannelOpenError(service, f"failed to open channel for {service}: {exc}") from exc

        if isinstance(identifier, bool) or not isinstance(identifier, int):
            self.metrics.channel_open_failures += 1
            raise ChannelOpenError(service, f"transport returned invalid channel id {identifier!r} for {service}")

        self.metrics.channels_opened += 1
        logger.debug("Opened channel %d for %s", identifier, service)
        return Channel(service=service, identifier=identifier)

    async def invoke(
        self,
        service: str,
        selector: str,
        arguments: Sequence[Object] = (),
        *,
        expects_reply: bool = True,
    ) -> Reply | None:
        channel = await self.open_channel(service)
        return await self.invoke_on(channel, selector, arguments, expects_reply=expects_reply)

    async def invoke_on(
        self,
        channel: Channel,
        selector: str,
        arguments: Sequence[Object] = (),
        *,
        expects_reply: bool = True,
    ) -> Reply | None:
        invocation = Invocation(
            selector=selector,
            channel=channel,
            arguments=tuple(arguments),
            expects_reply=expects_reply,
        )
        return await self.send(invocation)

    async def send(self, invocation: Invocation) -> Reply | None:
        """Hand *invocation* to the transport.

        Returns None for fire-and-forget calls, otherwise the classified reply.
        """
        selector = invocation.selector
        channel_id = invocation.channel.identifier
        self.metrics.record_invocation(selector, expects_reply=invocation.expects_reply)
        logger.debug(
            "Invoking %s on channel %d",
            selector,
            channel_id,
            extra={"service": invocation.channel.service, "expects_reply": invocation.expects_reply},
        )

        try:
            raw = await self._bounded(
                self.transport.invoke(
                    selector,
                    channel_id,
                    list(invocation.arguments),
                    invocation.expects_reply,
                )
            )
        except asyncio.TimeoutError as exc:
            self.metrics.transport_errors += 1
            raise TransportError(f"{selector} timed out after {self.timeout:.1f}s") from exc
        except TransportError:
            self.metrics.transport_errors += 1
            raise
        except _WRAPPED_FAILURES as exc:
            self.metrics.transport_errors += 1
            raise TransportError(f"{selector} failed on channel {channel_id}: {exc}") from exc

        if not invocation.expects_reply:
            return None

        self.metrics.replies += 1
        reply = classify_reply(_as_object(raw, selector), selector)
        if isinstance(reply, Fault):
            self.metrics.remote_faults += 1
            logger.warning("Remote fault from %s: %s", selector, reply.message)
        return reply

    async def call(self, service: str, selector: str, arguments: Sequence[Object] = ()) -> Object:
        """Invoke expecting a reply and return its value, raising ``RemoteFault``."""
        reply = await self.invoke(service, selector, arguments, expects_reply=True)
        assert reply is not None
        return reply.unwrap()

    async def notify(self, service: str, selector: str, arguments: Sequence[Object] = ()) -> None:
        """Fire-and-forget invocation."""
        await self.invoke(service, selector, arguments, expects_reply=False)


__all__ = [
    "Channel",
    "Fault",
    "Invocation",
    "InvocationLayer",
    "Reply",
    "Value",
    "classify_reply",
]
