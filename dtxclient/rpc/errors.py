"""Error taxonomy for instruments RPC calls."""

from __future__ import annotations

from typing import Any


class InstrumentsError(RuntimeError):
    """Base class for every error surfaced by dtxclient."""

    code = "INSTRUMENTS_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(InstrumentsError):
    """The underlying send/receive failed (timeout, connection drop)."""

    code = "TRANSPORT_ERROR"


class ChannelOpenError(TransportError):
    """The named service channel could not be established."""

    code = "CHANNEL_OPEN_ERROR"

    def __init__(self, service: str, message: str | None = None) -> None:
        super().__init__(message or f"failed to open channel for {service}")
        self.service = service


class RemoteFault(InstrumentsError):
    """The remote side answered with a structured error object."""

    code = "REMOTE_FAULT"

    def __init__(self, message: str, *, selector: str | None = None) -> None:
        super().__init__(message)
        self.selector = selector


class DecodeError(InstrumentsError):
    """A record could not be converted into its typed shape."""

    code = "DECODE_ERROR"

    def __init__(self, message: str, *, raw: Any = None) -> None:
        super().__init__(message)
        self.raw = raw


class SubscriptionStateError(InstrumentsError):
    """A subscription transition was requested from the wrong state."""

    code = "SUBSCRIPTION_STATE_ERROR"


__all__ = [
    "ChannelOpenError",
    "DecodeError",
    "InstrumentsError",
    "RemoteFault",
    "SubscriptionStateError",
    "TransportError",
]
