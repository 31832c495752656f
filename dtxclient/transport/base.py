"""Interface the multiplexed DTX connection must provide.

The physical connection, framing and Object codec live outside this package.
Implementations raise ``TransportError`` (or ``OSError``) on failure; the
invocation layer classifies everything else.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from ..protocol.objects import Object

PushCallback = Callable[[Object], None]


class ChannelTransport(Protocol):
    """Protocol describing the surface required from the DTX connection."""

    async def open_channel(self, service: str) -> int:
        """Allocate a new channel for *service* and return its id."""
        ...

    async def invoke(
        self,
        selector: str,
        channel_id: int,
        arguments: Sequence[Object],
        expects_reply: bool,
    ) -> Object | None:
        """Send one invocation; return the decoded reply when one is expected."""
        ...

    def register_push_handler(self, topic: int, callback: PushCallback) -> None:
        """Route server-initiated messages on *topic* to *callback*."""
        ...

    def unregister_push_handler(self, topic: int) -> None: ...


__all__ = ["ChannelTransport", "PushCallback"]
