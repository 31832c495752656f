"""Transport interface for the DTX connection."""

from .base import ChannelTransport, PushCallback

__all__ = ["ChannelTransport", "PushCallback"]
