"""RPC invocation layer for the instruments services."""

from .errors import (
    ChannelOpenError,
    DecodeError,
    InstrumentsError,
    RemoteFault,
    SubscriptionStateError,
    TransportError,
)
from .invocation import Channel, Fault, Invocation, InvocationLayer, Reply, Value, classify_reply

__all__ = [
    "Channel",
    "ChannelOpenError",
    "DecodeError",
    "Fault",
    "InstrumentsError",
    "Invocation",
    "InvocationLayer",
    "RemoteFault",
    "Reply",
    "SubscriptionStateError",
    "TransportError",
    "Value",
    "classify_reply",
]
