"""Control-plane client for the DTX instruments services."""

__version__ = "0.3.0"

import logging

from .config.settings import ClientConfig, load_client_config
from .protocol.structures import Application, DeviceInfo, LaunchConfig, Process, SysmontapConfig
from .rpc.errors import (
    ChannelOpenError,
    DecodeError,
    InstrumentsError,
    RemoteFault,
    SubscriptionStateError,
    TransportError,
)
from .services.instruments import InstrumentsService
from .services.sysmontap import SysmontapSubscription

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Application",
    "ChannelOpenError",
    "ClientConfig",
    "DecodeError",
    "DeviceInfo",
    "InstrumentsError",
    "InstrumentsService",
    "LaunchConfig",
    "Process",
    "RemoteFault",
    "SubscriptionStateError",
    "SysmontapConfig",
    "SysmontapSubscription",
    "TransportError",
    "load_client_config",
]
