"""Configuration helpers for dtxclient."""

from .settings import ClientConfig, get_default_config, load_client_config
from . import common, logging, settings  # noqa: F401

__all__ = ["ClientConfig", "get_default_config", "load_client_config"]
