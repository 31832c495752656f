"""Settings loader for the dtxclient library.

Configuration is read from an optional TOML file (table ``[dtxclient]``),
located through the ``path`` argument or the ``DTXCLIENT_CONFIG`` environment
variable, with defaults taken from ``ClientConfig`` itself. Individual
settings are never overridden from the environment.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..const import (
    CONFIG_PATH_ENV,
    DEFAULT_DEBUG_LOGGING,
    DEFAULT_INVOKE_TIMEOUT,
    DEFAULT_LOG_HANDLER,
    DEFAULT_METRICS_ENABLED,
    DEFAULT_SYSMONTAP_BASELINE_MODE,
    DEFAULT_SYSMONTAP_CPU_USAGE,
    DEFAULT_SYSMONTAP_INTERVAL,
    DEFAULT_SYSMONTAP_PROC_ATTRS,
    DEFAULT_SYSMONTAP_SAMPLE_RATE,
    DEFAULT_SYSMONTAP_SYS_ATTRS,
    DEFAULT_SYSLOG_ADDRESS,
    LOG_HANDLER_STREAM,
    LOG_HANDLER_SYSLOG,
)
from .common import parse_bool, parse_float, parse_int, parse_names, read_config_file

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ClientConfig:
    """Strongly typed configuration for the client."""

    invoke_timeout: float = DEFAULT_INVOKE_TIMEOUT
    debug_logging: bool = DEFAULT_DEBUG_LOGGING
    log_handler: str = DEFAULT_LOG_HANDLER
    syslog_address: str = DEFAULT_SYSLOG_ADDRESS
    metrics_enabled: bool = DEFAULT_METRICS_ENABLED
    sysmontap_sample_rate: int = DEFAULT_SYSMONTAP_SAMPLE_RATE
    sysmontap_baseline_mode: int = DEFAULT_SYSMONTAP_BASELINE_MODE
    sysmontap_interval: float = DEFAULT_SYSMONTAP_INTERVAL
    sysmontap_cpu_usage: bool = DEFAULT_SYSMONTAP_CPU_USAGE
    sysmontap_proc_attrs: tuple[str, ...] = DEFAULT_SYSMONTAP_PROC_ATTRS
    sysmontap_sys_attrs: tuple[str, ...] = DEFAULT_SYSMONTAP_SYS_ATTRS

    def __post_init__(self) -> None:
        if self.invoke_timeout < 0:
            raise ValueError("invoke_timeout must be zero (disabled) or positive")
        self.log_handler = self.log_handler.strip().lower()
        if self.log_handler not in (LOG_HANDLER_STREAM, LOG_HANDLER_SYSLOG):
            raise ValueError(f"log_handler must be '{LOG_HANDLER_STREAM}' or '{LOG_HANDLER_SYSLOG}'")
        if self.log_handler == LOG_HANDLER_SYSLOG and not self.syslog_address:
            raise ValueError("syslog_address is required for the syslog handler")
        self.sysmontap_sample_rate = self._require_positive("sysmontap_sample_rate", self.sysmontap_sample_rate)
        if self.sysmontap_baseline_mode < 0:
            raise ValueError("sysmontap_baseline_mode must not be negative")
        if self.sysmontap_interval <= 0:
            raise ValueError("sysmontap_interval must be a positive number")
        if not self.sysmontap_proc_attrs and not self.sysmontap_sys_attrs:
            raise ValueError("sysmontap needs at least one process or system attribute")
        self.sysmontap_proc_attrs = tuple(self.sysmontap_proc_attrs)
        self.sysmontap_sys_attrs = tuple(self.sysmontap_sys_attrs)
        if self.invoke_timeout == 0:
            logger.warning("invoke_timeout is disabled; replies are awaited without bound.")

    @staticmethod
    def _require_positive(name: str, value: int) -> int:
        if value <= 0:
            raise ValueError(f"{name} must be a positive integer")
        return value


def get_default_config() -> dict[str, Any]:
    """Provide default configuration values derived from ``ClientConfig``."""
    return {fi.name: fi.default for fi in dataclasses.fields(ClientConfig)}


def _resolve_path(path: str | os.PathLike[str] | None) -> Path | None:
    if path is not None:
        return Path(path)
    env_path = (os.environ.get(CONFIG_PATH_ENV) or "").strip()
    return Path(env_path) if env_path else None


def load_client_config(path: str | os.PathLike[str] | None = None) -> ClientConfig:
    """Load configuration from a TOML file, falling back to defaults."""
    defaults = get_default_config()
    config_path = _resolve_path(path)
    raw: dict[str, Any] = read_config_file(config_path) if config_path is not None else {}

    unknown = sorted(set(raw) - set(defaults))
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    config = ClientConfig(
        invoke_timeout=parse_float(raw.get("invoke_timeout"), DEFAULT_INVOKE_TIMEOUT),
        debug_logging=parse_bool(raw.get("debug_logging", DEFAULT_DEBUG_LOGGING)),
        log_handler=str(raw.get("log_handler", DEFAULT_LOG_HANDLER)),
        syslog_address=str(raw.get("syslog_address", DEFAULT_SYSLOG_ADDRESS)),
        metrics_enabled=parse_bool(raw.get("metrics_enabled", DEFAULT_METRICS_ENABLED)),
        sysmontap_sample_rate=parse_int(raw.get("sysmontap_sample_rate"), DEFAULT_SYSMONTAP_SAMPLE_RATE),
        sysmontap_baseline_mode=parse_int(raw.get("sysmontap_baseline_mode"), DEFAULT_SYSMONTAP_BASELINE_MODE),
        sysmontap_interval=parse_float(raw.get("sysmontap_interval"), DEFAULT_SYSMONTAP_INTERVAL),
        sysmontap_cpu_usage=parse_bool(raw.get("sysmontap_cpu_usage", DEFAULT_SYSMONTAP_CPU_USAGE)),
        sysmontap_proc_attrs=parse_names(raw.get("sysmontap_proc_attrs"), DEFAULT_SYSMONTAP_PROC_ATTRS),
        sysmontap_sys_attrs=parse_names(raw.get("sysmontap_sys_attrs"), DEFAULT_SYSMONTAP_SYS_ATTRS),
    )
    logger.debug(
        "Client configuration loaded",
        extra={"source": str(config_path) if config_path is not None else "defaults"},
    )
    return config


__all__ = ["ClientConfig", "get_default_config", "load_client_config"]
