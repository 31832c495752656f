"""Shared constants for dtxclient components."""

from __future__ import annotations

from typing import Final

DEFAULT_INVOKE_TIMEOUT: Final[float] = 30.0
DEFAULT_DEBUG_LOGGING: Final[bool] = False
DEFAULT_METRICS_ENABLED: Final[bool] = False

DEFAULT_SYSMONTAP_SAMPLE_RATE: Final[int] = 1000
DEFAULT_SYSMONTAP_BASELINE_MODE: Final[int] = 0
DEFAULT_SYSMONTAP_INTERVAL: Final[float] = 1.0
DEFAULT_SYSMONTAP_CPU_USAGE: Final[bool] = True

DEFAULT_SYSMONTAP_PROC_ATTRS: Final[tuple[str, ...]] = (
    "pid",
    "cpuUsage",
    "threadCount",
    "memVirtualSize",
    "vmPageIns",
    "memRShrd",
    "memCompressed",
)

DEFAULT_SYSMONTAP_SYS_ATTRS: Final[tuple[str, ...]] = (
    "diskWriteOps",
    "diskBytesRead",
    "diskBytesWritten",
    "threadCount",
    "vmCompressorPageCount",
    "vmExtPageCount",
    "vmFreeCount",
    "vmIntPageCount",
    "vmPurgeableCount",
    "netPacketsIn",
    "vmWireCount",
    "netBytesIn",
    "netPacketsOut",
    "diskReadOps",
    "vmUsedCount",
    "__vmSwapUsage",
    "netBytesOut",
)

CONFIG_SECTION: Final[str] = "dtxclient"
CONFIG_PATH_ENV: Final[str] = "DTXCLIENT_CONFIG"

LOG_HANDLER_STREAM: Final[str] = "stream"
LOG_HANDLER_SYSLOG: Final[str] = "syslog"
DEFAULT_LOG_HANDLER: Final[str] = LOG_HANDLER_STREAM
DEFAULT_SYSLOG_ADDRESS: Final[str] = "/dev/log"

__all__ = [
    "CONFIG_PATH_ENV",
    "CONFIG_SECTION",
    "DEFAULT_DEBUG_LOGGING",
    "DEFAULT_INVOKE_TIMEOUT",
    "DEFAULT_LOG_HANDLER",
    "DEFAULT_METRICS_ENABLED",
    "DEFAULT_SYSMONTAP_BASELINE_MODE",
    "DEFAULT_SYSMONTAP_CPU_USAGE",
    "DEFAULT_SYSMONTAP_INTERVAL",
    "DEFAULT_SYSMONTAP_PROC_ATTRS",
    "DEFAULT_SYSMONTAP_SAMPLE_RATE",
    "DEFAULT_SYSMONTAP_SYS_ATTRS",
    "DEFAULT_SYSLOG_ADDRESS",
    "LOG_HANDLER_STREAM",
    "LOG_HANDLER_SYSLOG",
]
