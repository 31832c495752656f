"""Typed records exchanged with the instruments services.

SINGLE SOURCE OF TRUTH for wire field names. Python attribute names are
mapped to the remote keys through ``rename`` so ``msgspec.convert`` reads
the generic records directly and ``msgspec.to_builtins`` writes them back.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Any

import msgspec

from . import protocol
from .objects import Object

if TYPE_CHECKING:
    from ..config.settings import ClientConfig


class WireRecord(msgspec.Struct, frozen=True):
    """Base class for records decoded from generic key/value mappings."""

    def to_record(self) -> dict[str, Object]:
        """Encode back into the flat key/value record the remote side uses."""
        return msgspec.to_builtins(self, builtin_types=(datetime, bytes))


# --- Result records ---


class Process(
    WireRecord,
    frozen=True,
    rename={
        "is_application": "isApplication",
        "real_app_name": "realAppName",
        "start_date": "startDate",
    },
):
    pid: int
    name: str
    is_application: bool = False
    real_app_name: str = ""
    start_date: datetime | None = None


class Application(
    WireRecord,
    frozen=True,
    rename={
        "bundle_identifier": "CFBundleIdentifier",
        "display_name": "DisplayName",
        "type": "Type",
        "version": "Version",
        "restricted": "Restricted",
        "bundle_path": "BundlePath",
        "executable_name": "ExecutableName",
        "app_extension_uuids": "AppExtensionUUIDs",
        "container_bundle_identifier": "ContainerBundleIdentifier",
        "container_bundle_path": "ContainerBundlePath",
        "placeholder": "Placeholder",
        "plugin_identifier": "PluginIdentifier",
        "plugin_uuid": "PluginUUID",
    },
):
    bundle_identifier: str
    display_name: str
    type: str
    version: str
    restricted: int
    bundle_path: str
    executable_name: str = ""
    app_extension_uuids: list[str] = msgspec.field(default_factory=list)
    container_bundle_identifier: str = ""
    container_bundle_path: str = ""
    placeholder: bool = False
    plugin_identifier: str = ""
    plugin_uuid: str = ""


class DeviceInfo(
    WireRecord,
    frozen=True,
    rename={
        "description": "_deviceDescription",
        "display_name": "_deviceDisplayName",
        "identifier": "_deviceIdentifier",
        "version": "_deviceVersion",
        "product_type": "_productType",
        "product_version": "_productVersion",
        "xr_device_class_name": "_xrdeviceClassName",
    },
):
    description: str
    display_name: str
    identifier: str
    version: str
    product_type: str
    product_version: str
    xr_device_class_name: str = ""


# --- Request records ---


class SysmontapConfig(
    WireRecord,
    frozen=True,
    rename={
        "sample_rate": "ur",
        "baseline_mode": "bm",
        "proc_attrs": "procAttrs",
        "sys_attrs": "sysAttrs",
        "cpu_usage": "cpuUsage",
        "sample_interval": "sampleInterval",
    },
):
    """Sampling configuration sent with ``setConfig:`` before ``start``."""

    sample_rate: Annotated[int, msgspec.Meta(gt=0)] = 1000
    baseline_mode: Annotated[int, msgspec.Meta(ge=0)] = 0
    proc_attrs: tuple[str, ...] = ()
    sys_attrs: tuple[str, ...] = ()
    cpu_usage: bool = True
    # Nanoseconds, the remote side reads a duration.
    sample_interval: Annotated[int, msgspec.Meta(gt=0)] = protocol.NANOSECONDS_PER_SECOND

    @classmethod
    def from_config(cls, config: ClientConfig) -> SysmontapConfig:
        raw = {
            "ur": config.sysmontap_sample_rate,
            "bm": config.sysmontap_baseline_mode,
            "procAttrs": list(config.sysmontap_proc_attrs),
            "sysAttrs": list(config.sysmontap_sys_attrs),
            "cpuUsage": config.sysmontap_cpu_usage,
            "sampleInterval": int(round(config.sysmontap_interval * protocol.NANOSECONDS_PER_SECOND)),
        }
        return msgspec.convert(raw, cls, strict=True)


def _default_launch_options() -> dict[str, Any]:
    return {
        protocol.LAUNCH_OPTION_START_SUSPENDED: 0,
        protocol.LAUNCH_OPTION_KILL_EXISTING: 0,
    }


class LaunchConfig(msgspec.Struct, frozen=True):
    """Arguments for ``launchSuspendedProcessWithDevicePath:...``.

    An empty ``app_path`` lets the remote side use the bundle's default
    executable. Options are passed through untouched, unknown keys included.
    """

    app_path: str = ""
    environment: dict[str, Any] = msgspec.field(default_factory=dict)
    arguments: list[Any] = msgspec.field(default_factory=list)
    options: dict[str, Any] = msgspec.field(default_factory=_default_launch_options)

    def with_options(self, *updates: Mapping[str, Any], **options: Any) -> LaunchConfig:
        """Return a copy with *updates* merged in order; later keys win."""
        merged = dict(self.options)
        for update in updates:
            merged.update(update)
        merged.update(options)
        return msgspec.structs.replace(self, options=merged)

    def start_suspended(self, enabled: bool = True) -> LaunchConfig:
        return self.with_options({protocol.LAUNCH_OPTION_START_SUSPENDED: int(enabled)})

    def kill_existing(self, enabled: bool = True) -> LaunchConfig:
        return self.with_options({protocol.LAUNCH_OPTION_KILL_EXISTING: int(enabled)})

    def to_arguments(self, bundle_id: str) -> list[Object]:
        return [
            self.app_path,
            bundle_id,
            dict(self.environment),
            list(self.arguments),
            dict(self.options),
        ]


__all__ = [
    "Application",
    "DeviceInfo",
    "LaunchConfig",
    "Process",
    "SysmontapConfig",
    "WireRecord",
]
