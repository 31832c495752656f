"""Wire contract for the instruments remote services.

Service names and selectors are fixed by the remote side; do not build them
dynamically.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

SERVICE_PREFIX: Final[str] = "com.apple.instruments.server.services."

# Channel 0 is the root channel every DTX connection owns without an open request.
CONTROL_CHANNEL_ID: Final[int] = 0

UINT64_MASK: Final[int] = 0xFFFFFFFFFFFFFFFF
INT64_SIGN_BIT: Final[int] = 1 << 63
NANOSECONDS_PER_SECOND: Final[int] = 1_000_000_000

# Remote-fault shape produced by the codec for NSError payloads.
NS_USER_INFO_KEY: Final[str] = "NSUserInfo"
NS_LOCALIZED_DESCRIPTION_KEY: Final[str] = "NSLocalizedDescription"

LAUNCH_OPTION_START_SUSPENDED: Final[str] = "StartSuspendedKey"
LAUNCH_OPTION_KILL_EXISTING: Final[str] = "KillExisting"

DEFAULT_PUBLISHED_CAPABILITIES: Final[dict[str, int]] = {
    "com.apple.private.DTXBlockCompression": 2,
    "com.apple.private.DTXConnection": 1,
}


class Service(StrEnum):
    PROCESS_CONTROL = SERVICE_PREFIX + "processcontrol"  # Launch / kill / observe
    DEVICE_INFO = SERVICE_PREFIX + "deviceinfo"  # Running processes, system info
    # Remote spelling, keep the missing "a".
    APPLICATION_LISTING = SERVICE_PREFIX + "device.applictionListing"
    SYSMONTAP = SERVICE_PREFIX + "sysmontap"  # Push telemetry


class Selector(StrEnum):
    LAUNCH_SUSPENDED_PROCESS = (
        "launchSuspendedProcessWithDevicePath:bundleIdentifier:environment:arguments:options:"
    )
    PID_FOR_BUNDLE_ID = "processIdentifierForBundleIdentifier:"
    START_OBSERVING_PID = "startObservingPid:"
    KILL_PID = "killPid:"
    RUNNING_PROCESSES = "runningProcesses"
    INSTALLED_APPLICATIONS = "installedApplicationsMatching:registerUpdateToken:"
    SYSTEM_INFORMATION = "systemInformation"
    SET_CONFIG = "setConfig:"
    START = "start"
    STOP = "stop"
    NOTIFY_PUBLISHED_CAPABILITIES = "_notifyOfPublishedCapabilities:"
