"""Tests for typed record decoding."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from dtxclient.metrics import ClientMetrics
from dtxclient.protocol.structures import Application, DeviceInfo, Process
from dtxclient.rpc.errors import DecodeError
from dtxclient.services.decoder import decode_many, decode_one

from .mocks import CapturingSink


def test_decode_one_process_with_optional_fields() -> None:
    started = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    process = decode_one(
        {"pid": 88, "name": "MobileSafari", "isApplication": True, "realAppName": "/App", "startDate": started},
        Process,
    )
    assert process.pid == 88
    assert process.is_application is True
    assert process.real_app_name == "/App"
    assert process.start_date == started


def test_decode_one_ignores_unknown_keys() -> None:
    process = decode_one({"pid": 1, "name": "launchd", "unknownKey": [1, 2]}, Process)
    assert process == Process(pid=1, name="launchd")


@pytest.mark.parametrize(
    "raw",
    [
        {"name": "no pid"},
        {"pid": "1", "name": "string pid"},
        {"pid": 1},
        "not a record",
        None,
    ],
)
def test_decode_one_rejects_malformed(raw: object) -> None:
    with pytest.raises(DecodeError) as excinfo:
        decode_one(raw, Process)
    assert excinfo.value.raw == raw


def test_device_info_missing_required_field() -> None:
    raw = {
        "_deviceDescription": "iPhone",
        "_deviceDisplayName": "Test Phone",
        "_deviceIdentifier": "abc",
        "_deviceVersion": "17.0",
        "_productVersion": "17.0",
    }
    with pytest.raises(DecodeError, match="_productType"):
        decode_one(raw, DeviceInfo)


def test_decode_many_skips_malformed_entries() -> None:
    sink = CapturingSink()
    metrics = ClientMetrics()
    raw = [
        {"pid": 1, "name": "launchd"},
        {"name": "missing pid"},
        "garbage",
        {"pid": 2, "name": "backboardd"},
    ]

    report = decode_many(raw, Process, sink=sink, metrics=metrics, kind="process")

    assert len(report) == len(raw) - 2
    assert [p.name for p in report] == ["launchd", "backboardd"]
    assert report.skipped == [{"name": "missing pid"}, "garbage"]
    assert report.skipped_count == 2
    assert [kind for kind, _, _ in sink.skipped] == ["process", "process"]
    assert all(isinstance(err, DecodeError) for _, _, err in sink.skipped)
    assert [record for _, record in sink.decoded] == report.items
    assert metrics.records_decoded == 2
    assert metrics.records_skipped == 2


def test_decode_many_round_trips_required_fields() -> None:
    raw = [{"pid": 10, "name": "a"}, {"pid": 11, "name": "b"}]
    report = decode_many(raw, Process, sink=CapturingSink())
    for entry, record in zip(raw, report, strict=True):
        encoded = record.to_record()
        assert encoded["pid"] == entry["pid"]
        assert encoded["name"] == entry["name"]


def test_decode_many_empty_list() -> None:
    report = decode_many([], Process, sink=CapturingSink())
    assert report.kept == 0
    assert list(report) == []


@pytest.mark.parametrize("raw", [None, {"pid": 1, "name": "x"}, "text"])
def test_decode_many_requires_a_list(raw: object) -> None:
    with pytest.raises(DecodeError, match="expected a list"):
        decode_many(raw, Process, sink=CapturingSink())


APPLICATION = {
    "CFBundleIdentifier": "com.apple.mobilesafari",
    "DisplayName": "Safari",
    "Type": "System",
    "Version": "17.4",
    "Restricted": 0,
    "BundlePath": "/Applications/MobileSafari.app",
}

DEVICE_INFO = {
    "_deviceDescription": "iPhone running iOS",
    "_deviceDisplayName": "Test Phone",
    "_deviceIdentifier": "abc",
    "_deviceVersion": "17.4",
    "_productType": "iPhone12,1",
    "_productVersion": "17.4",
}


def test_decode_many_round_trips_application_required_fields() -> None:
    second = dict(APPLICATION, CFBundleIdentifier="com.apple.Preferences", Restricted=1)
    raw = [APPLICATION, second]

    report = decode_many(raw, Application, sink=CapturingSink())

    assert len(report) == 2
    for entry, record in zip(raw, report, strict=True):
        encoded = record.to_record()
        for key in ("CFBundleIdentifier", "DisplayName", "Type", "Version", "Restricted", "BundlePath"):
            assert encoded[key] == entry[key]


def test_null_optional_application_field_uses_default() -> None:
    raw = [dict(APPLICATION, ExecutableName=None, AppExtensionUUIDs=None), APPLICATION]

    report = decode_many(raw, Application, sink=CapturingSink())

    assert report.kept == 2
    assert report.skipped == []
    assert report[0].executable_name == ""
    assert report[0].app_extension_uuids == []


def test_null_optional_device_field_uses_default() -> None:
    info = decode_one(dict(DEVICE_INFO, _xrdeviceClassName=None), DeviceInfo)
    assert info.xr_device_class_name == ""
    assert info.product_type == "iPhone12,1"


def test_null_required_field_still_fails() -> None:
    with pytest.raises(DecodeError, match="_productType"):
        decode_one(dict(DEVICE_INFO, _productType=None), DeviceInfo)

    report = decode_many([dict(APPLICATION, BundlePath=None)], Application, sink=CapturingSink())
    assert report.kept == 0
    assert report.skipped_count == 1


def test_null_optional_process_date() -> None:
    process = decode_one({"pid": 3, "name": "logd", "startDate": None, "realAppName": None}, Process)
    assert process.start_date is None
    assert process.real_app_name == ""
