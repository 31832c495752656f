"""Tests for the selector invocation layer."""

from __future__ import annotations

import asyncio

import pytest

from dtxclient.metrics import ClientMetrics
from dtxclient.protocol.objects import NSError
from dtxclient.rpc.errors import ChannelOpenError, DecodeError, RemoteFault, TransportError
from dtxclient.rpc.invocation import Channel, Fault, Invocation, InvocationLayer, Value, classify_reply

from .mocks import HANG, FakeTransport

NOT_ALLOWED = {"NSUserInfo": {"NSLocalizedDescription": "Not allowed"}}


@pytest.fixture
def layer(transport: FakeTransport, metrics: ClientMetrics) -> InvocationLayer:
    return InvocationLayer(transport, timeout=0.05, metrics=metrics)


def test_classify_reply_value_and_fault() -> None:
    assert classify_reply(5) == Value(value=5)
    assert classify_reply(None) == Value(value=None)
    assert classify_reply(NOT_ALLOWED, "sel") == Fault(message="Not allowed", selector="sel")
    assert isinstance(classify_reply(NSError(domain="X", code=3)), Fault)


def test_fault_unwrap_raises_remote_fault() -> None:
    fault = Fault(message="Not allowed", selector="killPid:")
    with pytest.raises(RemoteFault) as excinfo:
        fault.unwrap()
    assert excinfo.value.message == "Not allowed"
    assert excinfo.value.selector == "killPid:"


def test_invocation_is_immutable() -> None:
    invocation = Invocation(selector="start", channel=Channel(service="svc", identifier=1))
    with pytest.raises(AttributeError):
        invocation.selector = "stop"  # type: ignore[misc]


@pytest.mark.asyncio
async def test_invoke_returns_value(layer: InvocationLayer, transport: FakeTransport) -> None:
    transport.replies["runningProcesses"] = [{"pid": 1, "name": "launchd"}]

    reply = await layer.invoke("svc.deviceinfo", "runningProcesses")

    assert reply == Value(value=[{"pid": 1, "name": "launchd"}])
    assert transport.opened == [("svc.deviceinfo", 1)]
    assert transport.last("runningProcesses").channel_id == 1


@pytest.mark.asyncio
async def test_fault_reply_is_classified_not_raised(
    layer: InvocationLayer,
    transport: FakeTransport,
    metrics: ClientMetrics,
) -> None:
    transport.replies["launch"] = NOT_ALLOWED

    reply = await layer.invoke("svc", "launch", ["x"])

    assert isinstance(reply, Fault)
    assert reply.message == "Not allowed"
    assert metrics.remote_faults == 1
    assert metrics.transport_errors == 0


@pytest.mark.asyncio
async def test_empty_reply_is_a_value(layer: InvocationLayer, transport: FakeTransport) -> None:
    reply = await layer.invoke("svc", "startObservingPid:", [12])
    assert reply == Value(value=None)


@pytest.mark.asyncio
async def test_fire_and_forget_returns_none(
    layer: InvocationLayer,
    transport: FakeTransport,
    metrics: ClientMetrics,
) -> None:
    transport.replies["killPid:"] = 99

    assert await layer.invoke("svc", "killPid:", [7], expects_reply=False) is None
    assert transport.last("killPid:").expects_reply is False
    assert metrics.fire_and_forget == 1
    assert metrics.replies == 0


@pytest.mark.asyncio
async def test_timeout_surfaces_as_transport_error(
    layer: InvocationLayer,
    transport: FakeTransport,
    metrics: ClientMetrics,
) -> None:
    transport.replies["runningProcesses"] = HANG

    with pytest.raises(TransportError, match="timed out"):
        await layer.invoke("svc", "runningProcesses")
    assert metrics.transport_errors == 1


@pytest.mark.asyncio
async def test_connection_failure_is_wrapped(layer: InvocationLayer, transport: FakeTransport) -> None:
    transport.replies["runningProcesses"] = ConnectionResetError("peer went away")

    with pytest.raises(TransportError, match="peer went away") as excinfo:
        await layer.invoke("svc", "runningProcesses")
    assert not isinstance(excinfo.value, ChannelOpenError)
    assert isinstance(excinfo.value.__cause__, ConnectionResetError)


@pytest.mark.asyncio
async def test_channel_open_failure_sends_nothing(
    layer: InvocationLayer,
    transport: FakeTransport,
    metrics: ClientMetrics,
) -> None:
    transport.open_errors["svc"] = OSError("no such service")

    with pytest.raises(ChannelOpenError) as excinfo:
        await layer.invoke("svc", "runningProcesses")

    assert excinfo.value.service == "svc"
    assert isinstance(excinfo.value, TransportError)
    assert transport.invocations == []
    assert metrics.channel_open_failures == 1


@pytest.mark.asyncio
async def test_channel_open_timeout(transport: FakeTransport) -> None:
    async def never_opens(service: str) -> int:
        await asyncio.Event().wait()
        return 0

    transport.open_channel = never_opens  # type: ignore[method-assign]
    layer = InvocationLayer(transport, timeout=0.05)

    with pytest.raises(ChannelOpenError, match="timed out"):
        await layer.open_channel("svc")


@pytest.mark.asyncio
async def test_invalid_channel_id_rejected(transport: FakeTransport) -> None:
    async def bogus(service: str) -> object:
        return "seven"

    transport.open_channel = bogus  # type: ignore[method-assign]
    layer = InvocationLayer(transport)

    with pytest.raises(ChannelOpenError, match="invalid channel id"):
        await layer.open_channel("svc")


@pytest.mark.asyncio
async def test_each_call_opens_its_own_channel(layer: InvocationLayer, transport: FakeTransport) -> None:
    await layer.invoke("svc", "a")
    await layer.invoke("svc", "b")

    assert [identifier for _, identifier in transport.opened] == [1, 2]
    assert [inv.channel_id for inv in transport.invocations] == [1, 2]


@pytest.mark.asyncio
async def test_call_unwraps_and_notify_discards(layer: InvocationLayer, transport: FakeTransport) -> None:
    transport.replies["pidForBundleID:"] = 314
    transport.replies["bad"] = NOT_ALLOWED

    assert await layer.call("svc", "pidForBundleID:", ["com.example"]) == 314
    with pytest.raises(RemoteFault, match="Not allowed"):
        await layer.call("svc", "bad")
    assert await layer.notify("svc", "killPid:", [1]) is None


@pytest.mark.asyncio
async def test_zero_timeout_waits_without_bound(transport: FakeTransport) -> None:
    layer = InvocationLayer(transport, timeout=0)
    transport.replies["slow"] = "done"

    assert await layer.call("svc", "slow") == "done"
    assert layer.timeout == 0.0


@pytest.mark.asyncio
async def test_reply_is_normalised_into_object(layer: InvocationLayer, transport: FakeTransport) -> None:
    transport.replies["runningProcesses"] = ({"pid": 1, "name": "launchd", "blob": bytearray(b"\x01")},)

    reply = await layer.invoke("svc", "runningProcesses")

    assert reply == Value(value=[{"pid": 1, "name": "launchd", "blob": b"\x01"}])


@pytest.mark.asyncio
async def test_reply_outside_object_variant_is_decode_error(
    layer: InvocationLayer,
    transport: FakeTransport,
) -> None:
    transport.replies["runningProcesses"] = [{"pid": {1, 2}}]

    with pytest.raises(DecodeError, match="not a valid Object") as excinfo:
        await layer.invoke("svc", "runningProcesses")
    assert excinfo.value.raw == [{"pid": {1, 2}}]
