"""Pytest configuration for dtxclient tests."""

from __future__ import annotations

import asyncio
import importlib.util
import inspect
import logging

import pytest

from dtxclient.config.settings import ClientConfig
from dtxclient.metrics import ClientMetrics
from dtxclient.services.instruments import InstrumentsService

from .mocks import CapturingSink, FakeTransport

_HAS_PYTEST_ASYNCIO = importlib.util.find_spec("pytest_asyncio") is not None


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test to run on asyncio loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Fallback asyncio runner when pytest-asyncio is unavailable."""
    if _HAS_PYTEST_ASYNCIO:
        return None
    if "asyncio" not in pyfuncitem.keywords:
        return None
    test_function = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_function):
        return None

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        kwargs = {name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames}
        loop.run_until_complete(test_function(**kwargs))
    finally:
        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
        except (RuntimeError, ValueError):
            pass
        loop.close()
        asyncio.set_event_loop(None)
    return True


@pytest.fixture(autouse=True)
def reset_logging_handlers():
    """Close and remove all logging handlers after each test to prevent ResourceWarnings."""
    yield
    package_logger = logging.getLogger("dtxclient")
    for handler in package_logger.handlers[:]:
        if isinstance(handler, logging.NullHandler):
            continue
        handler.close()
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    root = logging.getLogger()
    for handler in root.handlers[:]:
        try:
            handler.close()
        except (OSError, RuntimeError):
            pass
        root.removeHandler(handler)


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(invoke_timeout=1.0)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sink() -> CapturingSink:
    return CapturingSink()


@pytest.fixture
def metrics() -> ClientMetrics:
    return ClientMetrics()


@pytest.fixture
def service(
    transport: FakeTransport,
    client_config: ClientConfig,
    sink: CapturingSink,
    metrics: ClientMetrics,
) -> InstrumentsService:
    return InstrumentsService(transport, config=client_config, sink=sink, metrics=metrics)
