"""
Shared fixtures for sessionmock tests.

Most tests use a private InterceptionPoint so they never touch the
process-wide registry; tests of the top-level API use the session_mock
fixture from the sessionmock pytest plugin instead.
"""

import pytest

from sessionmock.mock import InterceptionPoint, MockRegistry
from sessionmock.session import MockSession
from sessionmock.testing import InlineDeliveryQueue, RecordingObserver, VirtualScheduler


@pytest.fixture
def registry():
    """Empty registry with the standard default delay."""
    return MockRegistry(default_delay=0.25)


@pytest.fixture
def interception(registry):
    """Private interception point around the registry fixture."""
    return InterceptionPoint(registry=registry)


@pytest.fixture
def scheduler():
    return VirtualScheduler()


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def session(interception, scheduler, observer):
    """Deterministic session: virtual clock, inline delivery."""
    session = MockSession(
        observer=observer,
        delivery_queue=InlineDeliveryQueue(),
        scheduler=scheduler,
        interception=interception
    )
    yield session
    session.invalidate()
