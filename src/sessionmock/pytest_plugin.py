"""
SessionMock pytest plugin

Registered through the pytest11 entry point, so the fixtures are available as
soon as sessionmock is installed.
"""

import pytest

from .common.config import DebugLevel
from .mock.interception import default_interception
from .session.session import MockSession
from .testing import InlineDeliveryQueue, RecordingObserver, VirtualScheduler


@pytest.fixture
def session_mock():
    """
    The process-wide interception point, clean for this test.

    Mocks are cleared, and the evaluator and debug level reset, on teardown.
    """
    default_interception.clear_all_mocks()
    yield default_interception
    default_interception.clear_all_mocks()
    default_interception.reset_request_evaluator()
    default_interception.debug_level = DebugLevel.NONE


@pytest.fixture
def virtual_session(session_mock):
    """MockSession on a virtual clock with inline delivery and a RecordingObserver."""
    session = MockSession(
        observer=RecordingObserver(),
        delivery_queue=InlineDeliveryQueue(),
        scheduler=VirtualScheduler(),
        interception=session_mock
    )
    yield session
    session.invalidate()
