"""
SessionMock

Canned responses for outgoing HTTP requests, so code under test runs without
touching the network.

The functions below operate on the process-wide default interception point.
Tests that want isolation can build their own InterceptionPoint (and
MockRegistry) and hand it to MockSession or MockAdapter.
"""

from pathlib import Path
from typing import Any, Optional, Pattern, Union

from .common import (
    SessionMockError,
    InvalidPatternError,
    RequiredButUnmockedError,
    TaskAlreadyStartedError,
    MockNetworkError,
    FixtureError,
    MockConfig,
    DebugLevel,
    DEFAULT_DELAY,
)
from .mock import (
    Request,
    SuccessResponse,
    FailureResponse,
    ResponseSpec,
    build_response,
    MockRegistry,
    InterceptionPoint,
    EvaluationResult,
    TaskCreation,
    SimulatedTask,
    TaskState,
    ResponseMetadata,
    ThreadingScheduler,
    DeliveryQueue,
    pass_through_evaluator,
    reject_evaluator,
    default_interception,
)
from .mock import fixtures as _fixtures
from .mock.request import RequestLike
from .mock.rules import ResponseGenerator
from .session import MockSession, SessionObserver, LiveTask, MockAdapter, mount_mock_adapter


def mock_once(request: RequestLike, response: Optional[ResponseSpec] = None,
              delay: Optional[float] = None, **response_kwargs: Any):
    """Answer the next request for this URL once. Repeat to queue responses."""
    default_interception.mock_once(request, response, delay, **response_kwargs)


def mock_always(request: RequestLike, response: Optional[ResponseSpec] = None,
                delay: Optional[float] = None, **response_kwargs: Any):
    """Answer every request for this URL."""
    default_interception.mock_always(request, response, delay, **response_kwargs)


def mock_pattern(pattern: Union[str, Pattern],
                 response: Union[ResponseSpec, ResponseGenerator, None] = None,
                 delay: Optional[float] = None, **response_kwargs: Any):
    """Answer every request whose URL matches pattern; response may be a generator."""
    default_interception.mock_pattern(pattern, response, delay, **response_kwargs)


def clear_all_mocks():
    default_interception.clear_all_mocks()


def set_request_evaluator(evaluator):
    """Decide what happens to unmocked requests (PASS_THROUGH or REJECT)."""
    default_interception.request_evaluator = evaluator


def reset_request_evaluator():
    default_interception.reset_request_evaluator()


def set_debug_level(level: Union[DebugLevel, str]):
    default_interception.debug_level = level


def install():
    """Activate interception explicitly. Idempotent."""
    default_interception.install()


def register_fixtures(file_path: Union[str, Path]) -> int:
    """Register every mock declared in a YAML/JSON fixture file."""
    return _fixtures.register_fixtures(file_path, default_interception)


__all__ = [
    # Convenience API
    'mock_once',
    'mock_always',
    'mock_pattern',
    'clear_all_mocks',
    'set_request_evaluator',
    'reset_request_evaluator',
    'set_debug_level',
    'install',
    'register_fixtures',

    # Engine
    'Request',
    'SuccessResponse',
    'FailureResponse',
    'ResponseSpec',
    'build_response',
    'MockRegistry',
    'InterceptionPoint',
    'EvaluationResult',
    'TaskCreation',
    'SimulatedTask',
    'TaskState',
    'ResponseMetadata',
    'ThreadingScheduler',
    'DeliveryQueue',
    'pass_through_evaluator',
    'reject_evaluator',
    'default_interception',

    # Sessions
    'MockSession',
    'SessionObserver',
    'LiveTask',
    'MockAdapter',
    'mount_mock_adapter',

    # Config and errors
    'MockConfig',
    'DebugLevel',
    'DEFAULT_DELAY',
    'SessionMockError',
    'InvalidPatternError',
    'RequiredButUnmockedError',
    'TaskAlreadyStartedError',
    'MockNetworkError',
    'FixtureError',
]

__version__ = '1.0.0'
