"""
SessionMock Common Utilities

Errors and configuration shared across sessionmock modules.
"""

from .errors import (
    SessionMockError,
    InvalidPatternError,
    RequiredButUnmockedError,
    TaskAlreadyStartedError,
    MockNetworkError,
    FixtureError,
)
from .config import MockConfig, DebugLevel, DEFAULT_DELAY

__all__ = [
    'SessionMockError',
    'InvalidPatternError',
    'RequiredButUnmockedError',
    'TaskAlreadyStartedError',
    'MockNetworkError',
    'FixtureError',
    'MockConfig',
    'DebugLevel',
    'DEFAULT_DELAY',
]
