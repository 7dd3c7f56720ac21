"""
SessionMock Errors

Exception hierarchy shared by the mocking engine, the session seams and the
fixture loader.

Registration-time and creation-time problems are raised synchronously.
Response-time failures are never raised: they travel through the observer's
completion callback like a real network error would.
"""

from typing import Any, Optional


class SessionMockError(Exception):
    """Base class for every error raised by sessionmock."""


class InvalidPatternError(SessionMockError, ValueError):
    """A pattern mock was registered with an expression that does not compile."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid mock pattern {pattern!r}: {reason}")


class RequiredButUnmockedError(SessionMockError):
    """
    The request evaluator rejected a request that no mock matched.

    This signals a broken test setup (the test demanded mocked-only traffic
    and live traffic showed up), not a recoverable runtime condition.
    """

    def __init__(self, request: Any):
        self.request = request
        super().__init__(f"Request {request} was not mocked but is required to be mocked")


class TaskAlreadyStartedError(SessionMockError):
    """start() was called on a task that is already running or completed."""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task {task_id} has already been started")


class MockNetworkError(SessionMockError):
    """
    Error value used for failure responses that don't carry their own error.

    Fixture files declare failures with a plain message; this is what the
    observer receives in on_complete for them.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        self.message = message
        self.code = code
        super().__init__(message)


class FixtureError(SessionMockError, ValueError):
    """A mock fixture file is missing, unreadable or malformed."""
