"""
SessionMock Session Module

Host-side seams that route request creation through the interception point.

This module provides:
- MockSession: task factory with observer callbacks and live fallback
- LiveTask: real requests wearing the task interface
- MockAdapter: requests transport adapter for code using requests directly
"""

from .session import MockSession, SessionObserver
from .live import LiveTask
from .adapter import MockAdapter, mount_mock_adapter

__all__ = [
    'MockSession',
    'SessionObserver',
    'LiveTask',
    'MockAdapter',
    'mount_mock_adapter',
]
