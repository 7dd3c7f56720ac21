"""
SessionMock Configuration

Process-level knobs for the mocking engine and the live (pass-through) path.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional


# Delay applied to mocks registered without an explicit one. Non-zero so that
# ordering and timing behave like a real round trip.
DEFAULT_DELAY = 0.25


class DebugLevel(Enum):
    """Which resolution outcomes get logged. Purely observational."""

    NONE = "none"
    MOCKED = "mocked"  # log requests answered by a mock
    ALL = "all"  # also log requests passed through to the network

    @classmethod
    def parse(cls, value: str) -> 'DebugLevel':
        """Parse a level from its name or value, case-insensitively."""
        normalized = value.strip().lower()
        for level in cls:
            if normalized in (level.value, level.name.lower()):
                return level
        raise ValueError(f"Unknown debug level: {value!r} (expected none, mocked or all)")


@dataclass
class MockConfig:
    """Configuration for mock resolution and delivery behavior."""

    # Mock behavior
    default_delay: float = DEFAULT_DELAY  # Seconds before a mock's callbacks fire
    debug_level: DebugLevel = DebugLevel.NONE

    # Logging (None leaves the sessionmock loggers untouched)
    log_level: Optional[str] = None

    # Live (pass-through) requests
    live_timeout: float = 30  # Request timeout in seconds
    live_workers: int = 5  # Thread pool size for live requests
    live_chunk_size: int = 16384  # Body bytes per on_data callback

    def __post_init__(self):
        if self.default_delay < 0:
            raise ValueError(f"default_delay must be >= 0, got {self.default_delay}")
        if self.live_workers < 1:
            raise ValueError(f"live_workers must be >= 1, got {self.live_workers}")
        if self.live_chunk_size < 1:
            raise ValueError(f"live_chunk_size must be >= 1, got {self.live_chunk_size}")
        if self.log_level is not None and not isinstance(getattr(logging, self.log_level.upper(), None), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'MockConfig':
        """
        Build a config from SESSIONMOCK_* environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            MockConfig with every unset variable left at its default

        Raises:
            ValueError: If a variable is set to an unparseable value
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        if 'SESSIONMOCK_DEFAULT_DELAY' in env:
            kwargs['default_delay'] = _parse_float(env, 'SESSIONMOCK_DEFAULT_DELAY')
        if 'SESSIONMOCK_LIVE_TIMEOUT' in env:
            kwargs['live_timeout'] = _parse_float(env, 'SESSIONMOCK_LIVE_TIMEOUT')
        if 'SESSIONMOCK_DEBUG' in env:
            try:
                kwargs['debug_level'] = DebugLevel.parse(env['SESSIONMOCK_DEBUG'])
            except ValueError as e:
                raise ValueError(f"SESSIONMOCK_DEBUG: {e}") from e
        if 'SESSIONMOCK_LOG_LEVEL' in env:
            kwargs['log_level'] = env['SESSIONMOCK_LOG_LEVEL'].strip().lower()

        return cls(**kwargs)

    def apply_log_level(self, logger: logging.Logger):
        """Set the logger's level from log_level, if one is configured."""
        if self.log_level is not None:
            logger.setLevel(getattr(logging, self.log_level.upper()))


def _parse_float(env: Mapping[str, str], name: str) -> float:
    try:
        return float(env[name])
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {env[name]!r}") from e
