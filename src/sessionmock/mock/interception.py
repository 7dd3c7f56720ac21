"""
SessionMock Interception Point

The single place where a request is turned into either a simulated task or a
decision to let the real network handle it.

Host seams (MockSession.data_task, MockAdapter.send) call create_task() where
they would otherwise create a real request. The outcome is a typed
TaskCreation rather than an exception, so callers branch on it; unwrap()
gives back raising behavior.

Rejected requests abort task creation entirely: no simulated task and no
real task is created.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Pattern, Union

from ..common.config import DebugLevel, MockConfig
from ..common.errors import RequiredButUnmockedError
from .registry import MockRegistry
from .request import Request, RequestLike, coerce_request
from .response import ResponseSpec
from .rules import ResponseGenerator
from .task import SimulatedTask


class EvaluationResult(Enum):
    """What to do with a request that no mock matched."""

    PASS_THROUGH = "pass_through"
    REJECT = "reject"


RequestEvaluator = Callable[[Request], EvaluationResult]


def pass_through_evaluator(request: Request) -> EvaluationResult:
    """Default evaluator: unmatched requests go to the network."""
    return EvaluationResult.PASS_THROUGH


def reject_evaluator(request: Request) -> EvaluationResult:
    """Evaluator for tests that must not touch the network at all."""
    return EvaluationResult.REJECT


class CreationOutcome(Enum):
    MOCKED = "mocked"
    PASS_THROUGH = "pass_through"
    REJECTED = "rejected"


@dataclass(frozen=True)
class TaskCreation:
    """Result of asking the interception point for a task."""

    outcome: CreationOutcome
    request: Request
    task: Optional[SimulatedTask] = None
    error: Optional[RequiredButUnmockedError] = None

    @property
    def mocked(self) -> bool:
        return self.outcome is CreationOutcome.MOCKED

    @property
    def pass_through(self) -> bool:
        return self.outcome is CreationOutcome.PASS_THROUGH

    @property
    def rejected(self) -> bool:
        return self.outcome is CreationOutcome.REJECTED

    def unwrap(self) -> Optional[SimulatedTask]:
        """
        Return the simulated task (None for pass-through).

        Raises:
            RequiredButUnmockedError: If the request was rejected
        """
        if self.error is not None:
            raise self.error
        return self.task


class InterceptionPoint:
    """
    Owns a mock registry, the request evaluator and the install state.

    The seam is installed at most once and never uninstalled: mocks are turned
    off by clearing the registry. Installation happens on the first mock
    registration, on the first non-default evaluator, or explicitly.

    Example:
        interception = InterceptionPoint()
        interception.mock_once('https://api.example.com/me', json={'id': 1})
        interception.request_evaluator = reject_evaluator

        creation = interception.create_task('https://api.example.com/me', session)
        creation.unwrap().start()
    """

    def __init__(self, registry: Optional[MockRegistry] = None, config: Optional[MockConfig] = None):
        """
        Initialize interception point.

        Args:
            registry: Registry to resolve against (created from config if None)
            config: Optional MockConfig (defaults, debug level, log level)
        """
        self.config = config or MockConfig()
        self.registry = registry if registry is not None else MockRegistry(self.config.default_delay)

        self.logger = logging.getLogger("sessionmock.mock")
        self.config.apply_log_level(self.logger)

        self._evaluator: RequestEvaluator = pass_through_evaluator
        self._debug_level = DebugLevel.NONE
        self.debug_level = self.config.debug_level

        self._installed = False
        self._install_lock = threading.Lock()

    # Installation

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self):
        """Activate the seam. Repeated calls are no-ops."""
        with self._install_lock:
            if self._installed:
                return
            self._installed = True
        self.logger.info("Request creation now intercepted by sessionmock")

    # Evaluator and debug level

    @property
    def request_evaluator(self) -> RequestEvaluator:
        return self._evaluator

    @request_evaluator.setter
    def request_evaluator(self, evaluator: RequestEvaluator):
        self._evaluator = evaluator
        if evaluator is not pass_through_evaluator:
            self.install()

    def reset_request_evaluator(self):
        """Restore the pass-through default. The seam stays installed."""
        self._evaluator = pass_through_evaluator

    @property
    def debug_level(self) -> DebugLevel:
        return self._debug_level

    @debug_level.setter
    def debug_level(self, level: Union[DebugLevel, str]):
        if isinstance(level, str):
            level = DebugLevel.parse(level)
        self._debug_level = level
        if level is not DebugLevel.NONE and not self.logger.isEnabledFor(logging.INFO):
            self.logger.setLevel(logging.INFO)

    # Registration

    def mock_once(self, request: RequestLike, response: Optional[ResponseSpec] = None,
                  delay: Optional[float] = None, **response_kwargs: Any):
        """Register a single-use mock. See MockRegistry.mock_once."""
        self.install()
        self.registry.mock_once(request, response, delay, **response_kwargs)

    def mock_always(self, request: RequestLike, response: Optional[ResponseSpec] = None,
                    delay: Optional[float] = None, **response_kwargs: Any):
        """Register a repeatable mock. See MockRegistry.mock_always."""
        self.install()
        self.registry.mock_always(request, response, delay, **response_kwargs)

    def mock_pattern(self, pattern: Union[str, Pattern],
                     response: Union[ResponseSpec, ResponseGenerator, None] = None,
                     delay: Optional[float] = None, **response_kwargs: Any):
        """Register a repeatable pattern mock. See MockRegistry.mock_pattern."""
        self.install()
        self.registry.mock_pattern(pattern, response, delay, **response_kwargs)

    def clear_all_mocks(self):
        """Empty the registry. Evaluator, debug level and install state are kept."""
        self.registry.clear_all()

    # Dispatch

    def create_task(self, request: RequestLike, owner: Any) -> TaskCreation:
        """
        Decide how a request is served.

        Args:
            request: The request the host is about to create
            owner: Session-like owner of the resulting task (see mock.task)

        Returns:
            TaskCreation: MOCKED with an idle SimulatedTask, PASS_THROUGH, or
            REJECTED with a RequiredButUnmockedError

        Raises:
            TypeError: If the request evaluator returns something other than
                an EvaluationResult
        """
        request = coerce_request(request)

        resolved = self.registry.resolve(request)
        if resolved is not None:
            if self._debug_level is not DebugLevel.NONE:
                self.logger.info(f"request: {request} mocked")
            task = SimulatedTask(
                owner.next_task_identifier(),
                request,
                resolved.response,
                resolved.delay,
                owner
            )
            return TaskCreation(CreationOutcome.MOCKED, request, task=task)

        verdict = self._evaluator(request)
        if not isinstance(verdict, EvaluationResult):
            raise TypeError(f"Request evaluator must return an EvaluationResult, got {verdict!r}")
        if verdict is EvaluationResult.REJECT:
            error = RequiredButUnmockedError(request)
            self.logger.warning(str(error))
            return TaskCreation(CreationOutcome.REJECTED, request, error=error)

        if self._debug_level is DebugLevel.ALL:
            self.logger.info(f"request: {request} not mocked")
        return TaskCreation(CreationOutcome.PASS_THROUGH, request)


default_interception = InterceptionPoint(config=MockConfig.from_env())
