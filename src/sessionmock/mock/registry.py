"""
SessionMock Registry

Ordered, thread-safe collection of mock rules.

Rules are tried in registration order and the first match wins. Overlapping
or duplicate rules are legal. Single-use rules are removed in the same
critical section that selects them, so two threads racing for one single-use
rule can never both get it.

Example:
    registry = MockRegistry()
    registry.mock_once('https://api.example.com/users', body='first')
    registry.mock_once('https://api.example.com/users', body='second')
    registry.mock_pattern(r'/users/(\\d+)', lambda url, groups: build_response(groups[0]))

    resolved = registry.resolve(Request('https://api.example.com/users'))
    resolved.response.body  # b'first'
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Pattern, Union

from ..common.config import DEFAULT_DELAY
from .request import Request, RequestLike, coerce_request
from .response import ResponseSpec, build_response
from .rules import (
    ExactOnceRule,
    ExactRepeatableRule,
    MockRule,
    PatternRule,
    ResponseGenerator,
    constant_generator,
)


@dataclass(frozen=True)
class ResolvedMock:
    """Snapshot of a successful resolution. Independent of later registry changes."""

    request: Request
    rule: MockRule
    response: ResponseSpec
    delay: float


class MockRegistry:
    """
    Process-wide (or per-test) store of mock rules.

    Registration helpers accept the same keywords as build_response(); pass a
    ready-made response instead when you need full control.
    """

    def __init__(self, default_delay: float = DEFAULT_DELAY):
        self.default_delay = default_delay
        self._rules: List[MockRule] = []
        self._lock = threading.Lock()
        self.logger = logging.getLogger("sessionmock.mock")

    # Core operations

    def register(self, rule: MockRule):
        """Append a rule. It is tried after every rule registered before it."""
        with self._lock:
            self._rules.append(rule)
        self.logger.debug(f"Registered {rule!r}")

    def resolve(self, request: RequestLike) -> Optional[ResolvedMock]:
        """
        Find the first rule matching a request, consuming it if single-use.

        Args:
            request: The request being created

        Returns:
            ResolvedMock, or None when nothing matches
        """
        request = coerce_request(request)

        with self._lock:
            for index, rule in enumerate(self._rules):
                groups = rule.match(request)
                if groups is None:
                    continue
                if rule.consumable:
                    del self._rules[index]
                break
            else:
                return None

        # Generators run outside the lock so they may use the registry themselves
        response = rule.response_for(request, groups)
        return ResolvedMock(request=request, rule=rule, response=response, delay=rule.delay)

    def clear_all(self):
        """Remove every rule. Tasks already created keep their responses."""
        with self._lock:
            count = len(self._rules)
            self._rules.clear()
        self.logger.debug(f"Cleared {count} mocks")

    def rules(self) -> List[MockRule]:
        """Snapshot of the registered rules, in resolution order."""
        with self._lock:
            return list(self._rules)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)

    # Registration helpers

    def mock_once(
        self,
        request: RequestLike,
        response: Optional[ResponseSpec] = None,
        delay: Optional[float] = None,
        **response_kwargs: Any
    ):
        """
        Answer the next matching request once.

        Registering the same request several times queues responses: the
        first registered is returned first.
        """
        self.register(ExactOnceRule(
            coerce_request(request),
            self._response(response, response_kwargs),
            self._delay(delay)
        ))

    def mock_always(
        self,
        request: RequestLike,
        response: Optional[ResponseSpec] = None,
        delay: Optional[float] = None,
        **response_kwargs: Any
    ):
        """Answer every matching request with the same response."""
        self.register(ExactRepeatableRule(
            coerce_request(request),
            self._response(response, response_kwargs),
            self._delay(delay)
        ))

    def mock_pattern(
        self,
        pattern: Union[str, Pattern],
        response: Union[ResponseSpec, ResponseGenerator, None] = None,
        delay: Optional[float] = None,
        **response_kwargs: Any
    ):
        """
        Answer every request whose URL matches a regular expression.

        Args:
            pattern: Regular expression searched for in the absolute URL
            response: Fixed response, or a generator called as
                generator(url, groups) for each matching request
            delay: Seconds before delivery (default: registry default)
            **response_kwargs: build_response() keywords when response is None

        Raises:
            InvalidPatternError: If the pattern does not compile
        """
        if callable(response):
            if response_kwargs:
                raise TypeError("Response keywords can't be combined with a generator")
            generator = response
        else:
            generator = constant_generator(self._response(response, response_kwargs))

        self.register(PatternRule.compile(pattern, generator, self._delay(delay)))

    def _delay(self, delay: Optional[float]) -> float:
        return self.default_delay if delay is None else delay

    @staticmethod
    def _response(response: Optional[ResponseSpec], response_kwargs: Dict[str, Any]) -> ResponseSpec:
        if response is None:
            return build_response(**response_kwargs)
        if response_kwargs:
            raise TypeError("Pass either a response or response keywords, not both")
        return response
