"""
SessionMock Rules

A rule pairs a match condition with the response it produces. The consumption
policy is carried by the rule's type, not by flags:

- ExactOnceRule: matches one URL, retired after its first match
- ExactRepeatableRule: matches one URL indefinitely
- PatternRule: matches URLs by regular expression indefinitely, building a
  fresh response for every match from the captured groups
"""

import logging
import re
from typing import Callable, List, Optional, Pattern, Union

from ..common.errors import InvalidPatternError
from .request import Request, RequestKey
from .response import FailureResponse, ResponseSpec, SuccessResponse

logger = logging.getLogger("sessionmock.mock")

# (url, captured groups) -> response
ResponseGenerator = Callable[[str, List[str]], ResponseSpec]


class MockRule:
    """Base class for registered mocks."""

    consumable = False

    def __init__(self, delay: float):
        if delay < 0:
            raise ValueError(f"Mock delay must be >= 0, got {delay}")
        self.delay = delay

    def match(self, request: Request) -> Optional[List[str]]:
        """
        Test the rule against a request.

        Returns:
            Captured groups (empty for exact rules) on a match, None otherwise
        """
        raise NotImplementedError

    def response_for(self, request: Request, groups: List[str]) -> ResponseSpec:
        """Produce the response for a request this rule matched."""
        raise NotImplementedError


class ExactRule(MockRule):
    """Matches requests whose key equals the registered request's key."""

    def __init__(self, request: Request, response: ResponseSpec, delay: float):
        super().__init__(delay)
        self.key = request.key
        self.response = response

    def match(self, request: Request) -> Optional[List[str]]:
        return [] if request.key == self.key else None

    def response_for(self, request: Request, groups: List[str]) -> ResponseSpec:
        return self.response

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.key.url!r}, delay={self.delay})"


class ExactOnceRule(ExactRule):
    """Answers a single matching request, then is removed from the registry."""

    consumable = True


class ExactRepeatableRule(ExactRule):
    """Answers every matching request."""


class PatternRule(MockRule):
    """
    Matches request URLs against a regular expression.

    The response is produced lazily per match by calling the generator with
    the URL and the captured groups. A generator that raises is reported as a
    FailureResponse carrying the exception, so it reaches the observer through
    on_complete like any other failed request.
    """

    def __init__(self, pattern: Pattern, generator: ResponseGenerator, delay: float):
        super().__init__(delay)
        self.pattern = pattern
        self.generator = generator

    @classmethod
    def compile(
        cls,
        pattern: Union[str, Pattern],
        generator: ResponseGenerator,
        delay: float
    ) -> 'PatternRule':
        """
        Compile the expression and build the rule.

        Raises:
            InvalidPatternError: If the expression does not compile
        """
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern)
            except re.error as e:
                raise InvalidPatternError(pattern, str(e)) from e
        return cls(pattern, generator, delay)

    def match(self, request: Request) -> Optional[List[str]]:
        found = self.pattern.search(request.url)
        if found is None:
            return None
        return [group if group is not None else "" for group in found.groups()]

    def response_for(self, request: Request, groups: List[str]) -> ResponseSpec:
        try:
            response = self.generator(request.url, list(groups))
        except Exception as e:
            logger.warning(f"Response generator for {self.pattern.pattern!r} raised: {e!r}")
            return FailureResponse(error=e)

        if not isinstance(response, (SuccessResponse, FailureResponse)):
            error = TypeError(
                f"Response generator for {self.pattern.pattern!r} returned "
                f"{type(response).__name__}, expected a response"
            )
            logger.warning(str(error))
            return FailureResponse(error=error)
        return response

    def __repr__(self) -> str:
        return f"PatternRule({self.pattern.pattern!r}, delay={self.delay})"


def constant_generator(response: ResponseSpec) -> ResponseGenerator:
    """Generator that ignores the match and always returns the same response."""
    def generate(url: str, groups: List[str]) -> ResponseSpec:
        return response
    return generate
