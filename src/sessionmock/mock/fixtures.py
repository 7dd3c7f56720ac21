"""
SessionMock Fixtures

Declarative mock definitions loaded from YAML or JSON files.

Accepted layouts:
- {"mocks": [...]}   (wrapped format)
- [...]              (direct list format)

Each entry:

    policy: once | always | pattern      (default: once)
    url: https://api.example.com/users   (once / always)
    pattern: /users/([0-9]+)             (pattern)
    status: 200
    headers: {Content-Type: application/json}
    body: '{"id": "{{1}}"}'              (or json: {...})
    error: "connection refused"          (makes it a failure response)
    delay: 0.1

Pattern bodies and header values are templates: {{url}} is replaced with the
matched URL and {{1}}, {{2}}, ... with the captured groups.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..common.errors import FixtureError, MockNetworkError
from .response import ResponseSpec, build_response
from .rules import ResponseGenerator

POLICIES = ('once', 'always', 'pattern')
PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


@dataclass
class MockDefinition:
    """One mock declared in a fixture file."""

    policy: str
    target: str  # URL for exact policies, expression for pattern
    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    json: Any = None
    error: Optional[Dict[str, Any]] = None
    delay: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> 'MockDefinition':
        """
        Create a definition from a parsed fixture entry.

        Raises:
            FixtureError: If required keys are missing or values have the wrong type
        """
        if not isinstance(data, dict):
            raise FixtureError(f"Mock #{index}: expected a mapping, got {type(data).__name__}")

        policy = str(data.get('policy', 'once')).lower()
        if policy not in POLICIES:
            raise FixtureError(f"Mock #{index}: unknown policy {policy!r} (expected one of {', '.join(POLICIES)})")

        target_key = 'pattern' if policy == 'pattern' else 'url'
        target = data.get(target_key)
        if not target or not isinstance(target, str):
            raise FixtureError(f"Mock #{index}: policy {policy!r} requires a '{target_key}' string")

        if data.get('body') is not None and data.get('json') is not None:
            raise FixtureError(f"Mock #{index}: use either 'body' or 'json', not both")

        error = data.get('error')
        if isinstance(error, str):
            error = {'message': error}
        elif error is not None and not isinstance(error, dict):
            raise FixtureError(f"Mock #{index}: 'error' must be a string or a mapping")

        headers = data.get('headers') or {}
        if not isinstance(headers, dict):
            raise FixtureError(f"Mock #{index}: 'headers' must be a mapping")

        try:
            status = int(data.get('status', 200))
            delay = float(data['delay']) if data.get('delay') is not None else None
        except (TypeError, ValueError) as e:
            raise FixtureError(f"Mock #{index}: {e}") from e
        if delay is not None and delay < 0:
            raise FixtureError(f"Mock #{index}: 'delay' must be >= 0, got {delay}")

        body = data.get('body')
        if body is not None and not isinstance(body, str):
            raise FixtureError(f"Mock #{index}: 'body' must be a string")

        return cls(
            policy=policy,
            target=target,
            status=status,
            headers={str(k): str(v) for k, v in headers.items()},
            body=body,
            json=data.get('json'),
            error=error,
            delay=delay
        )

    def build_response(self) -> ResponseSpec:
        """Static response for exact policies."""
        return build_response(
            body=self.body,
            status_code=self.status,
            headers=self.headers,
            json=self.json,
            error=self._error()
        )

    def build_generator(self) -> ResponseGenerator:
        """Per-match response builder for the pattern policy."""
        def generate(url: str, groups: List[str]) -> ResponseSpec:
            if self.error is not None:
                return build_response(error=self._error())

            context = {'url': url}
            for number, group in enumerate(groups, 1):
                context[str(number)] = group

            body = self.body if self.json is None else json.dumps(self.json)
            headers = {k: render_template(v, context) for k, v in self.headers.items()}
            if self.json is not None:
                headers.setdefault('Content-Type', 'application/json')
            return build_response(
                body=render_template(body or "", context),
                status_code=self.status,
                headers=headers
            )
        return generate

    def _error(self) -> Optional[MockNetworkError]:
        if self.error is None:
            return None
        return MockNetworkError(str(self.error.get('message', 'mocked network error')), self.error.get('code'))

    def register(self, target: Any):
        """Register on a MockRegistry or InterceptionPoint."""
        if self.policy == 'once':
            target.mock_once(self.target, self.build_response(), self.delay)
        elif self.policy == 'always':
            target.mock_always(self.target, self.build_response(), self.delay)
        else:
            target.mock_pattern(self.target, self.build_generator(), self.delay)


def render_template(template: str, context: Dict[str, Any]) -> str:
    """Replace {{name}} placeholders with context values."""
    def substitute(match: re.Match) -> str:
        name = match.group(1)
        return str(context[name]) if name in context else match.group(0)

    return PLACEHOLDER.sub(substitute, template)


class FixtureLoader:
    """
    Loader for mock fixture files.

    Example:
        loader = FixtureLoader("mocks.yaml")
        for definition in loader.load():
            print(definition.policy, definition.target)
    """

    def __init__(self, file_path: Union[str, Path]):
        """
        Initialize fixture loader.

        Args:
            file_path: Path to a .yaml, .yml or .json fixture file
        """
        self.file_path = Path(file_path)

    def load(self) -> List[MockDefinition]:
        """
        Load and validate every definition in the file.

        Raises:
            FixtureError: If the file is missing, unparseable or malformed
        """
        if not self.file_path.exists():
            raise FixtureError(f"Fixture file not found: {self.file_path}")

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                if self.file_path.suffix.lower() == '.json':
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise FixtureError(f"Could not parse {self.file_path}: {e}") from e

        if isinstance(data, dict):
            if 'mocks' not in data:
                raise FixtureError(
                    f"Unexpected format in {self.file_path}. "
                    f"Expected a 'mocks' key or a list of mocks. Found keys: {list(data.keys())}"
                )
            entries = data['mocks'] or []
        elif isinstance(data, list):
            entries = data
        elif data is None:
            entries = []
        else:
            raise FixtureError(
                f"Unexpected format in {self.file_path}. "
                f"Expected dict or list, got {type(data).__name__}"
            )

        if not isinstance(entries, list):
            raise FixtureError(f"'mocks' in {self.file_path} must be a list")

        return [MockDefinition.from_dict(entry, index) for index, entry in enumerate(entries)]


def register_fixtures(file_path: Union[str, Path], target: Any) -> int:
    """
    Register every mock in a fixture file, in file order.

    Args:
        file_path: Fixture file to load
        target: MockRegistry or InterceptionPoint to register on

    Returns:
        Number of mocks registered

    Raises:
        FixtureError: If the file is malformed
        InvalidPatternError: If a pattern entry does not compile
    """
    definitions = FixtureLoader(file_path).load()
    for definition in definitions:
        definition.register(target)
    return len(definitions)
