"""
SessionMock Responses

Immutable descriptions of what a mock hands back: either a successful HTTP
response (status, headers, body) or a failure carrying an error value.
"""

import json as jsonlib
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from requests.structures import CaseInsensitiveDict


@dataclass(frozen=True)
class SuccessResponse:
    """
    A completed HTTP exchange.

    Header keys compare case-insensitively. Headers are a read-only view, since
    every task of a repeatable rule shares the same response.
    """

    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    body: bytes = b""

    def __post_init__(self):
        object.__setattr__(self, 'headers', MappingProxyType(CaseInsensitiveDict(self.headers or {})))
        object.__setattr__(self, 'body', coerce_body(self.body))

    @property
    def is_failure(self) -> bool:
        return False


@dataclass(frozen=True)
class FailureResponse:
    """A request that failed before producing a response."""

    error: Any

    @property
    def is_failure(self) -> bool:
        return True


ResponseSpec = Union[SuccessResponse, FailureResponse]


def coerce_body(body: Union[bytes, bytearray, str, None]) -> bytes:
    """Bodies are bytes; str is UTF-8 encoded and None is empty."""
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode('utf-8')
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    raise TypeError(f"Response body must be bytes or str, got {type(body).__name__}")


def build_response(
    body: Union[bytes, str, None] = b"",
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
    json: Any = None,
    error: Any = None
) -> ResponseSpec:
    """
    Build a ResponseSpec from registration keywords.

    Args:
        body: Raw response body
        status_code: HTTP status code (default 200)
        headers: Response headers
        json: Object to serialize as the body; sets Content-Type if absent
        error: When given, the result is a FailureResponse carrying it

    Returns:
        SuccessResponse or FailureResponse
    """
    if error is not None:
        return FailureResponse(error=error)

    response_headers = CaseInsensitiveDict(headers or {})
    if json is not None:
        if body:
            raise ValueError("Pass either body or json, not both")
        body = jsonlib.dumps(json)
        response_headers.setdefault('Content-Type', 'application/json')

    return SuccessResponse(status_code=status_code, headers=response_headers, body=body)
