"""
SessionMock Requests

The read-only view of an outgoing request that the engine matches against.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

import requests
from requests.structures import CaseInsensitiveDict


@dataclass(frozen=True)
class RequestKey:
    """
    Equality key for exact-match rules.

    Only the absolute URL takes part: two requests to the same URL are
    indistinguishable to exact rules regardless of method or headers.
    """

    url: str


@dataclass(frozen=True)
class Request:
    """An outgoing request as seen by the mocking engine. Never mutated."""

    url: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict, compare=False)
    body: Optional[bytes] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'method', self.method.upper())
        object.__setattr__(self, 'headers', CaseInsensitiveDict(self.headers or {}))

    @property
    def key(self) -> RequestKey:
        """Matching key for exact rules."""
        return RequestKey(self.url)

    def __str__(self) -> str:
        return f"{self.method} {self.url}"

    @classmethod
    def from_prepared(cls, prepared: requests.PreparedRequest) -> 'Request':
        """Build from a requests.PreparedRequest (what transport adapters see)."""
        body = prepared.body
        if isinstance(body, str):
            body = body.encode('utf-8')
        elif not isinstance(body, (bytes, type(None))):
            # Streaming bodies (generators, files) are not matched on
            body = None
        return cls(
            url=prepared.url or "",
            method=prepared.method or "GET",
            headers=prepared.headers or {},
            body=body,
        )


RequestLike = Union[str, Request, requests.Request, requests.PreparedRequest]


def coerce_request(value: Any) -> Request:
    """
    Normalize anything request-shaped into a Request.

    Args:
        value: URL string, Request, requests.Request or requests.PreparedRequest

    Returns:
        Request instance

    Raises:
        TypeError: If value can't be interpreted as a request
    """
    if isinstance(value, Request):
        return value
    if isinstance(value, str):
        return Request(url=value)
    if isinstance(value, requests.PreparedRequest):
        return Request.from_prepared(value)
    if isinstance(value, requests.Request):
        body = value.data if isinstance(value.data, bytes) else None
        return Request(
            url=str(value.url),
            method=value.method or "GET",
            headers=value.headers or {},
            body=body,
        )
    raise TypeError(f"Expected a URL or request, got {type(value).__name__}")
