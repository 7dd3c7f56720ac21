"""
SessionMock requests Adapter

Transport adapter routing plain requests traffic through the interception
point, for code that uses requests directly instead of MockSession.

Example:
    session = requests.Session()
    mount_mock_adapter(session)

    mock_always('https://api.example.com/health', body='ok')
    session.get('https://api.example.com/health').text  # 'ok'

The adapter waits for a simulated task's delay on the calling thread. With a
VirtualScheduler, advance the clock from another thread or pass a timeout.
"""

import itertools
import threading
from http.client import responses as http_reasons
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from requests.exceptions import ConnectionError as RequestsConnectionError, ReadTimeout, RequestException
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

from ..mock.interception import InterceptionPoint, default_interception
from ..mock.request import Request
from ..mock.scheduling import Scheduler, ThreadingScheduler
from ..mock.task import ResponseMetadata


class _Exchange:
    """Owner and observer for a single simulated task run by the adapter."""

    is_active = True

    def __init__(self, scheduler: Scheduler, task_id: int):
        self.scheduler = scheduler
        self.observer = self
        self._task_id = task_id
        self.metadata: Optional[ResponseMetadata] = None
        self.body = bytearray()
        self.error: Optional[Any] = None
        self.done = threading.Event()

    def next_task_identifier(self) -> int:
        return self._task_id

    def dispatch(self, callback):
        callback()

    def on_response_metadata(self, task_id: int, response: ResponseMetadata):
        self.metadata = response

    def on_data(self, task_id: int, data: bytes):
        self.body.extend(data)

    def on_complete(self, task_id: int, error: Optional[Any]):
        self.error = error
        self.done.set()


class MockAdapter(HTTPAdapter):
    """HTTPAdapter answering from mocks and passing the rest to the network."""

    def __init__(
        self,
        interception: Optional[InterceptionPoint] = None,
        scheduler: Optional[Scheduler] = None,
        **kwargs: Any
    ):
        super().__init__(**kwargs)
        self.interception = interception or default_interception
        self.scheduler = scheduler or ThreadingScheduler()
        self._task_ids = itertools.count(1)
        self._id_lock = threading.Lock()

        # Mounting the adapter is an explicit install by the host
        self.interception.install()

    def send(self, request: requests.PreparedRequest, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        with self._id_lock:
            exchange = _Exchange(self.scheduler, next(self._task_ids))

        task = self.interception.create_task(Request.from_prepared(request), exchange).unwrap()
        if task is None:
            return super().send(request, stream=stream, timeout=timeout, verify=verify, cert=cert, proxies=proxies)

        task.start()
        if not exchange.done.wait(self._wait_seconds(task.delay, timeout)):
            raise ReadTimeout(f"Mocked response for {request.url} was not delivered in time", request=request)

        if exchange.error is not None:
            if isinstance(exchange.error, RequestException):
                raise exchange.error
            raise RequestsConnectionError(exchange.error, request=request)

        return self.build_mock_response(request, exchange.metadata, bytes(exchange.body))

    def build_mock_response(
        self,
        request: requests.PreparedRequest,
        metadata: ResponseMetadata,
        body: bytes
    ) -> requests.Response:
        """Turn delivered callbacks into a requests.Response."""
        response = requests.Response()
        response.status_code = metadata.status_code
        response.reason = http_reasons.get(metadata.status_code, "")
        response.headers = CaseInsensitiveDict(metadata.headers)
        response.encoding = get_encoding_from_headers(response.headers)
        response.url = request.url
        response.request = request
        response.connection = self
        response._content = body
        response._content_consumed = True
        return response

    @staticmethod
    def _wait_seconds(delay: float, timeout: Any) -> Optional[float]:
        if timeout is None:
            return None
        if isinstance(timeout, tuple):
            parts = [t for t in timeout if t is not None]
            if len(parts) < len(timeout):
                return None
            timeout = sum(parts)
        return delay + float(timeout)


def mount_mock_adapter(
    session: requests.Session,
    interception: Optional[InterceptionPoint] = None,
    scheduler: Optional[Scheduler] = None
) -> MockAdapter:
    """Mount a MockAdapter on a session for http:// and https://."""
    adapter = MockAdapter(interception=interception, scheduler=scheduler)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return adapter
