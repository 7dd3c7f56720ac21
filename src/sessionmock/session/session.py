"""
SessionMock Session

MockSession is the host program's request factory. Its two entry points,
data_task() and data_task_with_url(), are where real request creation would
happen; once the interception point is installed they ask it first and only
fall back to a live request when it says pass-through.

Example:
    class Printer(SessionObserver):
        def on_data(self, task_id, data):
            print(task_id, data)

    mock_once('https://api.example.com/users/1', json={'id': 1})

    with MockSession(observer=Printer()) as session:
        task = session.data_task('https://api.example.com/users/1')
        task.start()
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

import requests

from ..common.config import MockConfig
from ..common.errors import SessionMockError
from ..mock.interception import InterceptionPoint, default_interception
from ..mock.request import Request, RequestLike, coerce_request
from ..mock.scheduling import DeliveryQueue, Scheduler, ThreadingScheduler
from ..mock.task import DataTask, ResponseMetadata
from .live import LiveTask


class SessionObserver:
    """
    Receives task callbacks, keyed by task identifier.

    For one task the order is always on_response_metadata, on_data (zero or
    more times), then on_complete exactly once. Failed tasks only get
    on_complete with the error.
    """

    def on_response_metadata(self, task_id: int, response: ResponseMetadata):
        pass

    def on_data(self, task_id: int, data: bytes):
        pass

    def on_complete(self, task_id: int, error: Optional[Any]):
        pass


class MockSession:
    """
    Session creating tasks that may be mocked.

    Callbacks run on the delivery queue (a private serial queue unless one is
    passed in). Each task's callbacks are delivered as one unit, so tasks
    never interleave their sequences even on a multi-threaded queue.
    """

    def __init__(
        self,
        observer: Optional[SessionObserver] = None,
        delivery_queue: Optional[Any] = None,
        scheduler: Optional[Scheduler] = None,
        interception: Optional[InterceptionPoint] = None,
        http_session: Optional[requests.Session] = None,
        config: Optional[MockConfig] = None
    ):
        """
        Initialize session.

        Args:
            observer: Receives task callbacks
            delivery_queue: Anything with submit(fn); defaults to a private DeliveryQueue
            scheduler: Timer used for mock delays (default: ThreadingScheduler)
            interception: Interception point to consult (default: the process-wide one)
            http_session: requests.Session for live requests (created lazily if None)
            config: Live request settings (default: the interception point's config)
        """
        self.observer = observer
        self.interception = interception or default_interception
        self.config = config or self.interception.config
        self.scheduler = scheduler or ThreadingScheduler()

        self._owns_queue = delivery_queue is None
        self.delivery_queue = delivery_queue if delivery_queue is not None else DeliveryQueue()

        self._owns_http = http_session is None
        self._http = http_session
        self._live_executor: Optional[ThreadPoolExecutor] = None

        self._task_ids = itertools.count(1)
        self._lock = threading.Lock()
        self._delivery_lock = threading.RLock()
        self._active = True

        self.logger = logging.getLogger("sessionmock.session")

    # Task creation

    def data_task(self, request: RequestLike) -> DataTask:
        """
        Create an idle task for a request.

        Returns:
            SimulatedTask when a mock matches, LiveTask otherwise

        Raises:
            RequiredButUnmockedError: If no mock matches and the evaluator rejects
            SessionMockError: If the session has been invalidated
        """
        if not self._active:
            raise SessionMockError("Cannot create tasks on an invalidated session")

        request = coerce_request(request)
        if self.interception.installed:
            task = self.interception.create_task(request, self).unwrap()
            if task is not None:
                return task

        return LiveTask(self.next_task_identifier(), request, self)

    def data_task_with_url(self, url: str) -> DataTask:
        """Create an idle GET task for a URL."""
        return self.data_task(Request(url=url))

    # Task owner interface

    @property
    def is_active(self) -> bool:
        return self._active

    def next_task_identifier(self) -> int:
        with self._lock:
            return next(self._task_ids)

    def dispatch(self, callback: Callable[[], None]):
        """Queue a task's callbacks for delivery. Dropped after invalidate()."""
        def run():
            with self._delivery_lock:
                try:
                    callback()
                except Exception:
                    self.logger.exception("Session observer raised during delivery")

        if not self._active:
            return
        self.delivery_queue.submit(run)

    @property
    def http(self) -> requests.Session:
        """requests.Session used for live tasks."""
        with self._lock:
            if self._http is None:
                self._http = requests.Session()
            return self._http

    def submit_live(self, work: Callable[[], None]):
        with self._lock:
            if not self._active:
                return
            if self._live_executor is None:
                self._live_executor = ThreadPoolExecutor(
                    max_workers=self.config.live_workers,
                    thread_name_prefix="sessionmock-live"
                )
            self._live_executor.submit(work)

    # Teardown

    def invalidate(self):
        """
        Tear the session down. Callbacks not yet delivered are discarded.

        Safe to call more than once.
        """
        with self._lock:
            if not self._active:
                return
            self._active = False
            executor, self._live_executor = self._live_executor, None

        if executor is not None:
            executor.shutdown(wait=False)
        if self._owns_queue:
            self.delivery_queue.shutdown(wait=False)
        if self._owns_http and self._http is not None:
            self._http.close()
        self.logger.debug("Session invalidated")

    def __enter__(self) -> MockSession:
        return self

    def __exit__(self, exc_type, exc, tb):
        self.invalidate()
