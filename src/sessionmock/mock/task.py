"""
SessionMock Tasks

Task objects stand in for in-flight requests. A task is created idle, started
once, and reports to its owner's observer through a fixed callback sequence:

    on_response_metadata(task_id, ResponseMetadata)
    on_data(task_id, bytes)             (one or more times)
    on_complete(task_id, error or None) (exactly once)

A failed request skips straight to on_complete with the error.

Tasks don't know about sessions. Their owner provides:
    scheduler   - Scheduler used to delay delivery
    observer    - object receiving the callbacks (may be None)
    is_active   - False once the owner is torn down; pending deliveries are dropped
    dispatch(fn) - runs fn on the owner's delivery queue, one callable at a time
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from requests.structures import CaseInsensitiveDict

from ..common.errors import TaskAlreadyStartedError
from .request import Request
from .response import ResponseSpec
from .scheduling import ScheduledCall


class TaskState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ResponseMetadata:
    """Status line and headers of a response, tagged with the task that received it."""

    task_id: int
    url: str
    status_code: int
    headers: CaseInsensitiveDict


class DataTask:
    """Common lifecycle for simulated and live tasks."""

    def __init__(self, task_id: int, request: Request, owner: Any):
        self.task_identifier = task_id
        self.original_request = request
        self.owner = owner
        self._state = TaskState.IDLE
        self._state_lock = threading.Lock()
        self.logger = logging.getLogger("sessionmock.session")

    @property
    def state(self) -> TaskState:
        return self._state

    def start(self):
        """
        Begin the request. Returns immediately; callbacks arrive later.

        Raises:
            TaskAlreadyStartedError: If the task was started before
        """
        with self._state_lock:
            if self._state is not TaskState.IDLE:
                raise TaskAlreadyStartedError(self.task_identifier)
            self._state = TaskState.RUNNING
        self._run()

    # NSURLSession-style alias
    resume = start

    def _run(self):
        raise NotImplementedError

    def _finish(self):
        with self._state_lock:
            self._state = TaskState.COMPLETED

    def _owner_active(self) -> bool:
        """False once the owner is torn down. Such tasks stay RUNNING."""
        if not self.owner.is_active:
            self.logger.debug(f"Task {self.task_identifier}: owner torn down, dropping callbacks")
            return False
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.task_identifier}, {self.original_request}, {self._state.value})"


class SimulatedTask(DataTask):
    """
    Replays a mocked response after the rule's delay.

    All callbacks for one task are issued from a single delivery-queue job,
    so they can't interleave with another task's callbacks.
    """

    def __init__(self, task_id: int, request: Request, response: ResponseSpec, delay: float, owner: Any):
        super().__init__(task_id, request, owner)
        self.response = response
        self.delay = delay
        self._scheduled: Optional[ScheduledCall] = None

    def _run(self):
        self._scheduled = self.owner.scheduler.call_later(self.delay, self._fire)

    def _fire(self):
        self.owner.dispatch(self._deliver)

    def _deliver(self):
        if not self._owner_active():
            return

        observer = self.owner.observer
        try:
            if observer is None:
                return

            task_id = self.task_identifier
            if self.response.is_failure:
                observer.on_complete(task_id, self.response.error)
                return

            metadata = ResponseMetadata(
                task_id=task_id,
                url=self.original_request.url,
                status_code=self.response.status_code,
                headers=CaseInsensitiveDict(self.response.headers),
            )
            observer.on_response_metadata(task_id, metadata)
            observer.on_data(task_id, self.response.body)
            observer.on_complete(task_id, None)
        finally:
            self._finish()
