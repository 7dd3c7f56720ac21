"""
SessionMock Testing Helpers

Deterministic stand-ins for the time- and thread-dependent parts of a session:

- VirtualScheduler: manual clock, delays elapse only when advance() is called
- InlineDeliveryQueue: runs callbacks on the calling thread
- RecordingObserver: records every callback keyed by task identifier

Example:
    scheduler = VirtualScheduler()
    observer = RecordingObserver()
    session = MockSession(observer, delivery_queue=InlineDeliveryQueue(), scheduler=scheduler)

    session.data_task('https://api.example.com/1').start()
    scheduler.advance(0.25)
    observer.body(1)
"""

import heapq
import itertools
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from .mock.scheduling import ScheduledCall, Scheduler
from .mock.task import ResponseMetadata
from .session.session import SessionObserver


class _VirtualCall(ScheduledCall):
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class VirtualScheduler(Scheduler):
    """Scheduler driven by an explicit clock instead of wall time."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self._pending: List[Tuple[float, int, _VirtualCall, Callable[[], None]]] = []
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = _VirtualCall()
        with self._lock:
            heapq.heappush(self._pending, (self.now + delay, next(self._sequence), call, callback))
        return call

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, running everything that falls due, in due order.

        Returns:
            Number of callbacks run
        """
        target = self.now + seconds
        ran = 0
        while True:
            with self._lock:
                if not self._pending or self._pending[0][0] > target:
                    break
                due, _, call, callback = heapq.heappop(self._pending)
                self.now = due
            if not call.cancelled:
                callback()
                ran += 1
        self.now = target
        return ran

    def run_all(self) -> int:
        """Advance until nothing is pending."""
        with self._lock:
            if not self._pending:
                return 0
            last = max(entry[0] for entry in self._pending)
        return self.advance(last - self.now)

    @property
    def pending(self) -> int:
        with self._lock:
            return sum(1 for entry in self._pending if not entry[2].cancelled)


class InlineDeliveryQueue:
    """Delivery queue running callbacks immediately on the submitting thread."""

    def submit(self, callback: Callable[[], None]):
        callback()

    def shutdown(self, wait: bool = True):
        pass


class RecordingObserver(SessionObserver):
    """Observer that keeps everything it is told, keyed by task identifier."""

    def __init__(self):
        self.responses: Dict[int, ResponseMetadata] = {}
        self.data: Dict[int, bytearray] = {}
        self.errors: Dict[int, Any] = {}
        self.completed: List[int] = []
        self.completion_times: Dict[int, float] = {}
        self.events: List[Tuple[int, str]] = []
        self._condition = threading.Condition()

    def on_response_metadata(self, task_id: int, response: ResponseMetadata):
        with self._condition:
            self.responses[task_id] = response
            self.events.append((task_id, 'response'))

    def on_data(self, task_id: int, data: bytes):
        with self._condition:
            self.data.setdefault(task_id, bytearray()).extend(data)
            self.events.append((task_id, 'data'))

    def on_complete(self, task_id: int, error: Optional[Any]):
        with self._condition:
            if error is not None:
                self.errors[task_id] = error
            self.completed.append(task_id)
            self.completion_times[task_id] = time.monotonic()
            self.events.append((task_id, 'complete'))
            self._condition.notify_all()

    def body(self, task_id: int) -> Optional[bytes]:
        """Everything received for a task, or None if no data arrived."""
        with self._condition:
            data = self.data.get(task_id)
            return bytes(data) if data is not None else None

    def events_for(self, task_id: int) -> List[str]:
        """Callback stages received by one task, in order."""
        with self._condition:
            return [stage for tid, stage in self.events if tid == task_id]

    def wait_for_completions(self, count: int, timeout: float = 2.0) -> bool:
        """Block until at least count tasks completed. False on timeout."""
        with self._condition:
            return self._condition.wait_for(lambda: len(self.completed) >= count, timeout)
