"""
SessionMock Scheduling

Timer and delivery-queue abstractions used by tasks.

A Scheduler runs a callable after a delay without blocking the caller; tests
can swap in sessionmock.testing.VirtualScheduler to drive time by hand. A
delivery queue is where observer callbacks run.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

logger = logging.getLogger("sessionmock.session")


class ScheduledCall:
    """Handle for a pending scheduled callable."""

    def cancel(self):
        raise NotImplementedError


class Scheduler:
    """Runs callables after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        raise NotImplementedError


class _TimerCall(ScheduledCall):
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self):
        self._timer.cancel()


class ThreadingScheduler(Scheduler):
    """Wall-clock scheduler backed by daemon threading.Timer threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return _TimerCall(timer)


class DeliveryQueue:
    """
    Serial executor for observer callbacks.

    One worker thread, so callbacks submitted here run one at a time in
    submission order.
    """

    def __init__(self, name: str = "sessionmock-delivery"):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)

    def submit(self, callback: Callable[[], None]):
        try:
            self._executor.submit(callback)
        except RuntimeError:
            # Shut down while a timer was firing
            logger.debug("Delivery queue is shut down, dropping callback")

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
