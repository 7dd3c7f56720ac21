"""
SessionMock Live Tasks

Tasks for requests that no mock answered and the evaluator let through. They
perform the request with requests on the session's thread pool and report
through the same callback sequence as simulated tasks.
"""

from functools import partial
from typing import Optional

import requests
from requests.structures import CaseInsensitiveDict

from ..mock.task import DataTask, ResponseMetadata


class LiveTask(DataTask):
    """A real HTTP request wearing the task interface."""

    def _run(self):
        self.owner.submit_live(self._perform)

    def _perform(self):
        request = self.original_request
        config = self.owner.config

        try:
            response = self.owner.http.request(
                method=request.method,
                url=request.url,
                headers=dict(request.headers),
                data=request.body,
                timeout=config.live_timeout
            )
            content = response.content
        except Exception as e:
            self.logger.debug(f"Task {self.task_identifier}: {request} failed: {e!r}")
            self.owner.dispatch(partial(self._deliver, None, b"", e))
            return

        self.owner.dispatch(partial(self._deliver, response, content, None))

    def _deliver(self, response: Optional[requests.Response], content: bytes, error: Optional[Exception]):
        if not self._owner_active():
            return

        observer = self.owner.observer
        try:
            if observer is None:
                return

            task_id = self.task_identifier
            if error is not None:
                observer.on_complete(task_id, error)
                return

            metadata = ResponseMetadata(
                task_id=task_id,
                url=response.url or self.original_request.url,
                status_code=response.status_code,
                headers=CaseInsensitiveDict(response.headers),
            )
            observer.on_response_metadata(task_id, metadata)

            chunk_size = self.owner.config.live_chunk_size
            for offset in range(0, len(content), chunk_size):
                observer.on_data(task_id, content[offset:offset + chunk_size])

            observer.on_complete(task_id, None)
        finally:
            self._finish()
