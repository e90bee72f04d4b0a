"""Poll a Chunkr task until it reaches a terminal status."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .contracts import TaskResponse, TaskStatus
from .errors import JobCancelledError, JobFailedError, PollAbortedError, PollTimeoutError

LOGGER = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 1.0
# 15 minutes is enough for most documents.
DEFAULT_POLL_TIMEOUT_SECONDS = 15 * 60.0

ProgressCallback = Callable[[str, str], None]


class TaskReader(Protocol):
    """Subset of :class:`chunkr_client.client.ChunkrClient` used while polling."""

    def get_task(
        self,
        task_id: str,
        *,
        include_chunks: Optional[bool] = None,
        base64_urls: Optional[bool] = None,
    ) -> TaskResponse:
        ...


@dataclass(frozen=True)
class PollOptions:
    """Polling behaviour for :func:`poll_task`.

    ``on_progress`` receives ``(status, task_id)`` after every query.
    ``stop_event`` lets another thread abort the poll between queries; with
    the default ``sleep`` the wait between queries is ``stop_event.wait`` so
    setting the event wakes the poller early. ``clock`` and ``sleep`` exist so
    callers can substitute a simulated clock; a custom ``sleep`` is always
    used for the wait, and ``stop_event`` is then only checked between queries.
    """

    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    timeout_seconds: float = DEFAULT_POLL_TIMEOUT_SECONDS
    on_progress: Optional[ProgressCallback] = None
    base64_urls: Optional[bool] = None
    stop_event: Optional[threading.Event] = None
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        if self.poll_interval_seconds < 0:
            raise ValueError("poll_interval_seconds must not be negative")
        if self.timeout_seconds < 0:
            raise ValueError("timeout_seconds must not be negative")


def poll_task(client: TaskReader, task_id: str, options: Optional[PollOptions] = None) -> TaskResponse:
    """Block until ``task_id`` succeeds and return it with its output.

    Intermediate checks are made without ``include_chunks`` so the result
    payload is transferred once, by an extra query issued right after
    ``Succeeded`` is first observed.

    Raises:
        PollTimeoutError: the deadline passed before a terminal status.
        JobFailedError: the task ended ``Failed``.
        JobCancelledError: the task ended ``Cancelled``.
        PollAbortedError: ``options.stop_event`` was set.
        QueryError: a status query failed; it is not retried.
    """

    options = options or PollOptions()
    started = options.clock()
    result_requested = False
    attempt = 0

    while True:
        if options.stop_event is not None and options.stop_event.is_set():
            LOGGER.info("Polling for Chunkr task %s aborted by caller", task_id)
            raise PollAbortedError(task_id)
        elapsed = options.clock() - started
        if elapsed > options.timeout_seconds:
            LOGGER.warning("Polling for Chunkr task %s timed out after %.1fs", task_id, elapsed)
            raise PollTimeoutError(task_id, elapsed, options.timeout_seconds)

        while True:
            attempt += 1
            task = client.get_task(
                task_id,
                include_chunks=result_requested,
                base64_urls=options.base64_urls,
            )
            LOGGER.debug(
                "Chunkr task %s poll %d: status=%s include_chunks=%s",
                task_id,
                attempt,
                task.status.value,
                result_requested,
            )
            if options.on_progress is not None:
                options.on_progress(task.status.value, task_id)

            if task.status is TaskStatus.SUCCEEDED and not result_requested:
                # Success seen on a status-only check; fetch the results now.
                result_requested = True
                continue
            break

        if task.status is TaskStatus.SUCCEEDED:
            LOGGER.info("Chunkr task %s succeeded after %d queries", task_id, attempt)
            return task
        if task.status is TaskStatus.CANCELLED:
            LOGGER.warning("Chunkr task %s was cancelled", task_id)
            raise JobCancelledError(task_id, task.status.value, task.message)
        if task.status is TaskStatus.FAILED:
            LOGGER.warning("Chunkr task %s failed: %s", task_id, task.message)
            raise JobFailedError(task_id, task.status.value, task.message)

        _wait(options)


def _wait(options: PollOptions) -> None:
    if options.stop_event is not None and options.sleep is time.sleep:
        options.stop_event.wait(options.poll_interval_seconds)
    else:
        options.sleep(options.poll_interval_seconds)
