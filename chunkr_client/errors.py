"""Exception hierarchy raised by the Chunkr client."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ChunkrError(RuntimeError):
    """Base class for every error raised by this package."""


class TransportFailure(str, Enum):
    """Where in the request lifecycle a transport call failed."""

    NO_RESPONSE = "no_response"
    HTTP_STATUS = "http_status"
    MALFORMED_RESPONSE = "malformed_response"
    REQUEST_SETUP = "request_setup"


class TransportError(ChunkrError):
    """Raised when an HTTP call to the service does not produce usable JSON."""

    def __init__(
        self,
        message: str,
        *,
        kind: TransportFailure,
        method: str,
        path: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.method = method
        self.path = path
        self.status_code = status_code
        self.body = body


class OperationError(ChunkrError):
    """A public client operation failed; wraps the proximate cause."""

    description = "Chunkr operation failed"

    def __init__(self, cause: BaseException, *, task_id: Optional[str] = None) -> None:
        self.task_id = task_id
        self.cause = cause
        subject = self.description
        if task_id is not None:
            subject = f"{subject} for task {task_id}"
        super().__init__(f"{subject}: {cause}")


class SubmissionError(OperationError):
    description = "Chunkr task creation failed"


class QueryError(OperationError):
    description = "Failed to get Chunkr task status"


class ListError(OperationError):
    description = "Failed to list Chunkr tasks"


class CancelError(OperationError):
    description = "Failed to cancel Chunkr task"


class UpdateError(OperationError):
    description = "Failed to update Chunkr task"


class DeleteError(OperationError):
    description = "Failed to delete Chunkr task"


class HealthCheckError(OperationError):
    description = "Chunkr health check failed"


class PollTimeoutError(ChunkrError):
    """The task did not reach a terminal status before the poll deadline."""

    def __init__(self, task_id: str, elapsed_seconds: float, timeout_seconds: float) -> None:
        self.task_id = task_id
        self.elapsed_seconds = elapsed_seconds
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Polling timed out after {elapsed_seconds:.1f}s "
            f"(limit {timeout_seconds:.1f}s) for task {task_id}"
        )


class PollAbortedError(ChunkrError):
    """Polling was stopped by the caller before the task finished."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Polling aborted by caller for task {task_id}")


class JobFailedError(ChunkrError):
    """The task ended in a terminal status other than ``Succeeded``."""

    def __init__(self, task_id: str, status: str, message: Optional[str] = None) -> None:
        self.task_id = task_id
        self.status = status
        self.server_message = message
        text = f"Chunkr task {task_id} ended with status {status}"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)


class JobCancelledError(JobFailedError):
    """The task was cancelled before it produced a result."""


class FlowError(ChunkrError):
    """The end-to-end document flow could not produce a result."""

    def __init__(self, reason: str, *, task_id: Optional[str] = None) -> None:
        self.task_id = task_id
        self.reason = reason
        prefix = "Chunkr document flow failed"
        if task_id is not None:
            prefix = f"{prefix} for task {task_id}"
        super().__init__(f"{prefix}: {reason}")
