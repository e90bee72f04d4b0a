"""End-to-end document processing: submit, wait, extract."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from .client import ChunkrClient
from .contracts import DocumentResult, TaskResponse, TaskStatus
from .errors import ChunkrError, FlowError
from .polling import PollOptions, poll_task

LOGGER = logging.getLogger(__name__)


def run_document_flow(
    client: ChunkrClient,
    file_url: str,
    file_name: str,
    options: Optional[Mapping[str, Any]] = None,
    poll_options: Optional[PollOptions] = None,
) -> DocumentResult:
    """Process the document at ``file_url`` and return its chunks and metadata."""

    return _run(
        lambda: client.create_task_from_url(file_url, file_name, options),
        client,
        poll_options,
    )


def run_document_flow_from_base64(
    client: ChunkrClient,
    base64_content: str,
    file_name: str,
    options: Optional[Mapping[str, Any]] = None,
    poll_options: Optional[PollOptions] = None,
) -> DocumentResult:
    """Same as :func:`run_document_flow` for base64 encoded document content."""

    return _run(
        lambda: client.create_task_from_base64(base64_content, file_name, options),
        client,
        poll_options,
    )


def _run(
    submit: Callable[[], TaskResponse],
    client: ChunkrClient,
    poll_options: Optional[PollOptions],
) -> DocumentResult:
    task_id: Optional[str] = None
    try:
        task_id = submit().task_id
        completed = poll_task(client, task_id, poll_options)
    except ChunkrError as exc:
        LOGGER.error("Chunkr document flow failed for task %s: %s", task_id, exc)
        raise FlowError(str(exc), task_id=task_id) from exc

    return extract_result(completed)


def extract_result(task: TaskResponse) -> DocumentResult:
    """Turn a finished task into a :class:`DocumentResult`.

    Raises:
        FlowError: the task did not succeed or carries no output.
    """

    if task.status is not TaskStatus.SUCCEEDED:
        raise FlowError(f"task ended with status {task.status.value}", task_id=task.task_id)
    if task.output is None:
        raise FlowError("task succeeded but returned no output", task_id=task.task_id)
    return DocumentResult(
        chunks=task.output.ordered_chunks(),
        metadata=task.output.metadata,
        task_id=task.task_id,
    )
