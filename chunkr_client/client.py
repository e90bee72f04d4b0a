"""Client for creating, querying and managing Chunkr tasks."""

from __future__ import annotations

import base64
import copy
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Type, TypeVar, Union
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from .config import ClientConfig
from .contracts import (
    CreateTaskInput,
    GetTaskQuery,
    HealthResponse,
    ListTasksQuery,
    TaskResponse,
    TaskStatus,
    UpdateTaskInput,
)
from .errors import (
    CancelError,
    DeleteError,
    HealthCheckError,
    ListError,
    OperationError,
    QueryError,
    SubmissionError,
    TransportError,
    UpdateError,
)
from .transport import ChunkrTransport

LOGGER = logging.getLogger(__name__)

DEFAULT_TASK_OPTIONS: Dict[str, Any] = {
    "ocr_strategy": "Auto",
    "pipeline": "Azure",
    "chunk_processing": {
        "ignore_headers_and_footers": True,
        "target_length": 512,
    },
}

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class Transport(Protocol):
    """Subset of :class:`ChunkrTransport` used by the client."""

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        ...


class ChunkrClient:
    """Convenience wrapper around the Chunkr task endpoints.

    Every method issues exactly one request and never retries. Transport
    failures are re-raised as the operation specific error from
    :mod:`chunkr_client.errors`, with the original error chained.
    """

    def __init__(self, config: Optional[ClientConfig] = None, *, transport: Optional[Transport] = None) -> None:
        if transport is None:
            transport = ChunkrTransport(config or ClientConfig.from_env())
        self._transport = transport

    # ------------------------------------------------------------------
    # Task creation
    # ------------------------------------------------------------------
    def create_task(self, task_input: CreateTaskInput) -> TaskResponse:
        """Submit a document for processing and return the task in its initial status."""

        LOGGER.info("Creating Chunkr task for %s", task_input.file_name)
        data = self._request(SubmissionError, "POST", "/task/parse", json=task_input.to_payload())
        task = self._parse(SubmissionError, TaskResponse, data)
        LOGGER.info("Created Chunkr task %s with status %s", task.task_id, task.status.value)
        return task

    def create_task_from_url(
        self, file_url: str, file_name: str, options: Optional[Mapping[str, Any]] = None
    ) -> TaskResponse:
        return self.create_task(build_create_input(file_url, file_name, options))

    def create_task_from_base64(
        self, base64_content: str, file_name: str, options: Optional[Mapping[str, Any]] = None
    ) -> TaskResponse:
        return self.create_task(build_create_input(base64_content, file_name, options))

    def create_task_from_file(
        self,
        path: Union[str, Path],
        file_name: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> TaskResponse:
        """Read a local document, base64 encode it and submit it."""

        path = Path(path)
        return self.create_task_from_base64(encode_file(path), file_name or path.name, options)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_task(
        self,
        task_id: str,
        *,
        include_chunks: Optional[bool] = None,
        base64_urls: Optional[bool] = None,
    ) -> TaskResponse:
        """Fetch the current state of a task.

        ``include_chunks`` controls whether ``output`` is populated for a
        succeeded task; leave it off for cheap status checks.
        """

        query = GetTaskQuery(include_chunks=include_chunks, base64_urls=base64_urls)
        data = self._request(QueryError, "GET", _task_path(task_id), task_id=task_id, params=query.to_params())
        return self._parse(QueryError, TaskResponse, data, task_id=task_id)

    def get_tasks(self, query: Optional[ListTasksQuery] = None, **filters: Any) -> List[TaskResponse]:
        """List tasks with optional paging and date filters."""

        if query is None:
            query = ListTasksQuery.model_validate(filters)
        elif filters:
            query = _merge_query(query, filters)
        data = self._request(ListError, "GET", "/tasks", params=query.to_params())
        if data is None:
            return []
        if not isinstance(data, list):
            raise ListError(TypeError(f"expected a JSON array, got {type(data).__name__}"))
        return [self._parse(ListError, TaskResponse, item) for item in data]

    def get_recent_tasks(self, days: int = 7, query: Optional[ListTasksQuery] = None) -> List[TaskResponse]:
        """List tasks created within the last ``days`` days."""

        end = datetime.now(timezone.utc)
        start = end - timedelta(days=days)
        query = _merge_query(query or ListTasksQuery(), {"start": start, "end": end})
        return self.get_tasks(query)

    def get_tasks_by_status(
        self, status: Union[TaskStatus, str], query: Optional[ListTasksQuery] = None
    ) -> List[TaskResponse]:
        wanted = TaskStatus(status)
        return [task for task in self.get_tasks(query) if task.status == wanted]

    # ------------------------------------------------------------------
    # Task management
    # ------------------------------------------------------------------
    def cancel_task(self, task_id: str) -> TaskResponse:
        """Ask the service to cancel a task; the service decides whether it can."""

        LOGGER.info("Cancelling Chunkr task %s", task_id)
        data = self._request(CancelError, "GET", _task_path(task_id, "cancel"), task_id=task_id)
        return self._parse(CancelError, TaskResponse, data, task_id=task_id)

    def update_task(self, task_id: str, update: Union[UpdateTaskInput, Mapping[str, Any]]) -> TaskResponse:
        if not isinstance(update, UpdateTaskInput):
            update = UpdateTaskInput.model_validate(dict(update))
        LOGGER.info("Updating Chunkr task %s", task_id)
        data = self._request(UpdateError, "PATCH", _task_path(task_id), task_id=task_id, json=update.to_payload())
        return self._parse(UpdateError, TaskResponse, data, task_id=task_id)

    def delete_task(self, task_id: str) -> None:
        LOGGER.info("Deleting Chunkr task %s", task_id)
        self._request(DeleteError, "DELETE", _task_path(task_id), task_id=task_id)

    def check_health(self) -> HealthResponse:
        data = self._request(HealthCheckError, "GET", "/health")
        return self._parse(HealthCheckError, HealthResponse, data)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        error_cls: Type[OperationError],
        method: str,
        path: str,
        *,
        task_id: Optional[str] = None,
        params: Optional[Mapping[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            return self._transport.request(method, path, params=params or None, json=json)
        except TransportError as exc:
            raise error_cls(exc, task_id=task_id) from exc

    @staticmethod
    def _parse(
        error_cls: Type[OperationError],
        model: Type[_ModelT],
        data: Any,
        *,
        task_id: Optional[str] = None,
    ) -> _ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            LOGGER.error("Unexpected %s payload from Chunkr API: %s", model.__name__, exc)
            raise error_cls(exc, task_id=task_id) from exc


def build_create_input(
    file: str, file_name: str, options: Optional[Mapping[str, Any]] = None
) -> CreateTaskInput:
    """Merge ``options`` over :data:`DEFAULT_TASK_OPTIONS` into a create request.

    The merge is shallow: an explicit ``chunk_processing`` replaces the
    default one entirely.
    """

    options = dict(options or {})
    clashing = {"file", "file_name"} & options.keys()
    if clashing:
        raise ValueError(f"options may not override {', '.join(sorted(clashing))}")
    payload: Dict[str, Any] = copy.deepcopy(DEFAULT_TASK_OPTIONS)
    payload.update(options)
    payload["file"] = file
    payload["file_name"] = file_name
    return CreateTaskInput.model_validate(payload)


def encode_file(path: Union[str, Path]) -> str:
    """Return the base64 encoding of a local file."""

    return base64.b64encode(Path(path).read_bytes()).decode("ascii")


def _task_path(task_id: str, action: Optional[str] = None) -> str:
    # Task ids are opaque and must stay a single path segment.
    segment = quote(task_id, safe="")
    if segment in {".", ".."}:
        segment = segment.replace(".", "%2E")
    path = f"/task/{segment}"
    if action:
        path = f"{path}/{action}"
    return path


def _merge_query(query: ListTasksQuery, updates: Mapping[str, Any]) -> ListTasksQuery:
    """Apply ``updates`` to ``query`` and re-validate the result."""

    return ListTasksQuery.model_validate({**query.model_dump(exclude_none=True), **updates})
