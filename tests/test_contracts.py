from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from chunkr_client.contracts import (
    TERMINAL_STATUSES,
    CreateTaskInput,
    GetTaskQuery,
    ListTasksQuery,
    Pipeline,
    TaskResponse,
    TaskStatus,
    UpdateTaskInput,
    format_timestamp,
)


def test_terminal_statuses():
    assert TERMINAL_STATUSES == {TaskStatus.SUCCEEDED, TaskStatus.FAILED, TaskStatus.CANCELLED}
    assert not TaskStatus.STARTING.is_terminal
    assert not TaskStatus.PROCESSING.is_terminal
    assert TaskStatus("Cancelled").is_terminal


def test_task_response_parses_output(task_payload, chunk_payload):
    task = TaskResponse.model_validate(
        task_payload(status="Succeeded", chunks=[chunk_payload(2), chunk_payload(0), chunk_payload(1)])
    )

    assert task.is_terminal
    assert task.created_at == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert task.configuration.pipeline is Pipeline.AZURE
    assert task.configuration.chunk_processing.target_length == 512
    assert [chunk.chunk_index for chunk in task.output.ordered_chunks()] == [0, 1, 2]
    chunk = task.output.chunks[0]
    assert chunk.bbox == (0.0, 20.0, 100.0, 28.0)
    assert chunk.source.file_name == "report.pdf"


def test_task_response_keeps_unknown_configuration_keys(task_payload):
    payload = task_payload()
    payload["configuration"]["model"] = "Fast"

    task = TaskResponse.model_validate(payload)

    assert task.configuration.model_extra == {"model": "Fast"}


def test_chunks_are_immutable(task_payload, chunk_payload):
    task = TaskResponse.model_validate(task_payload(status="Succeeded", chunks=[chunk_payload(0)]))

    with pytest.raises(ValidationError):
        task.output.chunks[0].text = "changed"


def test_create_input_requires_file_and_name():
    with pytest.raises(ValidationError):
        CreateTaskInput(file="", file_name="a.pdf")
    with pytest.raises(ValidationError):
        CreateTaskInput.model_validate({"file": "https://example.com/a.pdf"})


def test_create_input_payload_drops_unset_fields():
    task_input = CreateTaskInput(file="https://example.com/a.pdf", file_name="a.pdf", high_resolution=False)

    assert task_input.to_payload() == {
        "file": "https://example.com/a.pdf",
        "file_name": "a.pdf",
        "high_resolution": False,
    }


def test_update_input_only_accepts_updatable_fields():
    assert UpdateTaskInput(expires_in=60).to_payload() == {"expires_in": 60}
    with pytest.raises(ValidationError):
        UpdateTaskInput.model_validate({"file_name": "renamed.pdf"})


def test_query_booleans_serialise_as_literal_strings():
    assert GetTaskQuery(include_chunks=True, base64_urls=False).to_params() == {
        "include_chunks": "true",
        "base64_urls": "false",
    }
    assert GetTaskQuery().to_params() == {}


def test_list_query_formats_dates_in_utc():
    query = ListTasksQuery(
        page=1,
        start=datetime(2024, 5, 1, tzinfo=timezone.utc),
        end=datetime(2024, 5, 8, 6, 30, tzinfo=timezone.utc),
    )

    assert query.to_params() == {
        "page": "1",
        "start": "2024-05-01T00:00:00.000000Z",
        "end": "2024-05-08T06:30:00.000000Z",
    }


def test_format_timestamp_converts_offsets():
    value = datetime(2024, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))

    assert format_timestamp(value) == "2024-05-01T12:00:00.000000Z"
