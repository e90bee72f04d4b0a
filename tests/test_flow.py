import pytest

from chunkr_client.client import ChunkrClient
from chunkr_client.contracts import TaskResponse
from chunkr_client.errors import (
    FlowError,
    JobFailedError,
    PollTimeoutError,
    SubmissionError,
    TransportError,
    TransportFailure,
)
from chunkr_client.flow import extract_result, run_document_flow, run_document_flow_from_base64
from chunkr_client.polling import PollOptions


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += seconds


@pytest.fixture
def poll_options():
    clock = _Clock()
    return PollOptions(clock=clock, sleep=clock.sleep)


@pytest.fixture
def client(transport):
    return ChunkrClient(transport=transport)


def test_flow_returns_chunks_metadata_and_task_id(client, transport, poll_options, task_payload, chunk_payload):
    transport.queue(task_payload("task-42", status="Starting"))
    transport.queue(task_payload("task-42", status="Processing"))
    transport.queue(task_payload("task-42", status="Succeeded"))
    transport.queue(
        task_payload("task-42", status="Succeeded", chunks=[chunk_payload(1, page=2), chunk_payload(0)])
    )

    result = run_document_flow(client, "https://example.com/report.pdf", "report.pdf", poll_options=poll_options)

    assert result.task_id == "task-42"
    assert [chunk.chunk_index for chunk in result.chunks] == [0, 1]
    assert result.metadata.num_pages == 2
    assert result.metadata.mime_type == "application/pdf"
    assert transport.calls[0]["path"] == "/task/parse"
    assert transport.calls[-1]["params"] == {"include_chunks": "true"}


def test_base64_flow_submits_content(client, transport, poll_options, task_payload, chunk_payload):
    transport.queue(task_payload(status="Starting"))
    transport.queue(task_payload(status="Succeeded"))
    transport.queue(task_payload(status="Succeeded", chunks=[chunk_payload(0)]))

    result = run_document_flow_from_base64(
        client, "JVBERi0xLjQK", "report.pdf", {"pipeline": "Chunkr"}, poll_options=poll_options
    )

    body = transport.calls[0]["json"]
    assert body["file"] == "JVBERi0xLjQK"
    assert body["pipeline"] == "Chunkr"
    assert len(result.chunks) == 1


def test_flow_wraps_failed_task(client, transport, poll_options, task_payload):
    transport.queue(task_payload("task-7", status="Starting"))
    transport.queue(task_payload("task-7", status="Failed", message="corrupt PDF"))

    with pytest.raises(FlowError) as excinfo:
        run_document_flow(client, "https://example.com/bad.pdf", "bad.pdf", poll_options=poll_options)

    error = excinfo.value
    assert error.task_id == "task-7"
    assert isinstance(error.__cause__, JobFailedError)
    assert "task-7" in str(error)
    assert "corrupt PDF" in str(error)


def test_flow_wraps_submission_failure_without_task_id(client, transport, poll_options):
    transport.queue(
        TransportError("connection reset", kind=TransportFailure.NO_RESPONSE, method="POST", path="/task/parse")
    )

    with pytest.raises(FlowError) as excinfo:
        run_document_flow(client, "https://example.com/a.pdf", "a.pdf", poll_options=poll_options)

    assert excinfo.value.task_id is None
    assert isinstance(excinfo.value.__cause__, SubmissionError)
    assert "connection reset" in str(excinfo.value)


def test_flow_wraps_poll_timeout(client, transport, task_payload):
    clock = _Clock()
    transport.queue(task_payload("task-3", status="Starting"))
    for _ in range(3):
        transport.queue(task_payload("task-3", status="Processing"))
    options = PollOptions(poll_interval_seconds=1.0, timeout_seconds=2.0, clock=clock, sleep=clock.sleep)

    with pytest.raises(FlowError) as excinfo:
        run_document_flow(client, "https://example.com/a.pdf", "a.pdf", poll_options=options)

    assert isinstance(excinfo.value.__cause__, PollTimeoutError)
    assert excinfo.value.task_id == "task-3"


def test_extract_result_rejects_success_without_output(task_payload):
    task = TaskResponse.model_validate(task_payload("task-5", status="Succeeded"))

    with pytest.raises(FlowError, match="no output") as excinfo:
        extract_result(task)

    assert excinfo.value.task_id == "task-5"


def test_extract_result_rejects_non_success(task_payload):
    task = TaskResponse.model_validate(task_payload("task-6", status="Cancelled"))

    with pytest.raises(FlowError, match="Cancelled"):
        extract_result(task)
