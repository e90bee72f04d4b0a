import sys
from pathlib import Path

import pytest

# Allow tests to import the project packages without installation.
sys.path.append(str(Path(__file__).resolve().parents[1]))


def make_task_payload(task_id="task-1", status="Processing", *, chunks=None, message=None, **overrides):
    payload = {
        "task_id": task_id,
        "status": status,
        "created_at": "2024-05-01T12:00:00.000Z",
        "expires_at": "2024-05-08T12:00:00.000Z",
        "configuration": {
            "file_name": "report.pdf",
            "ocr_strategy": "Auto",
            "pipeline": "Azure",
            "chunk_processing": {"ignore_headers_and_footers": True, "target_length": 512},
        },
        "output": None,
        "message": message,
    }
    if chunks is not None:
        payload["output"] = {
            "chunks": chunks,
            "metadata": {
                "file_name": "report.pdf",
                "num_pages": 2,
                "language": "en",
                "mime_type": "application/pdf",
            },
        }
    payload.update(overrides)
    return payload


def make_chunk(index, page=1, text=None):
    return {
        "id": f"chunk-{index}",
        "text": text or f"Paragraph {index}",
        "page": page,
        "bbox": [0.0, 10.0 * index, 100.0, 10.0 * index + 8.0],
        "source": {"file_name": "report.pdf", "page": page},
        "chunk_index": index,
    }


class RecordingTransport:
    """Transport double that records requests and replays scripted responses."""

    def __init__(self, responses=None):
        self._responses = list(responses or [])
        self.calls = []

    def queue(self, response):
        self._responses.append(response)

    def request(self, method, path, *, params=None, json=None):
        self.calls.append({"method": method, "path": path, "params": params, "json": json})
        if not self._responses:
            raise AssertionError(f"No responses remaining for {method} {path}")
        response = self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def task_payload():
    return make_task_payload


@pytest.fixture
def chunk_payload():
    return make_chunk


@pytest.fixture
def transport():
    return RecordingTransport()
