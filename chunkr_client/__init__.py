"""Client library for the Chunkr document processing API."""

from .client import DEFAULT_TASK_OPTIONS, ChunkrClient, build_create_input, encode_file
from .config import DEFAULT_API_URL, ClientConfig
from .contracts import (
    Chunk,
    ChunkProcessing,
    ChunkSource,
    Configuration,
    CreateTaskInput,
    DocumentResult,
    GetTaskQuery,
    HealthResponse,
    ListTasksQuery,
    Metadata,
    OcrStrategy,
    Pipeline,
    SegmentationStrategy,
    SegmentProcessing,
    SegmentProcessingRule,
    TaskOutput,
    TaskResponse,
    TaskStatus,
    TERMINAL_STATUSES,
    UpdateTaskInput,
)
from .errors import (
    CancelError,
    ChunkrError,
    DeleteError,
    FlowError,
    HealthCheckError,
    JobCancelledError,
    JobFailedError,
    ListError,
    PollAbortedError,
    PollTimeoutError,
    QueryError,
    SubmissionError,
    TransportError,
    TransportFailure,
    UpdateError,
)
from .flow import extract_result, run_document_flow, run_document_flow_from_base64
from .polling import PollOptions, poll_task
from .transport import ChunkrTransport

__all__ = [
    "CancelError",
    "Chunk",
    "ChunkProcessing",
    "ChunkSource",
    "ChunkrClient",
    "ChunkrError",
    "ChunkrTransport",
    "ClientConfig",
    "Configuration",
    "CreateTaskInput",
    "DEFAULT_API_URL",
    "DEFAULT_TASK_OPTIONS",
    "DeleteError",
    "DocumentResult",
    "FlowError",
    "GetTaskQuery",
    "HealthCheckError",
    "HealthResponse",
    "JobCancelledError",
    "JobFailedError",
    "ListError",
    "ListTasksQuery",
    "Metadata",
    "OcrStrategy",
    "Pipeline",
    "PollAbortedError",
    "PollOptions",
    "PollTimeoutError",
    "QueryError",
    "SegmentProcessing",
    "SegmentProcessingRule",
    "SegmentationStrategy",
    "SubmissionError",
    "TERMINAL_STATUSES",
    "TaskOutput",
    "TaskResponse",
    "TaskStatus",
    "TransportError",
    "TransportFailure",
    "UpdateError",
    "UpdateTaskInput",
    "build_create_input",
    "encode_file",
    "extract_result",
    "poll_task",
    "run_document_flow",
    "run_document_flow_from_base64",
]
