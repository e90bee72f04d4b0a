"""Typed contracts for the Chunkr task API surface."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

ISO8601_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class TaskStatus(str, Enum):
    """Lifecycle states reported by the service for a task."""

    STARTING = "Starting"
    PROCESSING = "Processing"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({TaskStatus.SUCCEEDED, TaskStatus.FAILED, TaskStatus.CANCELLED})


class OcrStrategy(str, Enum):
    AUTO = "Auto"
    ALL = "All"


class Pipeline(str, Enum):
    AZURE = "Azure"
    CHUNKR = "Chunkr"


class SegmentationStrategy(str, Enum):
    LAYOUT_ANALYSIS = "LayoutAnalysis"
    PAGE = "Page"


class GenerationStrategy(str, Enum):
    LLM = "LLM"
    AUTO = "Auto"


class CroppingStrategy(str, Enum):
    ALL = "All"
    AUTO = "Auto"


class EmbedSource(str, Enum):
    HTML = "HTML"
    MARKDOWN = "Markdown"
    LLM = "LLM"
    CONTENT = "Content"


class ChunkProcessing(BaseModel):
    """How extracted segments are grouped into chunks."""

    model_config = ConfigDict(frozen=True)

    ignore_headers_and_footers: Optional[bool] = None
    target_length: Optional[int] = Field(default=None, gt=0)


class SegmentProcessingRule(BaseModel):
    """Generation options for a single segment type."""

    model_config = ConfigDict(frozen=True)

    html: Optional[GenerationStrategy] = None
    markdown: Optional[GenerationStrategy] = None
    llm: Optional[str] = None
    crop_image: Optional[CroppingStrategy] = None
    embed_sources: Optional[List[EmbedSource]] = None


class SegmentProcessing(BaseModel):
    """Per segment type processing rules, keyed the way the service names them."""

    model_config = ConfigDict(frozen=True)

    Text: Optional[SegmentProcessingRule] = None
    Table: Optional[SegmentProcessingRule] = None
    Formula: Optional[SegmentProcessingRule] = None
    Picture: Optional[SegmentProcessingRule] = None


class Configuration(BaseModel):
    """Processing options a task was created or last updated with."""

    model_config = ConfigDict(frozen=True, extra="allow")

    file_name: Optional[str] = None
    expires_in: Optional[int] = None
    ocr_strategy: Optional[OcrStrategy] = None
    high_resolution: Optional[bool] = None
    pipeline: Optional[Pipeline] = None
    segmentation_strategy: Optional[SegmentationStrategy] = None
    chunk_processing: Optional[ChunkProcessing] = None
    segment_processing: Optional[SegmentProcessing] = None


class CreateTaskInput(BaseModel):
    """Request body for ``POST /task/parse``.

    ``file`` carries either a public URL or a base64 encoded document; the
    service inspects the content to tell them apart.
    """

    model_config = ConfigDict(extra="forbid")

    file: str = Field(min_length=1)
    file_name: str = Field(min_length=1)
    expires_in: Optional[int] = None
    ocr_strategy: Optional[OcrStrategy] = None
    high_resolution: Optional[bool] = None
    pipeline: Optional[Pipeline] = None
    segmentation_strategy: Optional[SegmentationStrategy] = None
    chunk_processing: Optional[ChunkProcessing] = None
    segment_processing: Optional[SegmentProcessing] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class UpdateTaskInput(BaseModel):
    """Request body for ``PATCH /task/{task_id}``; only these fields may change."""

    model_config = ConfigDict(extra="forbid")

    expires_in: Optional[int] = None
    segment_processing: Optional[SegmentProcessing] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class ChunkSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_name: str
    page: int


class Chunk(BaseModel):
    """A unit of extracted text."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    page: int
    bbox: Optional[Tuple[float, float, float, float]] = None
    source: ChunkSource
    chunk_index: int = Field(ge=0)


class Metadata(BaseModel):
    """Document level metadata, one instance per task."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    num_pages: int
    language: str
    mime_type: str


class TaskOutput(BaseModel):
    chunks: List[Chunk] = Field(default_factory=list)
    metadata: Metadata

    def ordered_chunks(self) -> List[Chunk]:
        """Return chunks in display order."""

        return sorted(self.chunks, key=lambda chunk: chunk.chunk_index)


class TaskResponse(BaseModel):
    """Task state as reported by create, get, list, cancel and update calls."""

    task_id: str
    status: TaskStatus
    created_at: datetime
    expires_at: Optional[datetime] = None
    configuration: Configuration = Field(default_factory=Configuration)
    output: Optional[TaskOutput] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    message: Optional[str] = None
    task_url: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class GetTaskQuery(BaseModel):
    """Query parameters for ``GET /task/{task_id}``."""

    model_config = ConfigDict(extra="forbid")

    include_chunks: Optional[bool] = None
    base64_urls: Optional[bool] = None

    def to_params(self) -> Dict[str, str]:
        return _encode_params(self.model_dump(exclude_none=True))


class ListTasksQuery(BaseModel):
    """Query parameters for ``GET /tasks``."""

    model_config = ConfigDict(extra="forbid")

    page: Optional[int] = Field(default=None, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)
    include_chunks: Optional[bool] = None
    base64_urls: Optional[bool] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def to_params(self) -> Dict[str, str]:
        return _encode_params(self.model_dump(exclude_none=True))


class HealthResponse(BaseModel):
    status: str
    version: Optional[str] = None
    timestamp: Optional[str] = None


class DocumentResult(BaseModel):
    """Chunks and metadata produced by a completed document flow."""

    chunks: List[Chunk]
    metadata: Metadata
    task_id: str


def format_timestamp(value: datetime) -> str:
    """Format ``value`` as a UTC ISO-8601 string with a ``Z`` suffix."""

    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(ISO8601_FORMAT)


def _encode_params(values: Dict[str, Any]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for key, value in values.items():
        if isinstance(value, bool):
            params[key] = "true" if value else "false"
        elif isinstance(value, datetime):
            params[key] = format_timestamp(value)
        else:
            params[key] = str(value)
    return params
