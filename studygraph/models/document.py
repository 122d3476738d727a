"""Document and knowledge-graph records, including the processing state machine."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from studygraph.models.schemas import Entity, GraphSnapshot, GraphStatistics, Keyword

ProcessingStatus = Literal["pending", "processing", "completed", "failed"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "failed"})

# Progress written after each pipeline stage.
CHECKPOINT_STARTED = 10
CHECKPOINT_TEXT_EXTRACTED = 30
CHECKPOINT_ANALYSED = 50
CHECKPOINT_SUMMARISED = 70
CHECKPOINT_GRAPH_BUILT = 90
CHECKPOINT_COMPLETED = 100

_ALLOWED: dict[str, frozenset[str]] = {
    "pending": frozenset({"processing", "failed"}),
    "processing": frozenset({"processing", "completed", "failed"}),
    "completed": frozenset(),
    "failed": frozenset(),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class InvalidTransitionError(ValueError):
    """A status change the processing state machine does not allow."""


class ProcessingState(BaseModel):
    """pending -> processing -> completed | failed.

    ``started_at`` is stamped on the first entry into ``processing`` and kept
    while the run stays there. ``completed_at`` is stamped only on a terminal
    status. Progress never decreases within a run, and a failure leaves it
    at the last checkpoint reached.
    """

    status: ProcessingStatus = "pending"
    progress: int = Field(default=0, ge=0, le=100)
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def transition(
        self,
        status: ProcessingStatus,
        progress: int | None = None,
        error: str | None = None,
    ) -> None:
        if status not in _ALLOWED[self.status]:
            raise InvalidTransitionError(f"Cannot move from {self.status} to {status}")

        if status == "processing" and self.status != "processing":
            self.started_at = utcnow()
        if progress is not None and status != "failed":
            self.progress = max(self.progress, min(progress, 100))
        if status in TERMINAL_STATUSES:
            self.completed_at = utcnow()
        if status == "failed":
            self.error = error or "Processing failed"
        self.status = status

    def reset(self) -> None:
        """Back to pending/0 for a reprocess run."""
        self.status = "pending"
        self.progress = 0
        self.error = None
        self.started_at = None
        self.completed_at = None


# ── Document ─────────────────────────────────────────────────────────


class DocumentFile(BaseModel):
    original_name: str
    path: str
    size: int = Field(ge=0)
    mime_type: str


class DocumentContent(BaseModel):
    raw: str = ""
    processed: str = ""
    keywords: list[Keyword] = Field(default_factory=list)
    entities: list[Entity] = Field(default_factory=list)
    summary: str = ""


class DocumentMetadata(BaseModel):
    subject: str = ""
    course: str = ""
    tags: list[str] = Field(default_factory=list)


class DocumentAnalytics(BaseModel):
    views: int = 0
    downloads: int = 0
    questions_generated: int = 0
    knowledge_graph_views: int = 0


class Document(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    title: str
    description: str = ""
    file: DocumentFile
    content: DocumentContent = Field(default_factory=DocumentContent)
    processing: ProcessingState = Field(default_factory=ProcessingState)
    knowledge_graph: GraphSnapshot = Field(default_factory=GraphSnapshot)
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    analytics: DocumentAnalytics = Field(default_factory=DocumentAnalytics)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_processed(self) -> bool:
        return self.processing.status == "completed"

    def text_for_context(self) -> str:
        return self.content.processed or self.content.raw


# ── Knowledge graph ──────────────────────────────────────────────────


class GraphMetadata(BaseModel):
    subject: str = ""
    course: str = ""
    chapter: str = ""
    tags: list[str] = Field(default_factory=list)
    difficulty: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    version: int = 1


class GraphSharing(BaseModel):
    is_public: bool = False


class GraphAnalytics(BaseModel):
    views: int = 0
    interactions: int = 0
    queries: int = 0
    exports: int = 0


class GraphGeneration(BaseModel):
    algorithm: str = "tf-isf+cooccurrence"
    parameters: dict[str, str | int | float | bool] = Field(default_factory=dict)
    processing_time_ms: int = 0


class KnowledgeGraphRecord(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    user_id: str
    document_ids: list[str] = Field(default_factory=list)
    graph: GraphSnapshot = Field(default_factory=GraphSnapshot)
    metadata: GraphMetadata = Field(default_factory=GraphMetadata)
    sharing: GraphSharing = Field(default_factory=GraphSharing)
    analytics: GraphAnalytics = Field(default_factory=GraphAnalytics)
    generation: GraphGeneration = Field(default_factory=GraphGeneration)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def statistics(self) -> GraphStatistics:
        return self.graph.statistics
