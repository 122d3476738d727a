"""Request/response models for the document API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from studygraph.models.document import (
    Document,
    DocumentAnalytics,
    DocumentContent,
    DocumentMetadata,
    ProcessingState,
)
from studygraph.models.schemas import GraphSnapshot


class FileInfo(BaseModel):
    original_name: str
    size: int
    mime_type: str


class DocumentResponse(BaseModel):
    id: str
    title: str
    description: str
    file: FileInfo
    content: DocumentContent
    processing: ProcessingState
    metadata: DocumentMetadata
    analytics: DocumentAnalytics
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, document: Document) -> DocumentResponse:
        return cls(
            id=document.id,
            title=document.title,
            description=document.description,
            file=FileInfo(
                original_name=document.file.original_name,
                size=document.file.size,
                mime_type=document.file.mime_type,
            ),
            content=document.content,
            processing=document.processing,
            metadata=document.metadata,
            analytics=document.analytics,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class DocumentSummary(BaseModel):
    id: str
    title: str
    status: str
    progress: int
    node_count: int = 0
    created_at: datetime

    @classmethod
    def from_document(cls, document: Document) -> DocumentSummary:
        return cls(
            id=document.id,
            title=document.title,
            status=document.processing.status,
            progress=document.processing.progress,
            node_count=document.knowledge_graph.statistics.node_count,
            created_at=document.created_at,
        )


class UploadResponse(BaseModel):
    id: str
    title: str
    status: str
    progress: int
    message: str = "Document uploaded; processing has started"


class DocumentGraphResponse(BaseModel):
    document_id: str
    title: str
    status: str
    graph: GraphSnapshot


class DocumentListResponse(BaseModel):
    documents: list[DocumentSummary] = Field(default_factory=list)
    total: int = 0
