"""Request/response models for the knowledge graph API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from studygraph.models.document import GraphMetadata, KnowledgeGraphRecord
from studygraph.models.schemas import ConceptNode, GraphSnapshot, GraphStatistics, RelationEdge


class CreateGraphRequest(BaseModel):
    document_ids: list[str] = Field(..., min_length=1)
    title: str = ""
    description: str = ""
    metadata: GraphMetadata = Field(default_factory=GraphMetadata)


class BuildGraphRequest(BaseModel):
    text: str = Field(..., min_length=1)
    title: str = "Untitled document"
    max_nodes: int = Field(default=50, ge=1, le=500)


class GraphSummary(BaseModel):
    id: str
    title: str
    description: str
    document_ids: list[str]
    statistics: GraphStatistics
    created_at: datetime

    @classmethod
    def from_record(cls, record: KnowledgeGraphRecord) -> GraphSummary:
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            document_ids=record.document_ids,
            statistics=record.graph.statistics,
            created_at=record.created_at,
        )


class GraphListResponse(BaseModel):
    graphs: list[GraphSummary] = Field(default_factory=list)
    total: int = 0


class SearchResponse(BaseModel):
    results: list[ConceptNode]
    total: int


class NodeDetailResponse(BaseModel):
    node: ConceptNode
    related_nodes: list[ConceptNode]
    related_edges: list[RelationEdge]


class RelatedConcept(BaseModel):
    label: str
    type: str
    weight: float
    document_id: str


class BuildGraphResponse(BaseModel):
    title: str
    graph: GraphSnapshot
