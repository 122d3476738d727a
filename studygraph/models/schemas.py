"""Pydantic models for data flowing through extraction, graph construction and QA."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ScalarValue = str | int | float | bool

ConceptType = Literal[
    "concept", "topic", "definition", "example", "theory", "formula", "person", "place", "event"
]
RelationType = Literal[
    "related_to", "part_of", "depends_on", "similar_to", "opposite_to", "example_of", "leads_to"
]
EntityType = Literal["person", "concept", "method", "number", "formula", "example"]
Difficulty = Literal["easy", "medium", "hard"]
TaskKind = Literal["extract_concepts", "extract_relations", "generate_questions", "summary", "chat"]
ProviderName = Literal["gemini", "deepseek", "local"]


# ── Keyword / entity extraction ──────────────────────────────────────


class RankedTerm(BaseModel):
    term: str
    frequency: int = Field(ge=0)
    score: float = Field(ge=0.0)


class Keyword(BaseModel):
    word: str
    weight: float = Field(ge=0.0, le=1.0)
    frequency: int = Field(ge=0)


class Entity(BaseModel):
    text: str
    type: EntityType
    confidence: float = Field(ge=0.0, le=1.0)


# ── Graph nodes ──────────────────────────────────────────────────────


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class NodeStyle(BaseModel):
    color: str
    size: float
    shape: str = "circle"


class NodeProperties(BaseModel):
    description: str = ""
    importance: float = Field(default=0.5, ge=0.0, le=1.0)
    frequency: int = Field(default=1, ge=0)
    difficulty: Difficulty = "medium"
    synonyms: list[str] = Field(default_factory=list)
    category: str = ""
    source_documents: list[str] = Field(default_factory=list)
    extra: dict[str, ScalarValue] = Field(default_factory=dict)


class ConceptNode(BaseModel):
    id: str
    label: str
    type: ConceptType = "concept"
    properties: NodeProperties = Field(default_factory=NodeProperties)
    position: Position = Field(default_factory=Position)
    style: NodeStyle | None = None

    @property
    def importance(self) -> float:
        return self.properties.importance


# ── Graph edges ──────────────────────────────────────────────────────


class EdgeStyle(BaseModel):
    color: str
    width: float
    dashes: bool = False


class EdgeProperties(BaseModel):
    strength: float = Field(default=0.5, ge=0.0, le=1.0)
    bidirectional: bool = False
    evidence: str = ""
    source_documents: list[str] = Field(default_factory=list)
    extra: dict[str, ScalarValue] = Field(default_factory=dict)


class RelationEdge(BaseModel):
    """Directed edge; serialised with ``from`` / ``to`` keys."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    source: str = Field(alias="from")
    target: str = Field(alias="to")
    label: str = ""
    type: RelationType = "related_to"
    weight: float = Field(default=0.5, ge=0.0, le=1.0)
    properties: EdgeProperties = Field(default_factory=EdgeProperties)
    style: EdgeStyle | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.source, self.target, self.type)


# ── Assembled graph ──────────────────────────────────────────────────


class GraphStatistics(BaseModel):
    node_count: int = 0
    edge_count: int = 0
    density: float = 0.0
    average_degree: float = 0.0
    clustering_coefficient: float = 0.0
    complexity: Literal["simple", "moderate", "complex", "very_complex"] = "simple"


class GraphSnapshot(BaseModel):
    nodes: list[ConceptNode] = Field(default_factory=list)
    edges: list[RelationEdge] = Field(default_factory=list)
    statistics: GraphStatistics = Field(default_factory=GraphStatistics)

    @property
    def is_empty(self) -> bool:
        return not self.nodes


# ── Provider routing ─────────────────────────────────────────────────


class RouterResult(BaseModel):
    task: TaskKind
    provider: ProviderName
    data: dict = Field(default_factory=dict)

    @property
    def is_local(self) -> bool:
        return self.provider == "local"

    def text(self) -> str:
        """Best-effort plain-text view of ``data`` for free-text tasks."""
        for key in ("result", "answer", "summary"):
            value = self.data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return ""


# ── Question answering ───────────────────────────────────────────────


class ChatTurn(BaseModel):
    question: str
    answer: str


class ChatSource(BaseModel):
    type: Literal["none", "document", "knowledge_graph"] = "none"
    id: str | None = None
    title: str | None = None
    relevant_nodes: list[str] = Field(default_factory=list)


class ChatAnswer(BaseModel):
    answer: str
    confidence: float = Field(ge=0.0, le=1.0)
    suggestions: list[str] = Field(default_factory=list)
    source: ChatSource = Field(default_factory=ChatSource)


class SuggestedConcept(BaseModel):
    name: str
    description: str = ""
    importance: float = Field(default=0.5, ge=0.0, le=1.0)


class SuggestedRelation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")
    relation: RelationType = "related_to"
    strength: float = Field(default=0.5, ge=0.0, le=1.0)


class LearningQuestion(BaseModel):
    question: str
    type: str = "comprehension"
    difficulty: str = "medium"
