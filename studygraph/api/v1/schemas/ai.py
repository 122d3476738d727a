"""Request/response models for the AI API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from studygraph.models.schemas import (
    ChatTurn,
    Entity,
    Keyword,
    LearningQuestion,
    SuggestedConcept,
    SuggestedRelation,
)


class ChatRequest(BaseModel):
    question: str = Field(..., min_length=1)
    document_id: str | None = None
    knowledge_graph_id: str | None = None
    history: list[ChatTurn] = Field(default_factory=list)


class TextRequest(BaseModel):
    text: str = Field(..., min_length=1)


class KeywordsRequest(TextRequest):
    n: int = Field(default=20, ge=1, le=200)


class KeywordsResponse(BaseModel):
    keywords: list[Keyword]


class EntitiesResponse(BaseModel):
    entities: list[Entity]


class ConceptsResponse(BaseModel):
    concepts: list[SuggestedConcept]


class RelationsResponse(BaseModel):
    relations: list[SuggestedRelation]


class SummaryRequest(BaseModel):
    text: str | None = None
    document_id: str | None = None
    max_length: int = Field(default=300, ge=20, le=5000)


class SummaryResponse(BaseModel):
    summary: str
    length: int
    document_id: str | None = None


class QuestionsRequest(BaseModel):
    document_id: str
    difficulty: Literal["easy", "medium", "hard"] = "medium"
    count: int = Field(default=5, ge=1, le=20)


class QuestionsResponse(BaseModel):
    document_id: str
    questions: list[LearningQuestion]


class ExplainRequest(BaseModel):
    concept: str = Field(..., min_length=1)
    document_id: str | None = None
    knowledge_graph_id: str | None = None


class ExplainResponse(BaseModel):
    concept: str
    explanation: str
    source: dict = Field(default_factory=dict)


class AnalyzeRequest(BaseModel):
    document_id: str
    analysis_type: Literal["basic", "comprehensive"] = "comprehensive"
