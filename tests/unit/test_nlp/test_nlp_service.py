"""Unit tests for the NLP facade."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from studygraph.models.local_fallback import DEFAULT_QUESTIONS, LocalFallback
from studygraph.models.provider_router import ProviderRouter
from studygraph.nlp.service import NLPService


@pytest.mark.asyncio
async def test_summary_falls_back_to_extractive(local_router, english_text):
    summary = await NLPService(local_router).generate_summary(english_text, max_length=500)
    assert summary.endswith(".")
    assert summary.count(". ") == 2


@pytest.mark.asyncio
async def test_provider_summary_is_truncated(mock_registry, english_text):
    mock_registry.get_model("gemini").ainvoke = AsyncMock(return_value=MagicMock(content="x" * 400))
    router = ProviderRouter(mock_registry, LocalFallback(), preferred="gemini")

    summary = await NLPService(router).generate_summary(english_text, max_length=100)
    assert summary == "x" * 100


@pytest.mark.asyncio
async def test_questions_from_provider_json(mock_registry, english_text):
    payload = {"questions": [{"question": "What is chlorophyll?", "type": "definition"}, "Why do plants need light?"]}
    mock_registry.get_model("gemini").ainvoke = AsyncMock(return_value=MagicMock(content=json.dumps(payload)))
    router = ProviderRouter(mock_registry, LocalFallback(), preferred="gemini")

    questions = await NLPService(router).generate_questions(english_text, count=5, difficulty="hard")
    assert [q.question for q in questions] == ["What is chlorophyll?", "Why do plants need light?"]
    assert questions[0].type == "definition"
    assert all(q.difficulty == "hard" for q in questions)


@pytest.mark.asyncio
async def test_questions_template_fallback(local_router, english_text):
    questions = await NLPService(local_router).generate_questions(english_text, count=3, difficulty="easy")
    assert [q.question for q in questions] == [q["question"] for q in DEFAULT_QUESTIONS[:3]]
    assert all(q.difficulty == "easy" for q in questions)


@pytest.mark.asyncio
async def test_explain_concept_locally(local_router, english_text):
    nlp = NLPService(local_router)
    assert await nlp.explain_concept("chlorophyll", english_text) == (
        "Chlorophyll absorbs light energy during photosynthesis"
    )
    assert "entropy" in await nlp.explain_concept("entropy", english_text)


def test_analyze_levels(local_router, english_text):
    nlp = NLPService(local_router)

    basic = nlp.analyze(english_text, "basic")
    assert set(basic) == {"word_count", "reading_time_minutes", "difficulty", "topics"}

    full = nlp.analyze(english_text)
    assert full["keywords"]
    assert full["structure"]["section_count"] == 1


@pytest.mark.asyncio
async def test_suggest_concepts_locally(local_router, chinese_text):
    concepts = await NLPService(local_router).suggest_concepts(chinese_text)
    assert concepts[0].name == "机器学习"
    assert concepts[0].importance == 1.0


@pytest.mark.asyncio
async def test_suggest_relations_normalises_provider_output(mock_registry):
    payload = {
        "relations": [
            {"from": "A", "to": "B", "relation": "invented_by", "strength": 1.5},
            {"from": "C", "to": "D", "relation": "part_of", "strength": "0.4"},
            {"from": "", "to": "E"},
        ]
    }
    mock_registry.get_model("gemini").ainvoke = AsyncMock(return_value=MagicMock(content=json.dumps(payload)))
    router = ProviderRouter(mock_registry, LocalFallback(), preferred="gemini")

    relations = await NLPService(router).suggest_relations("A B C D")
    assert [(r.source, r.target, r.relation, r.strength) for r in relations] == [
        ("A", "B", "related_to", 1.0),
        ("C", "D", "part_of", 0.4),
    ]
