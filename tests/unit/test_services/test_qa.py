"""Unit tests for grounded question answering."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from studygraph.models.document import KnowledgeGraphRecord
from studygraph.models.schemas import ChatTurn, ConceptNode, GraphSnapshot, NodeProperties
from studygraph.services.qa import CANNOT_ANSWER, QAService, question_keywords
from studygraph.utils.exceptions import NotFoundError


def _qa(router, document_repo, graph_repo) -> QAService:
    return QAService(router, document_repo, graph_repo)


def test_question_keywords_drop_short_and_stop_words():
    assert question_keywords("What does chlorophyll absorb?") == ["chlorophyll", "absorb"]
    assert question_keywords("什么是机器学习？") == ["机器学习"]


@pytest.mark.asyncio
async def test_no_context_gives_canned_answer(local_router, document_repo, graph_repo):
    answer = await _qa(local_router, document_repo, graph_repo).chat("What is entropy?", user_id="user-1")
    assert answer.answer == CANNOT_ANSWER
    assert answer.confidence == 0.0
    assert answer.source.type == "none"
    assert len(answer.suggestions) == 3


@pytest.mark.asyncio
async def test_irrelevant_question_gives_canned_answer(local_router, document_repo, graph_repo, make_document, english_text):
    document = make_document(english_text)
    document.content.raw = english_text
    await document_repo.save(document)

    answer = await _qa(local_router, document_repo, graph_repo).chat(
        "Explain quantum entanglement", user_id="user-1", document_id=document.id
    )
    assert answer.answer == CANNOT_ANSWER
    assert answer.confidence == 0.0
    assert answer.source.type == "document"


@pytest.mark.asyncio
async def test_local_answer_without_providers(local_router, document_repo, graph_repo, make_document, english_text):
    document = make_document(english_text)
    document.content.raw = english_text
    await document_repo.save(document)

    answer = await _qa(local_router, document_repo, graph_repo).chat(
        "What does chlorophyll absorb?", user_id="user-1", document_id=document.id
    )
    assert answer.answer == "Chlorophyll absorbs light energy during photosynthesis"
    assert answer.confidence == 0.4


@pytest.mark.asyncio
async def test_provider_answer(mock_router, document_repo, graph_repo, make_document, english_text):
    document = make_document(english_text)
    document.content.raw = english_text
    await document_repo.save(document)

    answer = await _qa(mock_router, document_repo, graph_repo).chat(
        "What does chlorophyll absorb?", user_id="user-1", document_id=document.id
    )
    assert answer.answer in ("gemini response", "deepseek response")
    assert answer.confidence == 0.8
    assert answer.source.title == document.title


@pytest.mark.asyncio
async def test_failed_providers_degrade_to_local_answer(mock_registry, mock_router, document_repo, graph_repo, make_document, english_text):
    for name in ("gemini", "deepseek"):
        mock_registry.get_model(name).ainvoke = AsyncMock(side_effect=RuntimeError("down"))
    document = make_document(english_text)
    document.content.raw = english_text
    await document_repo.save(document)

    answer = await _qa(mock_router, document_repo, graph_repo).chat(
        "What does chlorophyll absorb?", user_id="user-1", document_id=document.id
    )
    assert answer.confidence == 0.3
    assert "Chlorophyll" in answer.answer


@pytest.mark.asyncio
async def test_knowledge_graph_takes_precedence(local_router, document_repo, graph_repo, make_document, english_text):
    document = make_document(english_text)
    await document_repo.save(document)
    node = ConceptNode(
        id="chlorophyll",
        label="chlorophyll",
        properties=NodeProperties(description="Chlorophyll absorbs light energy."),
    )
    record = KnowledgeGraphRecord(title="Plants", user_id="user-1", graph=GraphSnapshot(nodes=[node]))
    await graph_repo.save(record)

    answer = await _qa(local_router, document_repo, graph_repo).chat(
        "What does chlorophyll absorb?",
        user_id="user-1",
        document_id=document.id,
        knowledge_graph_id=record.id,
    )
    assert answer.source.type == "knowledge_graph"
    assert answer.source.relevant_nodes == ["chlorophyll"]
    assert answer.confidence == 0.4


@pytest.mark.asyncio
async def test_missing_reference_raises(local_router, document_repo, graph_repo):
    qa = _qa(local_router, document_repo, graph_repo)
    with pytest.raises(NotFoundError):
        await qa.chat("anything here", user_id="user-1", document_id="nope")
    with pytest.raises(NotFoundError):
        await qa.chat("anything here", user_id="user-1", knowledge_graph_id="nope")


@pytest.mark.asyncio
async def test_only_recent_history_reaches_the_prompt(mock_registry, document_repo, graph_repo, make_document, english_text):
    from studygraph.models.local_fallback import LocalFallback
    from studygraph.models.provider_router import ProviderRouter

    router = ProviderRouter(mock_registry, LocalFallback(), preferred="gemini")
    document = make_document(english_text)
    document.content.raw = english_text
    await document_repo.save(document)
    history = [ChatTurn(question=f"q{i}", answer=f"a{i}") for i in range(7)]

    await _qa(router, document_repo, graph_repo).chat(
        "What does chlorophyll absorb?", user_id="user-1", document_id=document.id, history=history
    )

    messages = mock_registry.get_model("gemini").ainvoke.await_args.args[0]
    prompt = messages[-1].content
    assert "Q: q6\n" in prompt
    assert "Q: q2\n" in prompt
    assert "Q: q1\n" not in prompt
