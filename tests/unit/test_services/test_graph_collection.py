"""Unit tests for multi-document knowledge graphs."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from studygraph.services.graph_collection import GraphCollectionService
from studygraph.utils.exceptions import (
    EmptyDocumentError,
    InputError,
    NotFoundError,
    PermissionDeniedError,
)


@pytest.fixture
def service(settings, document_repo, graph_repo, graph_builder):
    return GraphCollectionService(settings, document_repo, graph_repo, graph_builder)


async def _save(repo, document, text):
    document.content.raw = text
    await repo.save(document)
    return document


@pytest.mark.asyncio
async def test_create_combines_documents(service, document_repo, graph_repo, make_document, chinese_text, english_text):
    first = await _save(document_repo, make_document(), chinese_text)
    second = await _save(document_repo, make_document(), english_text)

    record = await service.create(user_id="user-1", document_ids=[first.id, second.id, first.id], title="Mixed")

    assert record.document_ids == [first.id, second.id]
    assert record.statistics.node_count > 0
    assert record.generation.parameters["max_nodes"] == 50
    assert await graph_repo.get(record.id) is not None
    labels = {n.label for n in record.graph.nodes}
    assert "机器学习" in labels


@pytest.mark.asyncio
async def test_create_rejects_foreign_documents(service, document_repo, graph_repo, make_document, chinese_text):
    foreign = await _save(document_repo, make_document(user_id="someone-else"), chinese_text)

    with pytest.raises(PermissionDeniedError):
        await service.create(user_id="user-1", document_ids=[foreign.id])
    assert await graph_repo.list_for_user("user-1") == []


@pytest.mark.asyncio
async def test_create_requires_documents_and_content(service, document_repo, make_document):
    with pytest.raises(InputError):
        await service.create(user_id="user-1", document_ids=[])

    blank = make_document()
    await document_repo.save(blank)
    with pytest.raises(EmptyDocumentError):
        await service.create(user_id="user-1", document_ids=[blank.id])


@pytest.mark.asyncio
async def test_failed_build_stores_nothing(settings, document_repo, graph_repo, make_document, chinese_text):
    builder = MagicMock()
    builder.build_graph = AsyncMock(side_effect=RuntimeError("boom"))
    service = GraphCollectionService(settings, document_repo, graph_repo, builder)
    document = await _save(document_repo, make_document(), chinese_text)

    with pytest.raises(RuntimeError):
        await service.create(user_id="user-1", document_ids=[document.id])
    assert await graph_repo.list_for_user("user-1") == []


@pytest.mark.asyncio
async def test_search_node_detail_and_export(service, document_repo, graph_repo, make_document, chinese_text):
    document = await _save(document_repo, make_document(), chinese_text)
    record = await service.create(user_id="user-1", document_ids=[document.id])

    results = await service.search(record.id, "user-1", "学习")
    assert {n.label for n in results} >= {"机器学习", "深度学习"}

    node, neighbours, edges = await service.node_detail(record.id, "user-1", "人工智能")
    assert node.label == "人工智能"
    assert {n.id for n in neighbours} == {"机器学习", "分支"}
    assert all("人工智能" in (e.source, e.target) for e in edges)

    _, content, media_type = await service.export(record.id, "user-1", "csv")
    assert media_type == "text/csv"
    assert content.startswith("# Nodes")

    stored = await graph_repo.get(record.id)
    assert (stored.analytics.queries, stored.analytics.interactions, stored.analytics.exports) == (1, 1, 1)


@pytest.mark.asyncio
async def test_lookups_are_scoped_to_owner(service, document_repo, make_document, chinese_text):
    document = await _save(document_repo, make_document(), chinese_text)
    record = await service.create(user_id="user-1", document_ids=[document.id])

    with pytest.raises(NotFoundError):
        await service.get(record.id, "user-2")
    with pytest.raises(NotFoundError):
        await service.node_detail(record.id, "user-1", "missing")
    with pytest.raises(InputError):
        await service.search(record.id, "user-1", "  ")

    await service.delete(record.id, "user-1")
    with pytest.raises(NotFoundError):
        await service.get(record.id, "user-1")
