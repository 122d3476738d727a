"""Unit tests for knowledge graph export formats."""

from __future__ import annotations

import json

import pytest

from studygraph.graph.export import export_graph, to_csv, to_graphml, to_json
from studygraph.models.document import KnowledgeGraphRecord


@pytest.mark.asyncio
async def test_json_export_uses_from_and_to(graph_builder, chinese_text):
    graph = await graph_builder.build_graph(chinese_text)
    record = KnowledgeGraphRecord(title="ML", user_id="u1", graph=graph)

    payload = json.loads(to_json(record))
    assert payload["title"] == "ML"
    assert {"from", "to"} <= set(payload["graph"]["edges"][0])


@pytest.mark.asyncio
async def test_csv_export_has_two_sections(graph_builder, chinese_text):
    graph = await graph_builder.build_graph(chinese_text)
    record = KnowledgeGraphRecord(title="ML", user_id="u1", graph=graph)

    content = to_csv(record)
    assert content.startswith("# Nodes\nid,label,type")
    assert "# Edges\nid,from,to,type" in content
    assert "机器学习" in content


@pytest.mark.asyncio
async def test_graphml_export(graph_builder, chinese_text):
    graph = await graph_builder.build_graph(chinese_text)
    record = KnowledgeGraphRecord(title="ML", user_id="u1", graph=graph)

    content = to_graphml(record)
    assert "<graphml" in content
    assert "机器学习" in content


def test_export_graph_reports_media_type():
    record = KnowledgeGraphRecord(title="empty", user_id="u1")
    assert export_graph(record, "csv")[1] == "text/csv"
    assert export_graph(record, "json")[1] == "application/json"
    assert export_graph(record, "graphml")[1] == "application/xml"
