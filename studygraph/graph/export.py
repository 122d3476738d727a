"""Serialise knowledge graphs for download."""

from __future__ import annotations

import csv
import io
import json
from typing import Literal

import networkx as nx

from studygraph.graph.optimizer import to_networkx
from studygraph.models.document import KnowledgeGraphRecord

ExportFormat = Literal["json", "csv", "graphml"]

MEDIA_TYPES: dict[str, str] = {
    "json": "application/json",
    "csv": "text/csv",
    "graphml": "application/xml",
}

NODE_COLUMNS = ("id", "label", "type", "importance", "frequency", "difficulty", "description")
EDGE_COLUMNS = ("id", "from", "to", "type", "weight", "bidirectional", "evidence")


def to_json(record: KnowledgeGraphRecord) -> str:
    return json.dumps(record.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2)


def to_csv(record: KnowledgeGraphRecord) -> str:
    """Nodes and edges as two CSV tables under ``# Nodes`` / ``# Edges`` headings."""
    nodes = io.StringIO()
    writer = csv.writer(nodes)
    writer.writerow(NODE_COLUMNS)
    for n in record.graph.nodes:
        p = n.properties
        writer.writerow([n.id, n.label, n.type, p.importance, p.frequency, p.difficulty, p.description])

    edges = io.StringIO()
    writer = csv.writer(edges)
    writer.writerow(EDGE_COLUMNS)
    for e in record.graph.edges:
        writer.writerow(
            [e.id, e.source, e.target, e.type, e.weight, e.properties.bidirectional, e.properties.evidence]
        )
    return f"# Nodes\n{nodes.getvalue()}\n# Edges\n{edges.getvalue()}"


def to_graphml(record: KnowledgeGraphRecord) -> str:
    graph = to_networkx(record.graph.nodes, record.graph.edges)
    graph.graph["title"] = record.title
    return "\n".join(nx.generate_graphml(graph, encoding="utf-8", prettyprint=True))


_EXPORTERS = {"json": to_json, "csv": to_csv, "graphml": to_graphml}


def export_graph(record: KnowledgeGraphRecord, fmt: ExportFormat) -> tuple[str, str]:
    """Return ``(content, media_type)`` for ``fmt``."""
    return _EXPORTERS[fmt](record), MEDIA_TYPES[fmt]
