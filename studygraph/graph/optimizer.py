"""Prune, lay out and measure a concept graph.

The steps run in a fixed order: importance filter and node cap, dangling
edge removal, isolated node removal, circular layout, statistics. Layout
comes after pruning so positions are spread over surviving nodes only.
"""

from __future__ import annotations

import networkx as nx

from studygraph.graph.layout import circular_position
from studygraph.models.schemas import ConceptNode, GraphSnapshot, GraphStatistics, RelationEdge

ISOLATED_KEEP_IMPORTANCE = 0.8


def complexity_label(node_count: int) -> str:
    if node_count < 10:
        return "simple"
    if node_count < 50:
        return "moderate"
    if node_count < 100:
        return "complex"
    return "very_complex"


def to_networkx(nodes: list[ConceptNode], edges: list[RelationEdge]) -> nx.MultiDiGraph:
    graph = nx.MultiDiGraph()
    for node in nodes:
        graph.add_node(node.id, label=node.label, type=node.type, importance=node.properties.importance)
    for edge in edges:
        graph.add_edge(edge.source, edge.target, key=edge.id, type=edge.type, weight=edge.weight)
    return graph


def compute_statistics(nodes: list[ConceptNode], edges: list[RelationEdge]) -> GraphStatistics:
    """Counts, density = e / (n(n-1)/2), average degree = 2e / n, and clustering.

    Density and average degree count every edge, parallel ones included.
    Clustering is measured on the undirected simple projection.
    """
    n = len(nodes)
    e = len(edges)
    density = e / (n * (n - 1) / 2) if n > 1 else 0.0
    average_degree = 2 * e / n if n > 0 else 0.0

    clustering = 0.0
    if n > 2:
        simple = nx.Graph(to_networkx(nodes, edges).to_undirected())
        simple.remove_edges_from(list(nx.selfloop_edges(simple)))
        clustering = nx.average_clustering(simple)

    return GraphStatistics(
        node_count=n,
        edge_count=e,
        density=round(density, 4),
        average_degree=round(average_degree, 4),
        clustering_coefficient=round(clustering, 4),
        complexity=complexity_label(n),
    )


class GraphAssembler:
    def __init__(self, isolated_keep_importance: float = ISOLATED_KEEP_IMPORTANCE) -> None:
        self._isolated_keep_importance = isolated_keep_importance

    def assemble(
        self,
        concepts: list[ConceptNode],
        edges: list[RelationEdge],
        max_nodes: int = 50,
        min_importance: float = 0.3,
    ) -> GraphSnapshot:
        kept = [c for c in concepts if c.properties.importance >= min_importance]
        kept = sorted(kept, key=lambda c: c.properties.importance, reverse=True)[: max(max_nodes, 0)]

        node_ids = {c.id for c in kept}
        kept_edges = [e for e in edges if e.source in node_ids and e.target in node_ids]

        connected = {e.source for e in kept_edges} | {e.target for e in kept_edges}
        kept = [
            c
            for c in kept
            if c.id in connected or c.properties.importance > self._isolated_keep_importance
        ]

        nodes = [
            c.model_copy(update={"position": circular_position(index, len(kept))})
            for index, c in enumerate(kept)
        ]
        return GraphSnapshot(
            nodes=nodes,
            edges=kept_edges,
            statistics=compute_statistics(nodes, kept_edges),
        )
