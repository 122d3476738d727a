"""Best-effort mirror of document graphs into Neo4j.

Every write failure is logged and swallowed: the repository copy of the
graph is the source of truth and the pipeline never fails because of it.
"""

from __future__ import annotations

from studygraph.graph_db.connection import Neo4jConnection
from studygraph.graph_db.queries import (
    CONCEPT_NEIGHBOURS,
    DELETE_DOCUMENT_GRAPH,
    MERGE_CONCEPTS,
    MERGE_RELATIONS,
)
from studygraph.models.schemas import GraphSnapshot
from studygraph.utils.exceptions import GraphStoreError
from studygraph.utils.logging import get_logger

logger = get_logger(__name__)


class GraphStore:
    def __init__(self, conn: Neo4jConnection | None) -> None:
        self._conn = conn

    @property
    def enabled(self) -> bool:
        return self._conn is not None

    async def save_graph(self, graph: GraphSnapshot, *, document_id: str, user_id: str) -> bool:
        """Replace the stored graph for ``document_id``. Returns False on failure."""
        if self._conn is None:
            return False
        nodes = [
            {
                "id": n.id,
                "label": n.label,
                "type": n.type,
                "importance": n.properties.importance,
                "description": n.properties.description,
            }
            for n in graph.nodes
        ]
        edges = [
            {"id": e.id, "source": e.source, "target": e.target, "type": e.type,
             "weight": e.weight, "label": e.label}
            for e in graph.edges
        ]
        try:
            await self._conn.execute_write(DELETE_DOCUMENT_GRAPH, document_id=document_id)
            await self._conn.execute_write(
                MERGE_CONCEPTS, nodes=nodes, document_id=document_id, user_id=user_id
            )
            await self._conn.execute_write(MERGE_RELATIONS, edges=edges, document_id=document_id)
        except Exception as exc:
            logger.warning(
                "graph_store_write_failed",
                document_id=document_id,
                error=str(exc),
            )
            return False
        logger.info("graph_store_saved", document_id=document_id, nodes=len(nodes), edges=len(edges))
        return True

    async def delete_graph(self, document_id: str) -> None:
        if self._conn is None:
            return
        try:
            await self._conn.execute_write(DELETE_DOCUMENT_GRAPH, document_id=document_id)
        except Exception as exc:
            logger.warning("graph_store_delete_failed", document_id=document_id, error=str(exc))

    async def related_concepts(self, label: str, *, user_id: str, limit: int = 10) -> list[dict]:
        """Neighbours of ``label`` across all of the user's stored documents."""
        if self._conn is None:
            raise GraphStoreError("Graph store is not configured")
        try:
            return await self._conn.execute_read(
                CONCEPT_NEIGHBOURS, label=label, user_id=user_id, limit=limit
            )
        except Exception as exc:
            raise GraphStoreError(f"Related concept query failed: {exc}") from exc
