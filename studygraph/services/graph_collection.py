"""Standalone knowledge graphs built from one or more of a user's documents."""

from __future__ import annotations

import time

from studygraph.config import Settings
from studygraph.graph.builder import KnowledgeGraphService
from studygraph.graph.export import ExportFormat, export_graph
from studygraph.models.document import GraphGeneration, GraphMetadata, KnowledgeGraphRecord
from studygraph.models.schemas import ConceptNode, RelationEdge
from studygraph.storage.repository import DocumentRepository, KnowledgeGraphRepository
from studygraph.utils.exceptions import EmptyDocumentError, InputError, NotFoundError, PermissionDeniedError
from studygraph.utils.logging import get_logger
from studygraph.utils.text_processing import contains_term

logger = get_logger(__name__)


class GraphCollectionService:
    def __init__(
        self,
        settings: Settings,
        documents: DocumentRepository,
        graphs: KnowledgeGraphRepository,
        builder: KnowledgeGraphService,
    ) -> None:
        self._settings = settings
        self._documents = documents
        self._graphs = graphs
        self._builder = builder

    async def create(
        self,
        *,
        user_id: str,
        document_ids: list[str],
        title: str = "",
        description: str = "",
        metadata: GraphMetadata | None = None,
    ) -> KnowledgeGraphRecord:
        """Build and store a graph over the combined text of ``document_ids``.

        The record is saved only after construction succeeds, so a failed
        build stores nothing.
        """
        if not document_ids:
            raise InputError("Select at least one document")

        texts: list[str] = []
        for document_id in dict.fromkeys(document_ids):
            document = await self._documents.get_for_user(document_id, user_id)
            if document is None:
                raise PermissionDeniedError(f"Document {document_id} is not accessible")
            texts.append(document.text_for_context())

        combined = "\n\n".join(texts)
        if not combined.strip():
            raise EmptyDocumentError("The selected documents have no content")

        start = time.monotonic()
        graph = await self._builder.build_graph(
            combined,
            title=title,
            user_id=user_id,
            max_nodes=self._settings.COLLECTION_MAX_NODES,
        )
        record = KnowledgeGraphRecord(
            title=title or "Knowledge graph",
            description=description,
            user_id=user_id,
            document_ids=list(dict.fromkeys(document_ids)),
            graph=graph,
            metadata=metadata or GraphMetadata(),
            generation=GraphGeneration(
                parameters={
                    "max_nodes": self._settings.COLLECTION_MAX_NODES,
                    "min_importance": self._settings.GRAPH_MIN_IMPORTANCE,
                    "keyword_limit": self._settings.KEYWORD_LIMIT,
                },
                processing_time_ms=int((time.monotonic() - start) * 1000),
            ),
        )
        await self._graphs.save(record)
        logger.info(
            "knowledge_graph_created",
            graph_id=record.id,
            documents=len(record.document_ids),
            nodes=graph.statistics.node_count,
        )
        return record

    async def get(self, graph_id: str, user_id: str) -> KnowledgeGraphRecord:
        record = await self._graphs.get_for_user(graph_id, user_id)
        if record is None:
            raise NotFoundError(f"Knowledge graph {graph_id} not found")
        return record

    async def view(self, graph_id: str, user_id: str) -> KnowledgeGraphRecord:
        record = await self.get(graph_id, user_id)
        record.analytics.views += 1
        return await self._graphs.save(record)

    async def list_graphs(self, user_id: str) -> list[KnowledgeGraphRecord]:
        return await self._graphs.list_for_user(user_id)

    async def delete(self, graph_id: str, user_id: str) -> None:
        await self.get(graph_id, user_id)
        await self._graphs.delete(graph_id)
        logger.info("knowledge_graph_deleted", graph_id=graph_id)

    async def search(self, graph_id: str, user_id: str, query: str) -> list[ConceptNode]:
        """Nodes whose label or description contains ``query``, case-insensitively."""
        if not query.strip():
            raise InputError("Provide a search term")
        record = await self.get(graph_id, user_id)
        record.analytics.queries += 1
        await self._graphs.save(record)
        return [
            n
            for n in record.graph.nodes
            if contains_term(n.label, query) or contains_term(n.properties.description, query)
        ]

    async def node_detail(
        self, graph_id: str, user_id: str, node_id: str
    ) -> tuple[ConceptNode, list[ConceptNode], list[RelationEdge]]:
        """The node, its neighbours and every edge touching it."""
        record = await self.get(graph_id, user_id)
        node = next((n for n in record.graph.nodes if n.id == node_id), None)
        if node is None:
            raise NotFoundError(f"Node {node_id} not found")

        edges = [e for e in record.graph.edges if node_id in (e.source, e.target)]
        neighbour_ids = {e.source for e in edges} | {e.target for e in edges}
        neighbours = [n for n in record.graph.nodes if n.id in neighbour_ids and n.id != node_id]

        record.analytics.interactions += 1
        await self._graphs.save(record)
        return node, neighbours, edges

    async def export(self, graph_id: str, user_id: str, fmt: ExportFormat) -> tuple[KnowledgeGraphRecord, str, str]:
        record = await self.get(graph_id, user_id)
        content, media_type = export_graph(record, fmt)
        record.analytics.exports += 1
        await self._graphs.save(record)
        return record, content, media_type
