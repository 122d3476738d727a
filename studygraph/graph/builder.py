"""End-to-end knowledge graph construction from plain text."""

from __future__ import annotations

import time

from studygraph.config import Settings
from studygraph.graph.concepts import ConceptBuilder
from studygraph.graph.optimizer import GraphAssembler
from studygraph.graph.relations import RelationExtractor
from studygraph.models.schemas import GraphSnapshot
from studygraph.nlp.entities import EntityRecognizer
from studygraph.nlp.keywords import KeywordRanker
from studygraph.services.graph_store import GraphStore
from studygraph.utils.logging import get_logger

logger = get_logger(__name__)


class KnowledgeGraphService:
    """keywords + entities -> concepts -> relations -> pruned graph.

    When a ``document_id`` is given and a graph store is configured, the
    result is mirrored there as well. That step never fails the build.
    """

    def __init__(
        self,
        settings: Settings,
        graph_store: GraphStore | None = None,
        *,
        ranker: KeywordRanker | None = None,
        recognizer: EntityRecognizer | None = None,
    ) -> None:
        self._settings = settings
        self._graph_store = graph_store or GraphStore(None)
        self._ranker = ranker or KeywordRanker()
        self._recognizer = recognizer or EntityRecognizer()
        self._concepts = ConceptBuilder(
            min_keyword_weight=settings.KEYWORD_MIN_IMPORTANCE,
            min_entity_confidence=settings.ENTITY_MIN_CONFIDENCE,
        )
        self._relations = RelationExtractor()
        self._assembler = GraphAssembler()

    async def build_graph(
        self,
        text: str,
        *,
        title: str = "Untitled document",
        user_id: str | None = None,
        document_id: str | None = None,
        max_nodes: int | None = None,
        min_importance: float | None = None,
    ) -> GraphSnapshot:
        start = time.monotonic()
        max_nodes = max_nodes if max_nodes is not None else self._settings.COLLECTION_MAX_NODES
        min_importance = (
            min_importance if min_importance is not None else self._settings.GRAPH_MIN_IMPORTANCE
        )

        keywords = self._ranker.extract_keywords(text, self._settings.KEYWORD_LIMIT)
        entities = self._recognizer.extract(text)
        concepts = self._concepts.build(keywords, entities, text, source_ref=document_id)
        edges = self._relations.extract(text, concepts)
        graph = self._assembler.assemble(concepts, edges, max_nodes, min_importance)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "knowledge_graph_built",
            title=title,
            document_id=document_id,
            concepts=len(concepts),
            relations=len(edges),
            nodes=graph.statistics.node_count,
            edges=graph.statistics.edge_count,
            elapsed_ms=elapsed_ms,
        )

        if document_id and user_id and self._graph_store.enabled:
            await self._graph_store.save_graph(graph, document_id=document_id, user_id=user_id)
        return graph
