"""Explicit wiring of every service object for one process.

The API lifespan and each Celery task build their own container from
``Settings``; nothing is held in module-level globals.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from studygraph.config import Settings
from studygraph.graph.builder import KnowledgeGraphService
from studygraph.graph_db.connection import Neo4jConnection
from studygraph.graph_db.schema import init_schema
from studygraph.models.document import Document, KnowledgeGraphRecord
from studygraph.models.local_fallback import LocalFallback
from studygraph.models.provider_registry import ProviderRegistry
from studygraph.models.provider_router import ProviderRouter
from studygraph.nlp.entities import EntityRecognizer
from studygraph.nlp.keywords import KeywordRanker
from studygraph.nlp.service import NLPService
from studygraph.services.document_service import DocumentService
from studygraph.services.graph_collection import GraphCollectionService
from studygraph.services.graph_store import GraphStore
from studygraph.services.pipeline import DocumentPipeline
from studygraph.services.qa import QAService
from studygraph.services.task_queue import CeleryDispatcher, PipelineDispatcher, PipelineQueue
from studygraph.services.text_extraction import TextExtractor
from studygraph.storage.repository import Repository, build_repositories
from studygraph.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    documents: Repository[Document]
    graphs: Repository[KnowledgeGraphRecord]
    registry: ProviderRegistry
    router: ProviderRouter
    nlp: NLPService
    graph_store: GraphStore
    graph_builder: KnowledgeGraphService
    pipeline: DocumentPipeline
    dispatcher: PipelineDispatcher
    document_service: DocumentService
    graph_collection: GraphCollectionService
    qa: QAService
    neo4j: Neo4jConnection | None = None

    async def start(self) -> None:
        await self.dispatcher.start()

    async def close(self) -> None:
        await self.dispatcher.stop()
        if self.neo4j is not None:
            await self.neo4j.close()
        await self.documents.close()
        await self.graphs.close()


async def connect_graph_store(settings: Settings) -> Neo4jConnection | None:
    """Open Neo4j if configured. A failed connection disables the store."""
    if not settings.NEO4J_URI:
        logger.info("graph_store_disabled", reason="no_uri")
        return None
    conn = Neo4jConnection(settings)
    try:
        await conn.connect()
        await init_schema(conn)
    except Exception as exc:
        logger.warning("graph_store_unavailable", uri=settings.NEO4J_URI, error=str(exc))
        await conn.close()
        return None
    return conn


async def build_container(
    settings: Settings,
    *,
    inline_queue: bool | None = None,
    neo4j: Neo4jConnection | None = None,
) -> ServiceContainer:
    """Wire services for ``settings``.

    ``inline_queue`` forces the in-process queue regardless of
    ``PIPELINE_BACKEND``; the Celery worker uses it so a task never
    re-dispatches to Celery.
    """
    documents, graphs = build_repositories(settings.REDIS_URL)
    if neo4j is None:
        neo4j = await connect_graph_store(settings)
    graph_store = GraphStore(neo4j)

    ranker = KeywordRanker()
    recognizer = EntityRecognizer()
    registry = ProviderRegistry(settings)
    router = ProviderRouter(
        registry,
        LocalFallback(ranker, recognizer),
        preferred=settings.AI_PREFERRED_PROVIDER,
        rng=random.Random(settings.AI_RANDOM_SEED),
    )
    nlp = NLPService(router, ranker, recognizer)
    graph_builder = KnowledgeGraphService(settings, graph_store, ranker=ranker, recognizer=recognizer)
    extractor = TextExtractor()
    pipeline = DocumentPipeline(settings, documents, extractor, nlp, graph_builder)

    use_inline = inline_queue if inline_queue is not None else settings.PIPELINE_BACKEND == "inline"
    dispatcher: PipelineDispatcher
    if use_inline:
        dispatcher = PipelineQueue(pipeline, settings.PIPELINE_CONCURRENCY)
    else:
        dispatcher = CeleryDispatcher()

    return ServiceContainer(
        settings=settings,
        documents=documents,
        graphs=graphs,
        registry=registry,
        router=router,
        nlp=nlp,
        graph_store=graph_store,
        graph_builder=graph_builder,
        pipeline=pipeline,
        dispatcher=dispatcher,
        document_service=DocumentService(settings, documents, extractor, dispatcher, graph_store),
        graph_collection=GraphCollectionService(settings, documents, graphs, graph_builder),
        qa=QAService(router, documents, graphs),
        neo4j=neo4j,
    )
