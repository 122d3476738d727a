"""Document processing pipeline driven by the processing state machine.

Each stage writes its output and its progress checkpoint, then saves the
whole document, so a poller sees progress rise while the run is in flight.
A run always executes, even on a record another run already finished.
Any exception ends the run as ``failed`` with the error recorded; outputs
saved before the failure are kept.
"""

from __future__ import annotations

from studygraph.config import Settings
from studygraph.graph.builder import KnowledgeGraphService
from studygraph.models.document import (
    CHECKPOINT_ANALYSED,
    CHECKPOINT_COMPLETED,
    CHECKPOINT_GRAPH_BUILT,
    CHECKPOINT_STARTED,
    CHECKPOINT_SUMMARISED,
    CHECKPOINT_TEXT_EXTRACTED,
    Document,
)
from studygraph.nlp.service import NLPService
from studygraph.services.text_extraction import TextExtractor
from studygraph.storage.repository import DocumentRepository
from studygraph.utils.exceptions import EmptyDocumentError
from studygraph.utils.logging import get_logger
from studygraph.utils.text_processing import clean_text

logger = get_logger(__name__)


class DocumentPipeline:
    def __init__(
        self,
        settings: Settings,
        documents: DocumentRepository,
        extractor: TextExtractor,
        nlp: NLPService,
        graphs: KnowledgeGraphService,
    ) -> None:
        self._settings = settings
        self._documents = documents
        self._extractor = extractor
        self._nlp = nlp
        self._graphs = graphs

    async def run(self, document_id: str) -> Document | None:
        """Process one document. Never raises; failures are recorded on the document."""
        document = await self._documents.get(document_id)
        if document is None:
            logger.warning("pipeline_document_missing", document_id=document_id)
            return None
        if document.processing.is_terminal:
            # A stale run can finish after a reprocess reset the record; the
            # queued run still owns the document and starts over.
            logger.info(
                "pipeline_restarting", document_id=document_id, status=document.processing.status
            )
            document.processing.reset()

        log = logger.bind(document_id=document_id)
        try:
            await self._checkpoint(document, CHECKPOINT_STARTED)
            log.info("pipeline_started")

            raw = await self._extractor.extract_file(document.file.path, document.file.mime_type)
            text = clean_text(raw)
            if not text:
                raise EmptyDocumentError("No text could be extracted from the document")
            document.content.raw = text
            await self._checkpoint(document, CHECKPOINT_TEXT_EXTRACTED)

            document.content.keywords = self._nlp.extract_keywords(text, self._settings.KEYWORD_LIMIT)
            document.content.entities = self._nlp.extract_entities(text)
            await self._checkpoint(document, CHECKPOINT_ANALYSED)

            document.content.summary = await self._nlp.generate_summary(text)
            document.content.processed = text[: self._settings.PROCESSED_TEXT_CHARS]
            await self._checkpoint(document, CHECKPOINT_SUMMARISED)

            document.knowledge_graph = await self._graphs.build_graph(
                text,
                title=document.title,
                user_id=document.user_id,
                document_id=document.id,
                max_nodes=self._settings.DOCUMENT_MAX_NODES,
            )
            await self._checkpoint(document, CHECKPOINT_GRAPH_BUILT)

            document.processing.transition("completed", CHECKPOINT_COMPLETED)
            await self._documents.save(document)
            log.info(
                "pipeline_completed",
                keywords=len(document.content.keywords),
                nodes=document.knowledge_graph.statistics.node_count,
            )
        except Exception as exc:
            log.error(
                "pipeline_failed",
                progress=document.processing.progress,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            await self._fail(document, str(exc) or type(exc).__name__)
        return document

    async def _checkpoint(self, document: Document, progress: int) -> None:
        document.processing.transition("processing", progress)
        await self._documents.save(document)
        logger.debug("pipeline_checkpoint", document_id=document.id, progress=progress)

    async def _fail(self, document: Document, error: str) -> None:
        if not document.processing.is_terminal:
            document.processing.transition("failed", error=error)
        try:
            await self._documents.save(document)
        except Exception as exc:
            logger.error("pipeline_failure_not_saved", document_id=document.id, error=str(exc))
