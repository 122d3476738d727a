"""Document lifecycle: upload, lookup, reprocess and delete."""

from __future__ import annotations

import asyncio
import mimetypes
import uuid
from pathlib import Path

from studygraph.config import Settings
from studygraph.models.document import (
    Document,
    DocumentFile,
    DocumentMetadata,
)
from studygraph.models.schemas import GraphSnapshot
from studygraph.services.graph_store import GraphStore
from studygraph.services.task_queue import PipelineDispatcher
from studygraph.services.text_extraction import TextExtractor
from studygraph.storage.repository import DocumentRepository
from studygraph.utils.exceptions import (
    EmptyDocumentError,
    FileTooLargeError,
    NotFoundError,
    UnsupportedFileTypeError,
)
from studygraph.utils.logging import get_logger

logger = get_logger(__name__)

_GENERIC_TYPES = {"", "application/octet-stream"}


class DocumentService:
    def __init__(
        self,
        settings: Settings,
        documents: DocumentRepository,
        extractor: TextExtractor,
        dispatcher: PipelineDispatcher,
        graph_store: GraphStore | None = None,
    ) -> None:
        self._settings = settings
        self._documents = documents
        self._extractor = extractor
        self._dispatcher = dispatcher
        self._graph_store = graph_store or GraphStore(None)

    def resolve_mime_type(self, filename: str, declared: str | None) -> str:
        mime_type = (declared or "").split(";", 1)[0].strip().lower()
        if mime_type in _GENERIC_TYPES:
            guessed, _ = mimetypes.guess_type(filename)
            if guessed is None and filename.lower().endswith((".md", ".markdown")):
                guessed = "text/markdown"
            mime_type = guessed or mime_type
        return mime_type

    async def upload(
        self,
        *,
        user_id: str,
        filename: str,
        data: bytes,
        mime_type: str | None = None,
        title: str | None = None,
        description: str = "",
        metadata: DocumentMetadata | None = None,
    ) -> Document:
        """Validate, store and enqueue an upload.

        Input errors are raised before anything is written, so a rejected
        upload leaves no document behind and never reaches the pipeline.
        """
        resolved = self.resolve_mime_type(filename, mime_type)
        if not self._extractor.supports(resolved):
            raise UnsupportedFileTypeError(resolved)
        if not data:
            raise EmptyDocumentError(f"Uploaded file '{filename}' is empty")
        if len(data) > self._settings.MAX_UPLOAD_BYTES:
            raise FileTooLargeError(
                f"Uploaded file is {len(data)} bytes; the limit is {self._settings.MAX_UPLOAD_BYTES}"
            )

        path = await self._store_bytes(filename, data)
        document = Document(
            user_id=user_id,
            title=(title or Path(filename).stem or filename).strip(),
            description=description,
            file=DocumentFile(
                original_name=filename, path=str(path), size=len(data), mime_type=resolved
            ),
            metadata=metadata or DocumentMetadata(),
        )
        await self._documents.save(document)
        logger.info("document_uploaded", document_id=document.id, user_id=user_id, size=len(data))
        await self._dispatcher.enqueue(document.id)
        return document

    async def get(self, document_id: str, user_id: str) -> Document:
        document = await self._documents.get_for_user(document_id, user_id)
        if document is None:
            raise NotFoundError(f"Document {document_id} not found")
        return document

    async def view(self, document_id: str, user_id: str) -> Document:
        document = await self.get(document_id, user_id)
        # Saving mid-run would overwrite newer pipeline progress.
        if document.processing.is_terminal:
            document.analytics.views += 1
            await self._documents.save(document)
        return document

    async def list_documents(self, user_id: str) -> list[Document]:
        return await self._documents.list_for_user(user_id)

    async def knowledge_graph(self, document_id: str, user_id: str) -> tuple[Document, GraphSnapshot]:
        document = await self.get(document_id, user_id)
        if document.processing.is_terminal:
            document.analytics.knowledge_graph_views += 1
            await self._documents.save(document)
        return document, document.knowledge_graph

    async def reprocess(self, document_id: str, user_id: str) -> Document:
        """Reset to pending/0 and enqueue again. A run already in flight is not stopped."""
        document = await self.get(document_id, user_id)
        document.processing.reset()
        await self._documents.save(document)
        logger.info("document_reprocess_requested", document_id=document_id)
        await self._dispatcher.enqueue(document.id)
        return document

    async def delete(self, document_id: str, user_id: str) -> None:
        document = await self.get(document_id, user_id)
        try:
            await asyncio.to_thread(Path(document.file.path).unlink, missing_ok=True)
        except OSError as exc:
            logger.warning("document_file_delete_failed", document_id=document_id, error=str(exc))
        await self._graph_store.delete_graph(document_id)
        await self._documents.delete(document_id)
        logger.info("document_deleted", document_id=document_id)

    async def record_questions(self, document: Document, count: int) -> None:
        document.analytics.questions_generated += count
        await self._documents.save(document)

    async def _store_bytes(self, filename: str, data: bytes) -> Path:
        upload_dir = Path(self._settings.UPLOAD_DIR)
        suffix = Path(filename).suffix.lower()
        path = upload_dir / f"{uuid.uuid4().hex}{suffix}"

        def write() -> None:
            upload_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(write)
        return path
