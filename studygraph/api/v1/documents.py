"""Document API endpoints: upload, status, progress stream, graph, reprocess, delete."""

from __future__ import annotations

import asyncio
import json

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sse_starlette.sse import EventSourceResponse

from studygraph.api.dependencies import get_document_service, get_user_id
from studygraph.api.v1.schemas.documents import (
    DocumentGraphResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentSummary,
    UploadResponse,
)
from studygraph.models.document import DocumentMetadata, ProcessingState
from studygraph.services.document_service import DocumentService
from studygraph.utils.exceptions import NotFoundError
from studygraph.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/documents", tags=["documents"])

_POLL_SECONDS = 1.0


@router.post("", response_model=UploadResponse, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    title: str | None = Form(default=None),
    description: str = Form(default=""),
    subject: str = Form(default=""),
    course: str = Form(default=""),
    tags: str = Form(default="", description="Comma-separated"),
    user_id: str = Depends(get_user_id),
    service: DocumentService = Depends(get_document_service),
) -> UploadResponse:
    """Store the file and start processing in the background."""
    data = await file.read()
    document = await service.upload(
        user_id=user_id,
        filename=file.filename or "upload.txt",
        data=data,
        mime_type=file.content_type,
        title=title,
        description=description,
        metadata=DocumentMetadata(
            subject=subject,
            course=course,
            tags=[t.strip() for t in tags.split(",") if t.strip()],
        ),
    )
    return UploadResponse(
        id=document.id,
        title=document.title,
        status=document.processing.status,
        progress=document.processing.progress,
    )


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    user_id: str = Depends(get_user_id),
    service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    documents = await service.list_documents(user_id)
    return DocumentListResponse(
        documents=[DocumentSummary.from_document(d) for d in documents],
        total=len(documents),
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    user_id: str = Depends(get_user_id),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    document = await service.view(document_id, user_id)
    return DocumentResponse.from_document(document)


@router.get("/{document_id}/status", response_model=ProcessingState)
async def get_processing_status(
    document_id: str,
    user_id: str = Depends(get_user_id),
    service: DocumentService = Depends(get_document_service),
) -> ProcessingState:
    document = await service.get(document_id, user_id)
    return document.processing


@router.get("/{document_id}/events")
async def stream_processing(
    document_id: str,
    user_id: str = Depends(get_user_id),
    service: DocumentService = Depends(get_document_service),
) -> EventSourceResponse:
    """SSE stream of processing progress until the document reaches a terminal state."""
    await service.get(document_id, user_id)

    async def event_generator():
        last: tuple[str, int] | None = None
        while True:
            try:
                document = await service.get(document_id, user_id)
            except NotFoundError:
                yield {"event": "error", "data": json.dumps({"error": "not_found"})}
                return

            state = document.processing
            if (state.status, state.progress) != last:
                last = (state.status, state.progress)
                yield {"event": "progress", "data": state.model_dump_json()}

            if state.is_terminal:
                yield {"event": "done", "data": json.dumps({"status": state.status})}
                return
            await asyncio.sleep(_POLL_SECONDS)

    return EventSourceResponse(event_generator())


@router.get("/{document_id}/knowledge-graph", response_model=DocumentGraphResponse)
async def get_document_graph(
    document_id: str,
    user_id: str = Depends(get_user_id),
    service: DocumentService = Depends(get_document_service),
) -> DocumentGraphResponse:
    document, graph = await service.knowledge_graph(document_id, user_id)
    return DocumentGraphResponse(
        document_id=document.id,
        title=document.title,
        status=document.processing.status,
        graph=graph,
    )


@router.post("/{document_id}/reprocess", response_model=ProcessingState, status_code=202)
async def reprocess_document(
    document_id: str,
    user_id: str = Depends(get_user_id),
    service: DocumentService = Depends(get_document_service),
) -> ProcessingState:
    document = await service.reprocess(document_id, user_id)
    return document.processing


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    user_id: str = Depends(get_user_id),
    service: DocumentService = Depends(get_document_service),
) -> Response:
    await service.delete(document_id, user_id)
    return Response(status_code=204)
