"""Celery app and document pipeline task (``PIPELINE_BACKEND=celery``)."""

from __future__ import annotations

import asyncio

from celery import Celery

from studygraph.config import get_settings
from studygraph.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

settings = get_settings()
_BROKER_URL = settings.REDIS_URL or "redis://localhost:6379/0"

celery_app = Celery(
    "studygraph",
    broker=_BROKER_URL,
    backend=_BROKER_URL,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)


@celery_app.task(bind=True, name="pipeline.process_document")
def process_document_task(self, document_id: str) -> dict:
    """Run the pipeline for one document in a fresh event loop.

    Failures are recorded on the document by the pipeline itself, so the
    task does not retry.
    """
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    logger.info("celery_task_started", document_id=document_id, task_id=self.request.id)
    status = asyncio.run(_run_pipeline(document_id))
    logger.info("celery_task_finished", document_id=document_id, status=status)
    return {"document_id": document_id, "status": status}


async def _run_pipeline(document_id: str) -> str:
    from studygraph.services.container import build_container

    container = await build_container(settings, inline_queue=True)
    try:
        document = await container.pipeline.run(document_id)
        return document.processing.status if document is not None else "missing"
    finally:
        await container.close()
