"""Background dispatch of pipeline runs.

Upload and reprocess requests enqueue a document id and return at once.
Neither backend serialises runs per document: a reprocess while a run is
in flight starts a second run and both write to the same record.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from studygraph.services.pipeline import DocumentPipeline
from studygraph.utils.logging import get_logger

logger = get_logger(__name__)


class PipelineDispatcher(Protocol):
    async def enqueue(self, document_id: str) -> None: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...


class PipelineQueue:
    """In-process queue consumed by ``concurrency`` asyncio worker tasks."""

    def __init__(self, pipeline: DocumentPipeline, concurrency: int = 2) -> None:
        self._pipeline = pipeline
        self._concurrency = max(1, concurrency)
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._workers: list[asyncio.Task] = []

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"pipeline-worker-{i}")
            for i in range(self._concurrency)
        ]
        logger.info("pipeline_queue_started", workers=self._concurrency)

    async def stop(self) -> None:
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("pipeline_queue_stopped", dropped=self._queue.qsize())

    async def enqueue(self, document_id: str) -> None:
        await self._queue.put(document_id)
        logger.info("pipeline_enqueued", document_id=document_id, backend="inline")

    async def join(self) -> None:
        """Wait until every enqueued document has been processed."""
        await self._queue.join()

    async def _worker(self, index: int) -> None:
        while True:
            document_id = await self._queue.get()
            try:
                await self._pipeline.run(document_id)
            except Exception as exc:
                # run() records failures itself; this guards the worker loop.
                logger.error("pipeline_worker_error", worker=index, document_id=document_id, error=str(exc))
            finally:
                self._queue.task_done()


class CeleryDispatcher:
    """Sends runs to the Celery worker defined in :mod:`studygraph.worker`."""

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None

    async def enqueue(self, document_id: str) -> None:
        from studygraph.worker import process_document_task

        result = await asyncio.to_thread(process_document_task.delay, document_id)
        logger.info("pipeline_enqueued", document_id=document_id, backend="celery", task_id=result.id)
