"""Unit tests for the in-process pipeline queue."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from studygraph.services.task_queue import PipelineQueue


@pytest.mark.asyncio
async def test_queue_runs_every_enqueued_document():
    pipeline = MagicMock()
    pipeline.run = AsyncMock(return_value=None)
    queue = PipelineQueue(pipeline, concurrency=2)

    await queue.start()
    await queue.enqueue("d1")
    await queue.enqueue("d2")
    await queue.join()
    await queue.stop()

    assert sorted(call.args[0] for call in pipeline.run.await_args_list) == ["d1", "d2"]
    assert queue.pending == 0


@pytest.mark.asyncio
async def test_worker_survives_pipeline_errors():
    pipeline = MagicMock()
    pipeline.run = AsyncMock(side_effect=[RuntimeError("boom"), None])
    queue = PipelineQueue(pipeline, concurrency=1)

    await queue.start()
    await queue.enqueue("d1")
    await queue.enqueue("d2")
    await queue.join()
    await queue.stop()

    assert pipeline.run.await_count == 2
