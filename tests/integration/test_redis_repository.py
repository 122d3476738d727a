"""Integration tests for the Redis repositories (requires running Redis instance)."""

from __future__ import annotations

import os

import pytest

pytestmark = [
    pytest.mark.redis,
    pytest.mark.skipif(not os.getenv("REDIS_TEST_URL"), reason="Requires running Redis instance"),
]


@pytest.mark.asyncio
async def test_document_round_trip(make_document):
    from studygraph.storage.repository import RedisDocumentRepository

    repo = RedisDocumentRepository(os.environ["REDIS_TEST_URL"])
    document = make_document(user_id="redis-it-user")
    try:
        assert await repo.ping() is True
        await repo.save(document)

        loaded = await repo.get_for_user(document.id, "redis-it-user")
        assert loaded is not None
        assert loaded.file.path == document.file.path
        assert [d.id for d in await repo.list_for_user("redis-it-user")] == [document.id]
    finally:
        await repo.delete(document.id)
        await repo.close()
