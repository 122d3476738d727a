"""Document and knowledge-graph persistence.

Saves are whole-entity overwrites. Both backends store the JSON form of the
pydantic model, so a loaded entity never aliases the saved object.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

import redis.asyncio as aioredis
from pydantic import BaseModel

from studygraph.models.document import Document, KnowledgeGraphRecord, utcnow
from studygraph.utils.exceptions import PersistenceError
from studygraph.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", Document, KnowledgeGraphRecord)

KEY_PREFIX = "studygraph"


class Repository(ABC, Generic[T]):
    model: type[BaseModel]
    kind: str

    @abstractmethod
    async def get(self, entity_id: str) -> T | None: ...

    @abstractmethod
    async def save(self, entity: T) -> T: ...

    @abstractmethod
    async def delete(self, entity_id: str) -> bool: ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[T]: ...

    async def get_for_user(self, entity_id: str, user_id: str) -> T | None:
        entity = await self.get(entity_id)
        if entity is None or entity.user_id != user_id:
            return None
        return entity

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None

    def _dump(self, entity: T) -> str:
        entity.updated_at = utcnow()
        return entity.model_dump_json(by_alias=True)

    def _load(self, raw: str) -> T:
        return self.model.model_validate_json(raw)  # type: ignore[return-value]


class InMemoryRepository(Repository[T]):
    def __init__(self) -> None:
        self._items: dict[str, str] = {}
        self._owners: dict[str, str] = {}

    async def get(self, entity_id: str) -> T | None:
        raw = self._items.get(entity_id)
        return self._load(raw) if raw is not None else None

    async def save(self, entity: T) -> T:
        self._items[entity.id] = self._dump(entity)
        self._owners[entity.id] = entity.user_id
        return entity

    async def delete(self, entity_id: str) -> bool:
        self._owners.pop(entity_id, None)
        return self._items.pop(entity_id, None) is not None

    async def list_for_user(self, user_id: str) -> list[T]:
        ids = [eid for eid, owner in self._owners.items() if owner == user_id]
        entities = [self._load(self._items[eid]) for eid in ids]
        return sorted(entities, key=lambda e: e.created_at, reverse=True)


class RedisRepository(Repository[T]):
    """JSON values under ``studygraph:{kind}:{id}`` plus a per-user id set."""

    def __init__(self, redis_url: str) -> None:
        self._client = aioredis.from_url(redis_url, decode_responses=True)

    def _key(self, entity_id: str) -> str:
        return f"{KEY_PREFIX}:{self.kind}:{entity_id}"

    def _user_key(self, user_id: str) -> str:
        return f"{KEY_PREFIX}:user:{user_id}:{self.kind}s"

    async def get(self, entity_id: str) -> T | None:
        try:
            raw = await self._client.get(self._key(entity_id))
        except aioredis.RedisError as exc:
            raise PersistenceError(f"Failed to load {self.kind} {entity_id}: {exc}") from exc
        return self._load(raw) if raw is not None else None

    async def save(self, entity: T) -> T:
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.set(self._key(entity.id), self._dump(entity))
                pipe.sadd(self._user_key(entity.user_id), entity.id)
                await pipe.execute()
        except aioredis.RedisError as exc:
            raise PersistenceError(f"Failed to save {self.kind} {entity.id}: {exc}") from exc
        return entity

    async def delete(self, entity_id: str) -> bool:
        entity = await self.get(entity_id)
        if entity is None:
            return False
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.delete(self._key(entity_id))
                pipe.srem(self._user_key(entity.user_id), entity_id)
                await pipe.execute()
        except aioredis.RedisError as exc:
            raise PersistenceError(f"Failed to delete {self.kind} {entity_id}: {exc}") from exc
        return True

    async def list_for_user(self, user_id: str) -> list[T]:
        try:
            ids = await self._client.smembers(self._user_key(user_id))
            raws = await self._client.mget([self._key(i) for i in ids]) if ids else []
        except aioredis.RedisError as exc:
            raise PersistenceError(f"Failed to list {self.kind}s for {user_id}: {exc}") from exc
        entities = [self._load(raw) for raw in raws if raw is not None]
        return sorted(entities, key=lambda e: e.created_at, reverse=True)

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except aioredis.RedisError as exc:
            logger.warning("redis_ping_failed", error=str(exc))
            return False

    async def close(self) -> None:
        await self._client.aclose()


class InMemoryDocumentRepository(InMemoryRepository[Document]):
    model = Document
    kind = "document"


class InMemoryKnowledgeGraphRepository(InMemoryRepository[KnowledgeGraphRecord]):
    model = KnowledgeGraphRecord
    kind = "graph"


class RedisDocumentRepository(RedisRepository[Document]):
    model = Document
    kind = "document"


class RedisKnowledgeGraphRepository(RedisRepository[KnowledgeGraphRecord]):
    model = KnowledgeGraphRecord
    kind = "graph"


DocumentRepository = Repository[Document]
KnowledgeGraphRepository = Repository[KnowledgeGraphRecord]


def build_repositories(redis_url: str) -> tuple[Repository[Document], Repository[KnowledgeGraphRecord]]:
    """Redis-backed repositories when ``redis_url`` is set, in-memory otherwise."""
    if redis_url:
        logger.info("repositories_selected", backend="redis")
        return RedisDocumentRepository(redis_url), RedisKnowledgeGraphRepository(redis_url)
    logger.info("repositories_selected", backend="memory")
    return InMemoryDocumentRepository(), InMemoryKnowledgeGraphRepository()
