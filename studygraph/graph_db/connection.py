"""Async Neo4j access for the optional concept graph store."""

from __future__ import annotations

from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncManagedTransaction, AsyncSession

from studygraph.config import Settings
from studygraph.utils.exceptions import GraphStoreError
from studygraph.utils.logging import get_logger

logger = get_logger(__name__)


async def _collect(tx: AsyncManagedTransaction, query: str, params: dict) -> list[dict]:
    result = await tx.run(query, params)
    return [record.data() async for record in result]


class Neo4jConnection:
    """Driver owned by the service container.

    Queries run as managed transactions, so the driver retries them on
    transient cluster errors. Every row comes back as a plain dict.
    """

    def __init__(self, settings: Settings) -> None:
        self._uri = settings.NEO4J_URI
        self._auth = (settings.NEO4J_USER, settings.NEO4J_PASSWORD)
        self._driver: AsyncDriver | None = None

    @property
    def is_connected(self) -> bool:
        return self._driver is not None

    async def connect(self) -> None:
        driver = AsyncGraphDatabase.driver(self._uri, auth=self._auth)
        try:
            await driver.verify_connectivity()
        except Exception:
            await driver.close()
            raise
        self._driver = driver
        logger.info("neo4j_connected", uri=self._uri)

    async def close(self) -> None:
        if self._driver is not None:
            await self._driver.close()
            self._driver = None
            logger.info("neo4j_disconnected")

    async def health_check(self) -> bool:
        rows = await self.execute_read("RETURN 1 AS ok")
        return bool(rows) and rows[0].get("ok") == 1

    async def execute_read(self, query: str, **params: object) -> list[dict]:
        async with self._session() as session:
            return await session.execute_read(_collect, query, params)

    async def execute_write(self, query: str, **params: object) -> list[dict]:
        async with self._session() as session:
            return await session.execute_write(_collect, query, params)

    def _session(self) -> AsyncSession:
        if self._driver is None:
            raise GraphStoreError("Neo4j is not connected")
        return self._driver.session()
