"""Neo4j constraints and indexes for concept graphs."""

from __future__ import annotations

from studygraph.graph_db.connection import Neo4jConnection
from studygraph.utils.logging import get_logger

logger = get_logger(__name__)

# Concept ids are unique per document, not globally.
CONSTRAINTS = [
    "CREATE CONSTRAINT concept_scope IF NOT EXISTS FOR (c:Concept) REQUIRE (c.document_id, c.id) IS UNIQUE",
]

INDEXES = [
    "CREATE INDEX concept_user IF NOT EXISTS FOR (c:Concept) ON (c.user_id)",
    "CREATE INDEX concept_label IF NOT EXISTS FOR (c:Concept) ON (c.label)",
]


async def init_schema(conn: Neo4jConnection) -> None:
    for stmt in CONSTRAINTS:
        try:
            await conn.execute_write(stmt)
        except Exception as exc:
            logger.warning("constraint_create_skipped", statement=stmt, error=str(exc))

    for stmt in INDEXES:
        try:
            await conn.execute_write(stmt)
        except Exception as exc:
            logger.warning("index_create_skipped", statement=stmt, error=str(exc))

    logger.info("neo4j_schema_initialized")
