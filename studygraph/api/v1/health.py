"""Health and readiness probe endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from studygraph.api.dependencies import get_container
from studygraph.services.container import ServiceContainer

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(container: ServiceContainer = Depends(get_container)) -> dict:
    repository_ok = await container.documents.ping()
    graph_store: bool | None = None
    if container.neo4j is not None:
        try:
            graph_store = await container.neo4j.health_check()
        except Exception:
            graph_store = False
    return {
        "status": "ready" if repository_ok and graph_store is not False else "degraded",
        "repository": repository_ok,
        "graph_store": graph_store,
        "providers": container.registry.available,
    }
