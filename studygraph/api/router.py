"""Top-level API router aggregating all v1 sub-routers."""

from __future__ import annotations

from fastapi import APIRouter

from studygraph.api.v1.ai import router as ai_router
from studygraph.api.v1.documents import router as documents_router
from studygraph.api.v1.health import router as health_router
from studygraph.api.v1.knowledge_graphs import router as knowledge_graphs_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health_router)
api_router.include_router(documents_router)
api_router.include_router(knowledge_graphs_router)
api_router.include_router(ai_router)
