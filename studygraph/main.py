"""FastAPI application factory with lifespan events."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studygraph.api.router import api_router
from studygraph.config import Settings, get_settings
from studygraph.services.container import build_container
from studygraph.utils.exceptions import (
    GraphStoreError,
    InputError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    StudyGraphError,
)
from studygraph.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service container, start the pipeline workers, tear down on exit."""
    settings: Settings = app.state.settings
    container = await build_container(settings)
    app.state.container = container
    await container.start()
    logger.info(
        "app_started",
        providers=container.registry.available,
        pipeline_backend=settings.PIPELINE_BACKEND,
        graph_store=container.graph_store.enabled,
    )
    yield

    await container.close()
    app.state.container = None
    logger.info("app_stopped")


def _status_for(exc: StudyGraphError) -> int:
    if isinstance(exc, InputError):
        return 400
    if isinstance(exc, PermissionDeniedError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (PersistenceError, GraphStoreError)):
        return 503
    return 500


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    application = FastAPI(
        title="StudyGraph",
        description="Study documents to knowledge graphs, with grounded Q&A",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.settings = settings

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @application.exception_handler(StudyGraphError)
    async def studygraph_exception_handler(request: Request, exc: StudyGraphError) -> JSONResponse:
        status_code = _status_for(exc)
        log = logger.error if status_code >= 500 else logger.info
        log("request_failed", error=str(exc), type=type(exc).__name__, path=request.url.path)
        return JSONResponse(
            status_code=status_code,
            content={"detail": str(exc), "type": type(exc).__name__},
        )

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "type": type(exc).__name__},
        )

    return application


app = create_app()
