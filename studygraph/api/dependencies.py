"""FastAPI dependencies reading services from ``app.state.container``."""

from __future__ import annotations

from fastapi import Header, Request

from studygraph.graph.builder import KnowledgeGraphService
from studygraph.nlp.service import NLPService
from studygraph.services.container import ServiceContainer
from studygraph.services.document_service import DocumentService
from studygraph.services.graph_collection import GraphCollectionService
from studygraph.services.graph_store import GraphStore
from studygraph.services.qa import QAService


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Service container not initialized")
    return container


def get_document_service(request: Request) -> DocumentService:
    return get_container(request).document_service


def get_graph_collection(request: Request) -> GraphCollectionService:
    return get_container(request).graph_collection


def get_graph_builder(request: Request) -> KnowledgeGraphService:
    return get_container(request).graph_builder


def get_graph_store(request: Request) -> GraphStore:
    return get_container(request).graph_store


def get_nlp(request: Request) -> NLPService:
    return get_container(request).nlp


def get_qa(request: Request) -> QAService:
    return get_container(request).qa


def get_user_id(x_user_id: str = Header(..., alias="X-User-Id", min_length=1)) -> str:
    """Caller identity. Authentication happens upstream of this service."""
    return x_user_id
