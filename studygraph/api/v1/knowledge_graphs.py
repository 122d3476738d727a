"""Knowledge graph API endpoints: build, create, browse, search and export."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from studygraph.api.dependencies import (
    get_graph_builder,
    get_graph_collection,
    get_graph_store,
    get_user_id,
)
from studygraph.api.v1.schemas.knowledge_graphs import (
    BuildGraphRequest,
    BuildGraphResponse,
    CreateGraphRequest,
    GraphListResponse,
    GraphSummary,
    NodeDetailResponse,
    RelatedConcept,
    SearchResponse,
)
from studygraph.graph.builder import KnowledgeGraphService
from studygraph.graph.export import ExportFormat
from studygraph.models.document import KnowledgeGraphRecord
from studygraph.services.graph_collection import GraphCollectionService
from studygraph.services.graph_store import GraphStore

router = APIRouter(prefix="/knowledge-graphs", tags=["knowledge-graphs"])


@router.post("/build", response_model=BuildGraphResponse)
async def build_graph(
    request: BuildGraphRequest,
    user_id: str = Depends(get_user_id),
    builder: KnowledgeGraphService = Depends(get_graph_builder),
) -> BuildGraphResponse:
    """Build a graph from raw text without storing it."""
    graph = await builder.build_graph(
        request.text, title=request.title, user_id=user_id, max_nodes=request.max_nodes
    )
    return BuildGraphResponse(title=request.title, graph=graph)


@router.post("", response_model=KnowledgeGraphRecord, status_code=201)
async def create_graph(
    request: CreateGraphRequest,
    user_id: str = Depends(get_user_id),
    service: GraphCollectionService = Depends(get_graph_collection),
) -> KnowledgeGraphRecord:
    return await service.create(
        user_id=user_id,
        document_ids=request.document_ids,
        title=request.title,
        description=request.description,
        metadata=request.metadata,
    )


@router.get("", response_model=GraphListResponse)
async def list_graphs(
    user_id: str = Depends(get_user_id),
    service: GraphCollectionService = Depends(get_graph_collection),
) -> GraphListResponse:
    records = await service.list_graphs(user_id)
    return GraphListResponse(graphs=[GraphSummary.from_record(r) for r in records], total=len(records))


@router.get("/related-concepts", response_model=list[RelatedConcept])
async def related_concepts(
    label: str = Query(..., min_length=1),
    limit: int = Query(default=10, ge=1, le=100),
    user_id: str = Depends(get_user_id),
    store: GraphStore = Depends(get_graph_store),
) -> list[RelatedConcept]:
    """Neighbours of a concept across every document mirrored to the graph store.

    Answers 503 when the graph store is disabled or the query fails.
    """
    rows = await store.related_concepts(label, user_id=user_id, limit=limit)
    return [RelatedConcept(**row) for row in rows]


@router.get("/{graph_id}", response_model=KnowledgeGraphRecord)
async def get_graph(
    graph_id: str,
    user_id: str = Depends(get_user_id),
    service: GraphCollectionService = Depends(get_graph_collection),
) -> KnowledgeGraphRecord:
    return await service.view(graph_id, user_id)


@router.delete("/{graph_id}", status_code=204)
async def delete_graph(
    graph_id: str,
    user_id: str = Depends(get_user_id),
    service: GraphCollectionService = Depends(get_graph_collection),
) -> Response:
    await service.delete(graph_id, user_id)
    return Response(status_code=204)


@router.get("/{graph_id}/search", response_model=SearchResponse)
async def search_graph(
    graph_id: str,
    q: str = Query(..., min_length=1),
    user_id: str = Depends(get_user_id),
    service: GraphCollectionService = Depends(get_graph_collection),
) -> SearchResponse:
    results = await service.search(graph_id, user_id, q)
    return SearchResponse(results=results, total=len(results))


@router.get("/{graph_id}/nodes/{node_id}", response_model=NodeDetailResponse)
async def get_node(
    graph_id: str,
    node_id: str,
    user_id: str = Depends(get_user_id),
    service: GraphCollectionService = Depends(get_graph_collection),
) -> NodeDetailResponse:
    node, neighbours, edges = await service.node_detail(graph_id, user_id, node_id)
    return NodeDetailResponse(node=node, related_nodes=neighbours, related_edges=edges)


@router.get("/{graph_id}/export")
async def export_graph(
    graph_id: str,
    format: ExportFormat = Query(default="json"),
    user_id: str = Depends(get_user_id),
    service: GraphCollectionService = Depends(get_graph_collection),
) -> Response:
    """Export the graph as JSON, CSV or GraphML."""
    record, content, media_type = await service.export(graph_id, user_id, format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="knowledge_graph_{record.id}.{format}"'},
    )
