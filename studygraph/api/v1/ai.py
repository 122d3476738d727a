"""AI API endpoints: grounded chat, summaries, extraction and study aids."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from studygraph.api.dependencies import (
    get_document_service,
    get_graph_collection,
    get_nlp,
    get_qa,
    get_user_id,
)
from studygraph.api.v1.schemas.ai import (
    AnalyzeRequest,
    ChatRequest,
    ConceptsResponse,
    EntitiesResponse,
    ExplainRequest,
    ExplainResponse,
    KeywordsRequest,
    KeywordsResponse,
    QuestionsRequest,
    QuestionsResponse,
    RelationsResponse,
    SummaryRequest,
    SummaryResponse,
    TextRequest,
)
from studygraph.models.schemas import ChatAnswer
from studygraph.nlp.service import NLPService
from studygraph.services.document_service import DocumentService
from studygraph.services.graph_collection import GraphCollectionService
from studygraph.services.qa import QAService
from studygraph.utils.exceptions import NotFoundError
from studygraph.utils.text_processing import contains_term

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/chat", response_model=ChatAnswer)
async def chat(
    request: ChatRequest,
    user_id: str = Depends(get_user_id),
    qa: QAService = Depends(get_qa),
) -> ChatAnswer:
    if not request.question.strip():
        raise HTTPException(status_code=400, detail="Question is empty")
    return await qa.chat(
        request.question,
        user_id=user_id,
        document_id=request.document_id,
        knowledge_graph_id=request.knowledge_graph_id,
        history=request.history,
    )


@router.post("/keywords", response_model=KeywordsResponse)
async def extract_keywords(request: KeywordsRequest, nlp: NLPService = Depends(get_nlp)) -> KeywordsResponse:
    return KeywordsResponse(keywords=nlp.extract_keywords(request.text, request.n))


@router.post("/entities", response_model=EntitiesResponse)
async def extract_entities(request: TextRequest, nlp: NLPService = Depends(get_nlp)) -> EntitiesResponse:
    return EntitiesResponse(entities=nlp.extract_entities(request.text))


@router.post("/concepts", response_model=ConceptsResponse)
async def suggest_concepts(request: TextRequest, nlp: NLPService = Depends(get_nlp)) -> ConceptsResponse:
    return ConceptsResponse(concepts=await nlp.suggest_concepts(request.text))


@router.post("/relations", response_model=RelationsResponse)
async def suggest_relations(request: TextRequest, nlp: NLPService = Depends(get_nlp)) -> RelationsResponse:
    return RelationsResponse(relations=await nlp.suggest_relations(request.text))


@router.post("/summary", response_model=SummaryResponse)
async def generate_summary(
    request: SummaryRequest,
    user_id: str = Depends(get_user_id),
    nlp: NLPService = Depends(get_nlp),
    documents: DocumentService = Depends(get_document_service),
) -> SummaryResponse:
    """Summarise raw text, or the text of one of the caller's documents."""
    text = request.text or ""
    if request.document_id:
        document = await documents.get(request.document_id, user_id)
        text = document.content.raw or document.content.processed
    if not text.strip():
        raise HTTPException(status_code=400, detail="Nothing to summarise")
    summary = await nlp.generate_summary(text, request.max_length)
    return SummaryResponse(summary=summary, length=len(summary), document_id=request.document_id)


@router.post("/questions", response_model=QuestionsResponse)
async def generate_questions(
    request: QuestionsRequest,
    user_id: str = Depends(get_user_id),
    nlp: NLPService = Depends(get_nlp),
    documents: DocumentService = Depends(get_document_service),
) -> QuestionsResponse:
    document = await documents.get(request.document_id, user_id)
    if not document.is_processed:
        raise HTTPException(status_code=400, detail="Document has not finished processing")
    text = document.text_for_context()
    if not text.strip():
        raise HTTPException(status_code=400, detail="Document has no content")

    questions = await nlp.generate_questions(text, request.count, request.difficulty)
    await documents.record_questions(document, len(questions))
    return QuestionsResponse(document_id=document.id, questions=questions)


@router.post("/explain", response_model=ExplainResponse)
async def explain_concept(
    request: ExplainRequest,
    user_id: str = Depends(get_user_id),
    nlp: NLPService = Depends(get_nlp),
    documents: DocumentService = Depends(get_document_service),
    graphs: GraphCollectionService = Depends(get_graph_collection),
) -> ExplainResponse:
    """Explain a concept from a document's text or from a matching graph node."""
    context = ""
    source: dict = {}
    if request.document_id:
        try:
            document = await documents.get(request.document_id, user_id)
        except NotFoundError:
            document = None
        if document is not None:
            context = document.text_for_context()
            source = {"type": "document", "id": document.id, "title": document.title}

    if request.knowledge_graph_id:
        try:
            record = await graphs.get(request.knowledge_graph_id, user_id)
        except NotFoundError:
            record = None
        if record is not None:
            node = next((n for n in record.graph.nodes if contains_term(n.label, request.concept)), None)
            if node is not None:
                context = node.properties.description
                source = {"type": "knowledge_graph", "id": record.id, "title": record.title, "node_id": node.id}

    explanation = await nlp.explain_concept(request.concept.strip(), context)
    return ExplainResponse(concept=request.concept, explanation=explanation, source=source)


@router.post("/analyze")
async def analyze_document(
    request: AnalyzeRequest,
    user_id: str = Depends(get_user_id),
    nlp: NLPService = Depends(get_nlp),
    documents: DocumentService = Depends(get_document_service),
) -> dict:
    document = await documents.get(request.document_id, user_id)
    text = document.content.raw or document.content.processed
    if not text.strip():
        raise HTTPException(status_code=400, detail="Document has no content")
    return {
        "document_id": document.id,
        "analysis_type": request.analysis_type,
        "analysis": nlp.analyze(text, request.analysis_type),
    }
