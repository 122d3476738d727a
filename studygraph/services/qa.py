"""Question answering grounded in a document or a knowledge graph."""

from __future__ import annotations

from studygraph.models.provider_router import ProviderRouter
from studygraph.models.schemas import ChatAnswer, ChatSource, ChatTurn, ConceptNode
from studygraph.prompts.chat import CHAT_SYSTEM_PROMPT, CHAT_USER_PROMPT
from studygraph.storage.repository import DocumentRepository, KnowledgeGraphRepository
from studygraph.utils.exceptions import NotFoundError
from studygraph.utils.logging import get_logger
from studygraph.utils.text_processing import (
    contains_term,
    is_stop_word,
    segment,
    split_sentences,
    truncate_content,
)

logger = get_logger(__name__)

CANNOT_ANSWER = "I cannot answer this question from the provided material."

HISTORY_TURNS = 5
MAX_RELEVANT_NODES = 5
MAX_ANSWER_SENTENCES = 3
CONTEXT_CHARS = 8000

AI_CONFIDENCE = 0.8
LOCAL_CONFIDENCE = 0.4
DEGRADED_CONFIDENCE = 0.3

SUGGESTIONS = (
    "What is the precise definition of this concept?",
    "Can you give a concrete example?",
    "How does this differ from related concepts?",
    "How is this used in practice?",
)


def question_keywords(question: str) -> list[str]:
    """Segmented question terms longer than two characters, stop words removed."""
    seen: dict[str, None] = {}
    for token in segment(question):
        if len(token) > 2 and not is_stop_word(token):
            seen.setdefault(token, None)
    return list(seen)


def find_relevant_nodes(
    nodes: list[ConceptNode], keywords: list[str], limit: int = MAX_RELEVANT_NODES
) -> list[ConceptNode]:
    relevant = [
        n
        for n in nodes
        if any(contains_term(n.label, k) or contains_term(n.properties.description, k) for k in keywords)
    ]
    return relevant[:limit]


def simple_answer(keywords: list[str], context: str) -> str | None:
    """Up to three context sentences that mention a question keyword."""
    matches = [
        s for s in split_sentences(context) if any(contains_term(s, k) for k in keywords)
    ]
    if not matches:
        return None
    return " ".join(matches[:MAX_ANSWER_SENTENCES])


def format_history(history: list[ChatTurn]) -> str:
    return "\n\n".join(f"Q: {turn.question}\nA: {turn.answer}" for turn in history)


class QAService:
    def __init__(
        self,
        router: ProviderRouter,
        documents: DocumentRepository,
        graphs: KnowledgeGraphRepository,
    ) -> None:
        self._router = router
        self._documents = documents
        self._graphs = graphs

    async def chat(
        self,
        question: str,
        *,
        user_id: str,
        document_id: str | None = None,
        knowledge_graph_id: str | None = None,
        history: list[ChatTurn] | None = None,
    ) -> ChatAnswer:
        """Answer ``question`` from the referenced material.

        A knowledge-graph reference takes precedence over a document
        reference. Questions with no keyword present in the material get
        the canned answer with confidence 0.
        """
        keywords = question_keywords(question)
        context, source = await self._resolve_context(
            keywords, user_id=user_id, document_id=document_id, knowledge_graph_id=knowledge_graph_id
        )
        recent = (history or [])[-HISTORY_TURNS:]

        relevant = bool(keywords) and any(contains_term(context, k) for k in keywords)
        if not context.strip() or not relevant:
            logger.info("qa_no_relevant_context", source=source.type, keywords=len(keywords))
            return self._answer(CANNOT_ANSWER, 0.0, source)

        if not self._router.has_providers:
            return self._local_answer(keywords, context, source, LOCAL_CONFIDENCE)

        prompt = CHAT_USER_PROMPT.format(
            context=truncate_content(context, CONTEXT_CHARS),
            history=format_history(recent) or "(none)",
            question=question.strip(),
        )
        result = await self._router.invoke(prompt, "chat", source_text=context, system=CHAT_SYSTEM_PROMPT)
        if result.is_local:
            return self._local_answer(keywords, context, source, DEGRADED_CONFIDENCE)

        answer = result.text()
        if not answer:
            return self._local_answer(keywords, context, source, DEGRADED_CONFIDENCE)
        logger.info("qa_answered", provider=result.provider, source=source.type)
        return self._answer(answer, AI_CONFIDENCE, source)

    async def _resolve_context(
        self,
        keywords: list[str],
        *,
        user_id: str,
        document_id: str | None,
        knowledge_graph_id: str | None,
    ) -> tuple[str, ChatSource]:
        if knowledge_graph_id:
            record = await self._graphs.get_for_user(knowledge_graph_id, user_id)
            if record is None:
                raise NotFoundError(f"Knowledge graph {knowledge_graph_id} not found")
            nodes = find_relevant_nodes(record.graph.nodes, keywords)
            context = "\n".join(f"{n.label}: {n.properties.description}" for n in nodes)
            return context, ChatSource(
                type="knowledge_graph",
                id=record.id,
                title=record.title,
                relevant_nodes=[n.label for n in nodes],
            )

        if document_id:
            document = await self._documents.get_for_user(document_id, user_id)
            if document is None:
                raise NotFoundError(f"Document {document_id} not found")
            return document.text_for_context(), ChatSource(
                type="document", id=document.id, title=document.title
            )

        return "", ChatSource()

    def _local_answer(
        self, keywords: list[str], context: str, source: ChatSource, confidence: float
    ) -> ChatAnswer:
        answer = simple_answer(keywords, context)
        if answer is None:
            return self._answer(CANNOT_ANSWER, 0.0, source)
        return self._answer(answer, confidence, source)

    @staticmethod
    def _answer(answer: str, confidence: float, source: ChatSource) -> ChatAnswer:
        return ChatAnswer(
            answer=answer,
            confidence=confidence,
            suggestions=list(SUGGESTIONS[:3]),
            source=source,
        )
