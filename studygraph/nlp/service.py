"""NLP facade used by the pipeline and the AI routes."""

from __future__ import annotations

import math
import re
from typing import get_args

from studygraph.models.local_fallback import DEFAULT_QUESTIONS
from studygraph.models.provider_router import ProviderRouter
from studygraph.models.schemas import (
    Entity,
    Keyword,
    LearningQuestion,
    RelationType,
    SuggestedConcept,
    SuggestedRelation,
)
from studygraph.nlp.entities import EntityRecognizer
from studygraph.nlp.keywords import KeywordRanker
from studygraph.nlp.summary import extractive_summary
from studygraph.prompts.tasks import (
    EXPLAIN_CONCEPT_PROMPT,
    EXTRACT_CONCEPTS_PROMPT,
    EXTRACT_RELATIONS_PROMPT,
    GENERATE_QUESTIONS_PROMPT,
    SUMMARY_PROMPT,
)
from studygraph.utils.logging import get_logger
from studygraph.utils.text_processing import contains_term, split_sentences, truncate_content

logger = get_logger(__name__)

# Prompts carry at most this much source text.
PROMPT_TEXT_CHARS = 8000

_TOPICS = ("技术", "管理", "教育", "科学", "历史", "文学", "经济",
           "technology", "management", "education", "science", "history", "literature", "economics")
_SECTION_HEADER = re.compile(r"^\s*(?:第[一二三四五六七八九十\d]+[章节部分]|[一二三四五六七八九十\d]+[、.]|#+\s)", re.M)
_RELATION_TYPES = frozenset(get_args(RelationType))


class NLPService:
    def __init__(
        self,
        router: ProviderRouter,
        ranker: KeywordRanker | None = None,
        recognizer: EntityRecognizer | None = None,
    ) -> None:
        self._router = router
        self._ranker = ranker or KeywordRanker()
        self._recognizer = recognizer or EntityRecognizer()

    def extract_keywords(self, text: str, n: int = 20) -> list[Keyword]:
        return self._ranker.extract_keywords(text, n)

    def extract_entities(self, text: str) -> list[Entity]:
        return self._recognizer.extract(text)

    async def generate_summary(self, text: str, max_length: int = 300) -> str:
        """Provider summary, or the extractive summary when the router fell back."""
        if not text.strip():
            return ""
        prompt = SUMMARY_PROMPT.format(text=truncate_content(text, PROMPT_TEXT_CHARS), max_length=max_length)
        result = await self._router.invoke(prompt, "summary", source_text=text)
        summary = "" if result.is_local else result.text()
        if not summary:
            summary = extractive_summary(text, max_length)
        return summary[:max_length]

    async def generate_questions(
        self, text: str, count: int = 5, difficulty: str = "medium"
    ) -> list[LearningQuestion]:
        prompt = GENERATE_QUESTIONS_PROMPT.format(text=truncate_content(text, PROMPT_TEXT_CHARS), count=count)
        result = await self._router.invoke(prompt, "generate_questions", source_text=text)
        raw = result.data.get("questions")
        if not isinstance(raw, list):
            raw = []

        questions: list[LearningQuestion] = []
        for item in raw:
            if isinstance(item, dict) and str(item.get("question", "")).strip():
                questions.append(
                    LearningQuestion(
                        question=str(item["question"]).strip(),
                        type=str(item.get("type") or "comprehension"),
                        difficulty=str(item.get("difficulty") or difficulty),
                    )
                )
            elif isinstance(item, str) and item.strip():
                questions.append(LearningQuestion(question=item.strip(), difficulty=difficulty))
        if not questions:
            logger.info("questions_template_fallback", provider=result.provider)
            questions = [LearningQuestion(difficulty=difficulty, **q) for q in DEFAULT_QUESTIONS]
        return questions[:count]

    async def suggest_concepts(self, text: str) -> list[SuggestedConcept]:
        """Concepts proposed by a provider, or by the keyword ranker when none answers."""
        prompt = EXTRACT_CONCEPTS_PROMPT.format(text=truncate_content(text, PROMPT_TEXT_CHARS))
        result = await self._router.invoke(prompt, "extract_concepts", source_text=text)
        concepts: list[SuggestedConcept] = []
        for item in _as_list(result.data.get("concepts")):
            name = str(item.get("name", "")).strip()
            if not name:
                continue
            concepts.append(
                SuggestedConcept(
                    name=name,
                    description=str(item.get("description") or ""),
                    importance=_unit(item.get("importance"), 0.5),
                )
            )
        return concepts

    async def suggest_relations(self, text: str) -> list[SuggestedRelation]:
        """Relations proposed by a provider, or same-type entity pairs when none answers.

        Unknown relation names become ``related_to``.
        """
        prompt = EXTRACT_RELATIONS_PROMPT.format(text=truncate_content(text, PROMPT_TEXT_CHARS))
        result = await self._router.invoke(prompt, "extract_relations", source_text=text)
        relations: list[SuggestedRelation] = []
        for item in _as_list(result.data.get("relations")):
            source = str(item.get("from", "")).strip()
            target = str(item.get("to", "")).strip()
            if not source or not target:
                continue
            relation = item.get("relation")
            relations.append(
                SuggestedRelation(
                    source=source,
                    target=target,
                    relation=relation if relation in _RELATION_TYPES else "related_to",
                    strength=_unit(item.get("strength"), 0.5),
                )
            )
        return relations

    async def explain_concept(self, concept: str, context: str) -> str:
        if self._router.has_providers and context.strip():
            prompt = EXPLAIN_CONCEPT_PROMPT.format(
                concept=concept, text=truncate_content(context, PROMPT_TEXT_CHARS)
            )
            result = await self._router.invoke(prompt, "chat", source_text=context)
            explanation = "" if result.is_local else result.text()
            if explanation:
                return explanation
        return local_explanation(concept, context)

    def analyze(self, text: str, analysis_type: str = "comprehensive") -> dict:
        """Reading statistics, plus keywords, entities and structure unless ``basic``."""
        sentences = split_sentences(text)
        average_sentence = sum(len(s) for s in sentences) / len(sentences) if sentences else 0.0
        if average_sentence < 20:
            difficulty = "easy"
        elif average_sentence < 40:
            difficulty = "medium"
        else:
            difficulty = "hard"

        analysis: dict = {
            "word_count": len(text),
            "reading_time_minutes": math.ceil(len(text) / 200),
            "difficulty": difficulty,
            "topics": [t for t in _TOPICS if contains_term(text, t)][:3],
        }
        if analysis_type == "basic":
            return analysis

        sections = [s for s in re.split(r"\n\s*\n", text) if s.strip()]
        analysis.update(
            keywords=[k.model_dump() for k in self.extract_keywords(text, 10)],
            entities=[e.model_dump() for e in self.extract_entities(text)[:10]],
            structure={
                "section_count": len(sections),
                "has_headers": bool(_SECTION_HEADER.search(text)),
                "average_section_length": (
                    round(sum(len(s) for s in sections) / len(sections), 2) if sections else 0.0
                ),
            },
        )
        return analysis


def local_explanation(concept: str, context: str) -> str:
    """First sentence of ``context`` mentioning ``concept``, or a generic template."""
    for sentence in split_sentences(context):
        if contains_term(sentence, concept):
            return sentence
    return (
        f"{concept} is an important concept; study it together with the source "
        "material to understand its meaning and applications."
    )


def _as_list(value: object) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _unit(value: object, default: float) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return min(max(number, 0.0), 1.0)
