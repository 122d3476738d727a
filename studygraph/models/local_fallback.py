"""Local heuristics used when no language-model provider produces a result.

Each handler returns the same JSON shape the providers are asked for, so
callers do not need to know which path produced the data.
"""

from __future__ import annotations

from collections.abc import Callable

from studygraph.models.schemas import TaskKind
from studygraph.nlp.entities import EntityRecognizer
from studygraph.nlp.keywords import KeywordRanker
from studygraph.nlp.summary import extractive_summary

LOCAL_CONCEPT_LIMIT = 10
LOCAL_RELATION_LIMIT = 5
LOCAL_RELATION_STRENGTH = 0.6

DEFAULT_QUESTIONS = (
    {"question": "What is the main point of this material?", "type": "comprehension"},
    {"question": "Explain the key concepts in your own words.", "type": "explanation"},
    {"question": "How could these ideas be applied in practice?", "type": "application"},
    {"question": "Which concepts depend on each other, and how?", "type": "analysis"},
    {"question": "Give an example that illustrates one of the concepts.", "type": "example"},
)

LOCAL_CHAT_RESULT = "Processed locally; no language model was available for a full answer."


class LocalFallback:
    def __init__(
        self,
        ranker: KeywordRanker | None = None,
        recognizer: EntityRecognizer | None = None,
    ) -> None:
        self._ranker = ranker or KeywordRanker()
        self._recognizer = recognizer or EntityRecognizer()
        self._handlers: dict[str, Callable[[str], dict]] = {
            "extract_concepts": self.extract_concepts,
            "extract_relations": self.extract_relations,
            "generate_questions": self.generate_questions,
            "summary": self.summary,
        }

    def run(self, task: TaskKind, text: str) -> dict:
        handler = self._handlers.get(task)
        if handler is None:
            return {"result": LOCAL_CHAT_RESULT}
        return handler(text)

    def extract_concepts(self, text: str) -> dict:
        keywords = self._ranker.extract_keywords(text, LOCAL_CONCEPT_LIMIT)
        return {
            "concepts": [
                {"name": kw.word, "description": f"Key concept: {kw.word}", "importance": kw.weight}
                for kw in keywords
            ]
        }

    def summary(self, text: str) -> dict:
        return {"result": extractive_summary(text)}

    def extract_relations(self, text: str) -> dict:
        entities = self._recognizer.extract(text)
        relations: list[dict] = []
        for i, first in enumerate(entities):
            for second in entities[i + 1 :]:
                if first.type != second.type:
                    continue
                relations.append(
                    {
                        "from": first.text,
                        "to": second.text,
                        "relation": "related_to",
                        "strength": LOCAL_RELATION_STRENGTH,
                    }
                )
                if len(relations) >= LOCAL_RELATION_LIMIT:
                    return {"relations": relations}
        return {"relations": relations}

    def generate_questions(self, text: str) -> dict:
        return {"questions": [dict(q) for q in DEFAULT_QUESTIONS]}
