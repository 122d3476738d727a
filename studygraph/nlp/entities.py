"""Rule-based entity recognition.

Each rule family is a fixed regular expression with a fixed confidence.
Rules run in declaration order and every match is kept, so one span can be
tagged by several families. Deduplication happens later, when concepts are
merged by label.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from studygraph.models.schemas import Entity, EntityType

# A captured span runs until whitespace or a clause break.
_SPAN = r"([^\s,，。！？!?;；:：()（）]+)"
# Only the trigger word is case-insensitive; continuation words must be capitalised.
_LATIN_SPAN = r"([A-Za-z][\w\-]*(?:\s+[A-Z][\w\-]*)*)"

DEFAULT_CONFIDENCE = 0.8
NUMBER_CONFIDENCE = 0.6


@dataclass(frozen=True)
class EntityRule:
    type: EntityType
    pattern: re.Pattern[str]
    confidence: float = DEFAULT_CONFIDENCE


ENTITY_RULES: tuple[EntityRule, ...] = (
    EntityRule("person", re.compile(rf"(?:教授|博士|学者|作者|科学家)\s*{_SPAN}")),
    EntityRule(
        "person",
        re.compile(r"\b(?:Professor|Prof\.|Dr\.)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)"),
    ),
    EntityRule("concept", re.compile(rf"(?:概念|理论|定义|原理)\s*[：:]\s*{_SPAN}")),
    EntityRule(
        "concept",
        re.compile(rf"\b(?i:concept|theory|definition|principle)\s*:\s*{_LATIN_SPAN}"),
    ),
    EntityRule("method", re.compile(rf"(?:方法|技术|算法|策略)\s*[：:]\s*{_SPAN}")),
    EntityRule(
        "method",
        re.compile(rf"\b(?i:method|technique|algorithm|strategy)\s*:\s*{_LATIN_SPAN}"),
    ),
    EntityRule("number", re.compile(r"\d+(?:\.\d+)?"), NUMBER_CONFIDENCE),
    EntityRule("formula", re.compile(r"[A-Za-z]\s*=\s*[^,，。！？!?;；\n]+")),
    EntityRule("example", re.compile(rf"(?:例如|比如|例子|案例)\s*[：:]?\s*{_SPAN}")),
)


class EntityRecognizer:
    def __init__(self, rules: tuple[EntityRule, ...] = ENTITY_RULES) -> None:
        self._rules = rules

    def extract(self, text: str) -> list[Entity]:
        entities: list[Entity] = []
        for rule in self._rules:
            for match in rule.pattern.finditer(text):
                span = match.group(1) if match.groups() else match.group(0)
                span = span.strip()
                if not span:
                    continue
                entities.append(Entity(text=span, type=rule.type, confidence=rule.confidence))
        return entities
