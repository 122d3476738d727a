"""Merge ranked keywords and recognised entities into concept nodes."""

from __future__ import annotations

import re

from studygraph.graph.layout import circular_position, node_style
from studygraph.models.schemas import (
    ConceptNode,
    ConceptType,
    Difficulty,
    Entity,
    EntityType,
    Keyword,
    NodeProperties,
)
from studygraph.utils.text_processing import CJK_RANGE, context_window

_ID_INVALID = re.compile(rf"[^0-9a-z_{CJK_RANGE}]")

DESCRIPTION_RADIUS = 50
CLASSIFY_RADIUS = 20

ENTITY_NODE_TYPES: dict[EntityType, ConceptType] = {
    "person": "person",
    "concept": "concept",
    "method": "concept",
    "number": "concept",
    "formula": "formula",
    "example": "example",
}

# Checked in order; the first lexicon found in the local context decides.
TYPE_LEXICONS: tuple[tuple[ConceptType, re.Pattern[str]], ...] = (
    (
        "person",
        re.compile(r"教授|博士|学者|作者|科学家|专家|professor|dr\.|scientist|author|researcher", re.I),
    ),
    ("theory", re.compile(r"理论|theory|theorem", re.I)),
    ("definition", re.compile(r"定义|是指|definition|is defined as", re.I)),
    ("concept", re.compile(r"概念|原理|concept|principle", re.I)),
    ("concept", re.compile(r"方法|技术|算法|策略|method|technique|algorithm|strategy", re.I)),
    ("formula", re.compile(r"公式|方程|定律|equation|formula|law", re.I)),
    ("example", re.compile(r"例子|案例|实例|例如|example|instance", re.I)),
    ("event", re.compile(r"战争|革命|会议|事件|war|revolution|conference", re.I)),
    ("place", re.compile(r"国家|城市|地区|country|city|region", re.I)),
)

_EASY_MARKERS = ("基础", "简单", "入门", "basic", "simple", "introductory")
_HARD_MARKERS = ("复杂", "高级", "深入", "complex", "advanced")


def generate_id(label: str) -> str:
    """Deterministic node/edge id: lower-cased, anything but [0-9a-z_] or CJK becomes ``_``."""
    return _ID_INVALID.sub("_", label.lower())


def extract_description(label: str, text: str) -> str:
    window = context_window(text, label, DESCRIPTION_RADIUS)
    return re.sub(r"\s+", " ", window).strip()


def classify_concept_type(label: str, text: str) -> ConceptType:
    context = context_window(text, label, CLASSIFY_RADIUS)
    for concept_type, lexicon in TYPE_LEXICONS:
        if lexicon.search(context):
            return concept_type
    return "concept"


def estimate_difficulty(label: str, text: str) -> Difficulty:
    context = extract_description(label, text).lower()
    if any(marker in context for marker in _EASY_MARKERS):
        return "easy"
    if any(marker in context for marker in _HARD_MARKERS):
        return "hard"
    return "medium"


class ConceptBuilder:
    """Promotes keywords and entities above their thresholds to concept nodes.

    A keyword and an entity that normalise to the same id collapse into one
    node: the keyword's importance and frequency are used and the entity's
    type is kept. Everything below threshold is dropped.
    """

    def __init__(self, min_keyword_weight: float = 0.3, min_entity_confidence: float = 0.7) -> None:
        self._min_keyword_weight = min_keyword_weight
        self._min_entity_confidence = min_entity_confidence

    def build(
        self,
        keywords: list[Keyword],
        entities: list[Entity],
        text: str,
        source_ref: str | None = None,
    ) -> list[ConceptNode]:
        source = source_ref if source_ref is not None else text[:100]
        concepts: dict[str, ConceptNode] = {}

        for keyword in keywords:
            if keyword.weight <= self._min_keyword_weight:
                continue
            node_id = generate_id(keyword.word)
            if not node_id or node_id in concepts:
                continue
            concepts[node_id] = ConceptNode(
                id=node_id,
                label=keyword.word,
                type=classify_concept_type(keyword.word, text),
                properties=NodeProperties(
                    description=extract_description(keyword.word, text),
                    importance=keyword.weight,
                    frequency=keyword.frequency,
                    difficulty=estimate_difficulty(keyword.word, text),
                    source_documents=[source],
                ),
            )

        for entity in entities:
            if entity.confidence <= self._min_entity_confidence:
                continue
            node_id = generate_id(entity.text)
            if not node_id:
                continue
            entity_type = ENTITY_NODE_TYPES[entity.type]
            existing = concepts.get(node_id)
            if existing is not None:
                # First entity to claim a keyword node decides its type.
                if "entity_type" not in existing.properties.extra:
                    existing.type = entity_type
                    existing.properties.extra["entity_type"] = entity.type
                continue
            concepts[node_id] = ConceptNode(
                id=node_id,
                label=entity.text,
                type=entity_type,
                properties=NodeProperties(
                    description=extract_description(entity.text, text),
                    importance=entity.confidence,
                    frequency=1,
                    difficulty="medium",
                    source_documents=[source],
                    extra={"entity_type": entity.type},
                ),
            )

        nodes = list(concepts.values())
        for index, node in enumerate(nodes):
            node.position = circular_position(index, len(nodes))
            node.style = node_style(node.properties.importance)
        return nodes
