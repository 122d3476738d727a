"""Relation extraction between promoted concepts.

Two passes run on every build and their results are concatenated:

* co-occurrence: concept pairs sharing sentences, typed by trigger words in
  the first shared sentence;
* surface patterns: "X 属于 Y", "X causes Y" and similar, with both captures
  resolved to concepts by substring match.

Only exact ``(from, to, type)`` repeats are dropped, keeping the first. Two
edges between the same pair with different types are both kept.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from studygraph.graph.concepts import generate_id
from studygraph.graph.layout import edge_style
from studygraph.models.schemas import ConceptNode, EdgeProperties, RelationEdge, RelationType
from studygraph.utils.text_processing import split_sentences

MIN_SENTENCE_CHARS = 10
COOCCURRENCE_THRESHOLD = 0.3
PATTERN_WEIGHT = 0.8
EVIDENCE_CHARS = 100

# Checked in order against the lower-cased evidence sentence.
RELATION_TRIGGERS: tuple[tuple[RelationType, tuple[str, ...]], ...] = (
    ("part_of", ("属于", "是一种", "belongs to", "is a kind of", "is a type of", "is part of")),
    ("leads_to", ("导致", "引起", "causes", "leads to", "results in")),
    ("depends_on", ("依赖", "需要", "depends on", "relies on", "requires")),
    ("similar_to", ("相似", "类似", "similar", "resembles")),
    ("opposite_to", ("相反", "对立", "opposite")),
)

_BIDIRECTIONAL: frozenset[RelationType] = frozenset({"related_to", "similar_to"})

_CAPTURE = r"([^,，。.！？!?;；\n]+?)"
_TAIL = r"([^,，。.！？!?;；\n]+)"


@dataclass(frozen=True)
class RelationPattern:
    type: RelationType
    pattern: re.Pattern[str]


RELATION_PATTERNS: tuple[RelationPattern, ...] = (
    RelationPattern("part_of", re.compile(rf"([^,，。.！？!?;；\n]+)属于{_TAIL}")),
    RelationPattern("example_of", re.compile(rf"([^,，。.！？!?;；\n]+)是{_CAPTURE}的例子")),
    RelationPattern("leads_to", re.compile(rf"([^,，。.！？!?;；\n]+)导致{_TAIL}")),
    RelationPattern("depends_on", re.compile(rf"([^,，。.！？!?;；\n]+)依赖于{_TAIL}")),
    RelationPattern("part_of", re.compile(rf"{_CAPTURE}\s+belongs?\s+to\s+{_TAIL}", re.I)),
    RelationPattern(
        "example_of", re.compile(rf"{_CAPTURE}\s+(?:is|are)\s+an?\s+examples?\s+of\s+{_TAIL}", re.I)
    ),
    RelationPattern("leads_to", re.compile(rf"{_CAPTURE}\s+(?:causes?|leads?\s+to)\s+{_TAIL}", re.I)),
    RelationPattern("depends_on", re.compile(rf"{_CAPTURE}\s+depends?\s+on\s+{_TAIL}", re.I)),
)


def infer_relation_type(evidence: str) -> RelationType:
    lowered = evidence.lower()
    for relation_type, triggers in RELATION_TRIGGERS:
        if any(trigger in lowered for trigger in triggers):
            return relation_type
    return "related_to"


def make_edge(
    source: ConceptNode,
    target: ConceptNode,
    relation_type: RelationType,
    weight: float,
    *,
    evidence: str,
    bidirectional: bool,
    source_documents: list[str],
) -> RelationEdge:
    return RelationEdge(
        id=generate_id(f"{source.id}-{target.id}-{relation_type}"),
        source=source.id,
        target=target.id,
        label=relation_type,
        type=relation_type,
        weight=weight,
        properties=EdgeProperties(
            strength=weight,
            bidirectional=bidirectional,
            evidence=evidence,
            source_documents=source_documents,
        ),
        style=edge_style(weight),
    )


def find_concept(capture: str, concepts: list[ConceptNode]) -> ConceptNode | None:
    """First concept whose label contains, or is contained in, the capture."""
    capture = capture.strip().lower()
    if not capture:
        return None
    for concept in concepts:
        label = concept.label.lower()
        if label in capture or capture in label:
            return concept
    return None


class RelationExtractor:
    def __init__(self, threshold: float = COOCCURRENCE_THRESHOLD) -> None:
        self._threshold = threshold

    def extract(self, text: str, concepts: list[ConceptNode]) -> list[RelationEdge]:
        edges = self.cooccurrence_edges(text, concepts) + self.pattern_edges(text, concepts)
        seen: set[tuple[str, str, str]] = set()
        unique: list[RelationEdge] = []
        for edge in edges:
            if edge.key in seen:
                continue
            seen.add(edge.key)
            unique.append(edge)
        return unique

    def cooccurrence_edges(self, text: str, concepts: list[ConceptNode]) -> list[RelationEdge]:
        sentences = split_sentences(text, min_length=MIN_SENTENCE_CHARS)
        if not sentences:
            return []
        lowered = [s.lower() for s in sentences]
        labels = [c.label.lower() for c in concepts]

        edges: list[RelationEdge] = []
        for i in range(len(concepts)):
            for j in range(i + 1, len(concepts)):
                shared = [
                    index
                    for index, sentence in enumerate(lowered)
                    if labels[i] in sentence and labels[j] in sentence
                ]
                strength = min(1.0, 10 * len(shared) / len(sentences))
                if strength <= self._threshold:
                    continue
                evidence = sentences[shared[0]][:EVIDENCE_CHARS]
                relation_type = infer_relation_type(evidence)
                edges.append(
                    make_edge(
                        concepts[i],
                        concepts[j],
                        relation_type,
                        round(strength, 4),
                        evidence=evidence,
                        bidirectional=relation_type in _BIDIRECTIONAL,
                        source_documents=[f"sentence_{index}" for index in shared],
                    )
                )
        return edges

    def pattern_edges(self, text: str, concepts: list[ConceptNode]) -> list[RelationEdge]:
        edges: list[RelationEdge] = []
        for rule in RELATION_PATTERNS:
            for match in rule.pattern.finditer(text):
                source = find_concept(match.group(1), concepts)
                target = find_concept(match.group(2), concepts)
                if source is None or target is None or source.id == target.id:
                    continue
                evidence = match.group(0).strip()[:EVIDENCE_CHARS]
                edges.append(
                    make_edge(
                        source,
                        target,
                        rule.type,
                        PATTERN_WEIGHT,
                        evidence=evidence,
                        bidirectional=False,
                        source_documents=[evidence],
                    )
                )
        return edges
