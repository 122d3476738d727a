"""TF-ISF keyword ranking.

score(term) = tf(term) * isf(term), where

    tf  = occurrences / total tokens
    isf = ln(total sentences / (sentences containing term + 1))

The ``+ 1`` smoothing makes isf <= 0 whenever a term appears in every
sentence, and for every term of a one- or two-sentence document. Negative
scores are clamped to 0 so such terms sort below any term with a positive
score instead of inverting the ranking. Ties are broken by raw frequency
(descending) and then by first appearance.
"""

from __future__ import annotations

import math
from collections import Counter

from studygraph.models.schemas import Keyword, RankedTerm
from studygraph.utils.text_processing import segment, split_sentences


class KeywordRanker:
    """Ranks segmented terms of a text by clamped TF-ISF."""

    def rank(self, text: str, limit: int = 20) -> list[RankedTerm]:
        tokens = segment(text)
        if not tokens or limit <= 0:
            return []

        counts = Counter(tokens)  # insertion-ordered by first appearance
        total_tokens = len(tokens)
        sentences = [s.lower() for s in split_sentences(text)]
        total_sentences = max(len(sentences), 1)

        ranked: list[RankedTerm] = []
        for term, frequency in counts.items():
            containing = sum(1 for s in sentences if term in s)
            isf = math.log(total_sentences / (containing + 1))
            score = (frequency / total_tokens) * isf
            ranked.append(RankedTerm(term=term, frequency=frequency, score=max(score, 0.0)))

        # sorted() is stable, so equal (score, frequency) keeps insertion order.
        ranked = sorted(ranked, key=lambda r: (-r.score, -r.frequency))
        return ranked[:limit]

    def extract_keywords(self, text: str, limit: int = 20) -> list[Keyword]:
        """Ranked keywords with ``weight`` normalised into [0, 1].

        Weight is score / max score. When every clamped score is 0 there is
        no TF-ISF signal, so weight falls back to frequency / max frequency.
        """
        ranked = self.rank(text, limit)
        if not ranked:
            return []

        max_score = max(r.score for r in ranked)
        max_frequency = max(r.frequency for r in ranked)
        keywords: list[Keyword] = []
        for r in ranked:
            if max_score > 0:
                weight = r.score / max_score
            else:
                weight = r.frequency / max_frequency
            keywords.append(Keyword(word=r.term, weight=round(weight, 4), frequency=r.frequency))
        return keywords
