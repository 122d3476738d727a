"""Extractive summarisation used when no language-model provider answers."""

from __future__ import annotations

from studygraph.utils.text_processing import is_cjk, segment, split_sentences

SUMMARY_SENTENCES = 3
MIN_SENTENCE_CHARS = 10


def score_sentence(sentence: str, full_text: str) -> float:
    """Keyword density, plus a bonus for lead/tail position and mid-range length."""
    length = len(sentence)
    if length == 0:
        return 0.0
    score = len(segment(sentence)) / length * 0.4

    index = full_text.find(sentence)
    position = index / len(full_text) if index >= 0 and full_text else 0.0
    if position < 0.2 or position > 0.8:
        score += 0.3
    if 20 < length < 100:
        score += 0.3
    return score


def extractive_summary(text: str, max_length: int = 300) -> str:
    """Top three sentences by :func:`score_sentence`, or a plain prefix for short texts."""
    sentences = split_sentences(text, min_length=MIN_SENTENCE_CHARS)
    if len(sentences) <= SUMMARY_SENTENCES:
        return text[:max_length].strip()

    ranked = sorted(sentences, key=lambda s: score_sentence(s, text), reverse=True)
    top = ranked[:SUMMARY_SENTENCES]
    if is_cjk(text):
        summary = "。".join(top) + "。"
    else:
        summary = ". ".join(top) + "."
    return summary[:max_length]
