"""Unit tests for TF-ISF keyword ranking."""

from __future__ import annotations

from studygraph.nlp.keywords import KeywordRanker


def test_two_sentence_text_falls_back_to_frequency_weights(chinese_text):
    keywords = KeywordRanker().extract_keywords(chinese_text)

    assert keywords[0].word == "机器学习"
    assert keywords[0].weight == 1.0
    assert keywords[0].frequency == 2
    assert {k.word for k in keywords[1:]} == {"人工智能", "分支", "深度学习", "重要方法"}
    assert all(k.weight == 0.5 for k in keywords[1:])


def test_scores_are_clamped_to_non_negative(chinese_text):
    ranked = KeywordRanker().rank(chinese_text)
    assert ranked
    assert all(r.score >= 0.0 for r in ranked)


def test_ranking_is_descending_by_score(english_text):
    ranked = KeywordRanker().rank(english_text, limit=50)
    scores = [r.score for r in ranked]
    assert scores == sorted(scores, reverse=True)
    assert scores[0] > 0


def test_weights_are_normalised_into_unit_interval(english_text):
    keywords = KeywordRanker().extract_keywords(english_text, 30)
    assert max(k.weight for k in keywords) == 1.0
    assert all(0.0 <= k.weight <= 1.0 for k in keywords)


def test_ranking_is_deterministic(english_text):
    ranker = KeywordRanker()
    assert ranker.rank(english_text) == ranker.rank(english_text)


def test_limit_is_respected(english_text):
    assert len(KeywordRanker().extract_keywords(english_text, 3)) == 3


def test_empty_text_yields_no_keywords():
    assert KeywordRanker().extract_keywords("") == []
    assert KeywordRanker().rank("the and of") == []


def test_equal_scores_rank_by_frequency_then_first_appearance():
    # Two sentences: every isf is <= 0, so every clamped score ties at 0.
    ranked = KeywordRanker().rank("kiwi zebra apple apple. zebra mango.")

    assert all(r.score == 0.0 for r in ranked)
    assert [(r.term, r.frequency) for r in ranked] == [
        ("zebra", 2),
        ("apple", 2),
        ("kiwi", 1),
        ("mango", 1),
    ]
