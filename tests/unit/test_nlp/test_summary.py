"""Unit tests for the extractive summariser."""

from __future__ import annotations

from studygraph.nlp.summary import extractive_summary, score_sentence


def test_short_text_is_returned_as_prefix(chinese_text):
    assert extractive_summary(chinese_text) == chinese_text
    assert extractive_summary(chinese_text, max_length=4) == chinese_text[:4]


def test_long_english_text_keeps_three_sentences(english_text):
    summary = extractive_summary(english_text, max_length=1000)
    assert summary.endswith(".")
    assert summary.count(". ") == 2


def test_long_chinese_text_joins_with_full_stop():
    text = "".join(f"第{i}句讲述了机器学习中的一个重要概念。" for i in range(6))
    summary = extractive_summary(text, max_length=1000)
    assert summary.endswith("。")
    assert summary.count("。") == 3


def test_summary_respects_max_length(english_text):
    assert len(extractive_summary(english_text, max_length=40)) <= 40


def test_score_sentence_favours_lead_position(english_text):
    first = "Photosynthesis converts light energy into chemical energy in plants"
    middle = "The Calvin cycle depends on products of the light reactions"
    assert score_sentence(first, english_text) > score_sentence(middle, english_text)
