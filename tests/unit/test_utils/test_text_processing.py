"""Unit tests for text cleaning, sentence splitting and segmentation."""

from __future__ import annotations

from studygraph.utils.text_processing import (
    clean_text,
    context_window,
    is_stop_word,
    segment,
    split_sentences,
    truncate_content,
)


def test_segment_splits_cjk_runs_at_function_words(chinese_text):
    assert segment(chinese_text) == ["机器学习", "人工智能", "分支", "深度学习", "机器学习", "重要方法"]


def test_segment_lowercases_latin_and_drops_stop_words_and_numbers():
    assert segment("The Calvin cycle and 42 apples") == ["calvin", "cycle", "apples"]


def test_split_sentences_on_mixed_punctuation():
    assert split_sentences("First one. Second one! 第三句。") == ["First one", "Second one", "第三句"]


def test_split_sentences_keeps_decimal_points():
    assert split_sentences("Pi is about 3.14 in value.") == ["Pi is about 3.14 in value"]


def test_split_sentences_min_length_filters_short_sentences():
    text = "Short. This sentence is long enough."
    assert split_sentences(text, min_length=10) == ["This sentence is long enough"]


def test_clean_text_collapses_whitespace_and_strips_controls():
    assert clean_text("  a\t\tb \r\n\r\n\r\nc\x00 ") == "a b\n\nc"


def test_clean_text_normalises_full_width_characters():
    assert clean_text("ＡＢＣ１２３") == "ABC123"


def test_is_stop_word_covers_both_languages():
    assert is_stop_word("The")
    assert is_stop_word("的")
    assert not is_stop_word("graph")


def test_context_window_is_case_insensitive():
    assert context_window("abcdefXYZghij", "xyz", 2) == "efXYZgh"
    assert context_window("abc", "zzz", 5) == ""


def test_truncate_content_marks_truncation():
    assert truncate_content("short", 10) == "short"
    result = truncate_content("x" * 20, 10)
    assert result.startswith("x" * 10)
    assert result.endswith("[... content truncated ...]")
