"""Text cleaning, sentence splitting, and token segmentation.

Segmentation is heuristic. Latin text is split on non-alphanumerics and
lower-cased; runs of CJK ideographs are cut at a fixed list of function and
connective words, so "机器学习属于人工智能的一个分支" yields
``["机器学习", "人工智能", "分支"]``.
"""

from __future__ import annotations

import re
import unicodedata

CJK_RANGE = "\\u4e00-\\u9fff"

_SENTENCE_SPLIT = re.compile(r"[。！？!?；;\n]+|(?<=[^\s.])\.(?=\s|$)")
_TOKEN_RUN = re.compile(rf"[{CJK_RANGE}]+|[A-Za-z0-9]+")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\u200b-\u200f\ufeff]")
_HORIZONTAL_SPACE = re.compile(r"[ \t\u3000\xa0]+")
_BLANK_LINES = re.compile(r"\n\s*\n+")

ENGLISH_STOP_WORDS = frozenset(
    """
    a about above after again all also an and any are as at be been being
    between both but by can could did do does doing down during each few for
    from further had has have having he her here hers him his how however i if
    in into is it its itself just may me might more most must my no nor not of
    off on once only or other our ours out over own same she should so some
    such than that the their theirs them then there these they this those
    through to too under until up upon very was we were what when where which
    while who whom why will with within without would you your yours
    """.split()
)

CHINESE_STOP_WORDS = frozenset(
    [
        "的", "了", "在", "是", "我", "有", "和", "就", "不", "人", "都", "一", "一个",
        "上", "也", "很", "到", "说", "要", "去", "你", "会", "着", "没有", "看", "好",
        "自己", "这", "那", "它", "他", "她", "们", "个", "中", "而", "之", "与", "或",
        "我们", "他们", "它们", "什么", "这个", "那个", "这些", "那些", "可以", "因为",
        "所以", "但是", "如果", "以及", "通过", "进行", "一种", "一些", "如何", "怎么",
        "为什么", "哪些", "非常",
    ]
)

# Function and connective words that separate candidate terms inside a CJK
# run. Single characters are limited to ones that rarely occur inside nouns.
CJK_DELIMITERS = (
    "为什么", "依赖于", "是一种",
    "一个", "一种", "一些", "这个", "那个", "这些", "那些", "以及", "并且", "但是",
    "因为", "所以", "如果", "可以", "通过", "进行", "属于", "导致", "引起", "依赖",
    "需要", "相似", "类似", "包括", "包含", "我们", "他们", "它们", "什么", "如何",
    "怎么", "哪些", "非常", "没有", "自己", "就是", "还是", "或者", "例如", "比如",
    "的", "了", "是", "和", "与", "或", "及", "在", "也", "都", "就", "被", "把",
    "着", "吗", "呢", "啊", "这", "那",
)
_CJK_DELIMITER_SPLIT = re.compile(
    "|".join(re.escape(w) for w in sorted(CJK_DELIMITERS, key=len, reverse=True))
)


def is_cjk(text: str) -> bool:
    return bool(re.search(f"[{CJK_RANGE}]", text))


def clean_text(text: str) -> str:
    """NFKC-normalise, drop control characters, and collapse whitespace.

    Newlines are kept (blank-line runs collapse to one empty line) because
    they are sentence boundaries.
    """
    text = unicodedata.normalize("NFKC", text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS.sub("", text)
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _BLANK_LINES.sub("\n\n", text)
    return "\n".join(line.strip() for line in text.split("\n")).strip()


def split_sentences(text: str, min_length: int = 0) -> list[str]:
    """Split on CJK/Latin terminal punctuation and newlines.

    Only sentences strictly longer than ``min_length`` characters are kept.
    """
    sentences = (s.strip() for s in _SENTENCE_SPLIT.split(text))
    return [s for s in sentences if s and len(s) > min_length]


def is_stop_word(word: str) -> bool:
    return word.lower() in ENGLISH_STOP_WORDS or word in CHINESE_STOP_WORDS


def segment(text: str) -> list[str]:
    """Tokenise text into candidate terms, in document order.

    Drops tokens of length <= 1, stop words and purely numeric tokens
    (numbers are left to the entity recogniser).
    """
    tokens: list[str] = []
    for run in _TOKEN_RUN.findall(text):
        if is_cjk(run):
            pieces = _CJK_DELIMITER_SPLIT.split(run)
        else:
            pieces = [run.lower()]
        for piece in pieces:
            if len(piece) <= 1 or piece.isdigit() or is_stop_word(piece):
                continue
            tokens.append(piece)
    return tokens


def contains_term(text: str, term: str) -> bool:
    """Case-insensitive substring test."""
    return term.lower() in text.lower()


def find_term(text: str, term: str) -> int:
    """Case-insensitive ``str.find``."""
    return text.lower().find(term.lower())


def context_window(text: str, term: str, radius: int) -> str:
    """Text within ``radius`` characters either side of the first occurrence of ``term``.

    Returns "" when the term does not occur.
    """
    index = find_term(text, term)
    if index == -1:
        return ""
    start = max(0, index - radius)
    end = min(len(text), index + len(term) + radius)
    return text[start:end]


def truncate_content(text: str, max_chars: int = 50_000) -> str:
    """Truncate text to max chars, adding a marker if truncated."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "\n\n[... content truncated ...]"
