"""Bytes-to-text conversion keyed by mime type.

Only plain text and markdown are registered out of the box. Other formats
can be added with :meth:`TextExtractor.register`.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable
from pathlib import Path

from studygraph.utils.exceptions import TextExtractionError, UnsupportedFileTypeError

Extractor = Callable[[bytes], str]

_ENCODINGS = ("utf-8-sig", "gb18030")
_MARKDOWN_MARKUP = re.compile(r"^\s{0,3}(?:#{1,6}\s+|>\s?|[-*+]\s+)|[*_`]{1,3}", re.M)


def decode_text(data: bytes) -> str:
    for encoding in _ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise TextExtractionError("File is not valid UTF-8 or GB18030 text")


def markdown_to_text(data: bytes) -> str:
    text = decode_text(data)
    text = re.sub(r"!?\[([^\]]*)\]\([^)]*\)", r"\1", text)
    return _MARKDOWN_MARKUP.sub("", text)


class TextExtractor:
    def __init__(self) -> None:
        self._extractors: dict[str, Extractor] = {}
        self.register("text/plain", decode_text)
        self.register("text/markdown", markdown_to_text)
        self.register("text/x-markdown", markdown_to_text)

    def register(self, mime_type: str, extractor: Extractor) -> None:
        self._extractors[mime_type.lower()] = extractor

    @property
    def supported_types(self) -> list[str]:
        return sorted(self._extractors)

    def supports(self, mime_type: str) -> bool:
        return _base_type(mime_type) in self._extractors

    def extract_bytes(self, data: bytes, mime_type: str) -> str:
        extractor = self._extractors.get(_base_type(mime_type))
        if extractor is None:
            raise UnsupportedFileTypeError(mime_type)
        try:
            return extractor(data)
        except (UnsupportedFileTypeError, TextExtractionError):
            raise
        except Exception as exc:
            raise TextExtractionError(f"Text extraction failed: {exc}") from exc

    async def extract_file(self, path: str | Path, mime_type: str) -> str:
        if not self.supports(mime_type):
            raise UnsupportedFileTypeError(mime_type)
        try:
            data = await asyncio.to_thread(Path(path).read_bytes)
        except OSError as exc:
            raise TextExtractionError(f"Cannot read stored file: {exc}") from exc
        return self.extract_bytes(data, mime_type)


def _base_type(mime_type: str) -> str:
    """``text/plain; charset=utf-8`` -> ``text/plain``."""
    return (mime_type or "").split(";", 1)[0].strip().lower()
