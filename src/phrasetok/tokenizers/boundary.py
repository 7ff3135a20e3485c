"""Word boundaries consumed by the phrase tokenizer."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Protocol


class BoundarySegmenter(Protocol):
    def is_separator(self, ch: str) -> bool: ...

    def iter_spans(self, text: str) -> Iterator[tuple[int, int]]: ...


def build_whitespace_config(chars: Iterable[str]) -> bytes:
    """Pack separator characters into a codepoint bitmap (bit ``cp`` of byte ``cp // 8``)."""

    codepoints = sorted({ord(ch) for ch in chars})
    if not codepoints:
        return b""
    bitmap = bytearray(codepoints[-1] // 8 + 1)
    for cp in codepoints:
        bitmap[cp >> 3] |= 1 << (cp & 7)
    return bytes(bitmap)


class WhitespaceBoundary:
    """Splits text on separator codepoints.

    ``config`` is a bitmap built by :func:`build_whitespace_config`; codepoints
    past its end are not separators. Without a config, Unicode whitespace
    (``str.isspace``) separates words.
    """

    def __init__(self, config: bytes | None = None) -> None:
        self._config = config

    @classmethod
    def from_chars(cls, chars: Iterable[str]) -> WhitespaceBoundary:
        return cls(build_whitespace_config(chars))

    @property
    def config(self) -> bytes | None:
        return self._config

    def is_separator(self, ch: str) -> bool:
        if self._config is None:
            return ch.isspace()
        cp = ord(ch)
        idx = cp >> 3
        if idx >= len(self._config):
            return False
        return bool(self._config[idx] >> (cp & 7) & 1)

    def iter_spans(self, text: str) -> Iterator[tuple[int, int]]:
        start = None
        for pos, ch in enumerate(text):
            if self.is_separator(ch):
                if start is not None:
                    yield start, pos
                    start = None
            elif start is None:
                start = pos
        if start is not None:
            yield start, len(text)

    def split(self, text: str) -> list[str]:
        return [text[start:end] for start, end in self.iter_spans(text)]
