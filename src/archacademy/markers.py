"""Parse `{{word}}` blank markers in fill-in-the-blanks passages."""

from __future__ import annotations

import random
from typing import NamedTuple

MARKER_OPEN = "{{"
MARKER_CLOSE = "}}"


class Segment(NamedTuple):
    """A literal run (`blank_word is None`) or a blank holding the expected word."""

    text: str
    blank_word: str | None


def _scan(text: str) -> tuple[list[tuple[str, str]], str]:
    """Split text into (literal-before, blank-word) pairs plus the trailing literal.

    An opener without a matching closer ends the scan; everything from that
    opener onwards is returned as trailing literal text.
    """
    pairs: list[tuple[str, str]] = []
    position = 0
    while True:
        open_at = text.find(MARKER_OPEN, position)
        if open_at < 0:
            break
        word_start = open_at + len(MARKER_OPEN)
        close_at = text.find(MARKER_CLOSE, word_start)
        if close_at < 0:
            break
        pairs.append((text[position:open_at], text[word_start:close_at]))
        position = close_at + len(MARKER_CLOSE)
    return pairs, text[position:]


def correct_words(text: str) -> list[str]:
    """Return the blank words in text order."""
    pairs, _ = _scan(text)
    return [word for _, word in pairs]


def segments(text: str) -> list[Segment]:
    """Return alternating literal/blank segments, dropping empty literals."""
    pairs, trailing = _scan(text)
    result: list[Segment] = []
    for before, word in pairs:
        if before:
            result.append(Segment(before, None))
        result.append(Segment("", word))
    if trailing:
        result.append(Segment(trailing, None))
    return result


def word_bank(text: str, distractors: list[str], rng: random.Random | None = None) -> list[str]:
    """Return correct words plus distractors in a fresh uniform shuffle.

    Call once per presentation; the result must never be stored.
    """
    words = correct_words(text) + list(distractors)
    (rng or random).shuffle(words)
    return words


def fill_blanks(text: str, open_mark: str = "**", close_mark: str = "**") -> str:
    """Rewrite every matched `{{word}}` span as an emphasised literal word."""
    pairs, trailing = _scan(text)
    parts = [f"{before}{open_mark}{word}{close_mark}" for before, word in pairs]
    parts.append(trailing)
    return "".join(parts)
