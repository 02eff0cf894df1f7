"""Intermediate representation dataclasses for tokens and word windows.

WHY: The tokenizer, estimator, synchronizer and renderers all talk
about the same two things: a piece of the source text and the time
window assigned to a countable word. Well-typed, immutable records
keep that contract explicit and safe to share between the render
thread and the frame loop.

HOW: Two frozen dataclasses:
  Token      — one whitespace run or one non-whitespace chunk of text
  WordTiming — the half-open [start_ms, end_ms) window of one countable word

RULES:
- Token.raw reproduces the source exactly; joining all raws gives the text
- For non-whitespace tokens: leading_punct + core + trailing_punct == raw
- word_index counts countable tokens only (whitespace and
  punctuation-only tokens have word_index None)
- WordTiming sequences are contiguous, start at 0 and end at the total
  duration; they are tuples and never mutated in place
- All times are float milliseconds
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Token:
    """A whitespace run or a word-bearing chunk of the source text.

    RULES:
    - raw: exact substring of the source
    - is_whitespace: True for pure whitespace runs
    - leading_punct / core / trailing_punct: decomposition of raw; all
      empty except raw-in-leading_punct for punctuation-only chunks
    - word_index: 0-based position among countable tokens, or None
    """

    raw: str
    is_whitespace: bool = False
    leading_punct: str = ""
    core: str = ""
    trailing_punct: str = ""
    word_index: Optional[int] = None

    @property
    def is_countable(self) -> bool:
        """True when this token participates in timing and highlighting."""
        return self.word_index is not None


@dataclass(frozen=True)
class WordTiming:
    """The estimated speaking window of one countable word.

    RULES:
    - index: 0-based position among countable words
    - text: the core word (display/debugging only)
    - [start_ms, end_ms) is half-open; a boundary instant belongs to the
      later word
    - start_ms == end_ms only when the total duration is unknown (0)
    """

    index: int
    text: str
    start_ms: float
    end_ms: float

    @property
    def duration_ms(self) -> float:
        return self.end_ms - self.start_ms

    def contains(self, time_ms: float) -> bool:
        """True if time_ms falls inside the half-open window."""
        return self.start_ms <= time_ms < self.end_ms

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "text": self.text,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
        }
