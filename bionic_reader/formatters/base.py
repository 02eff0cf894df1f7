"""Abstract base formatter, reading document, and output container.

WHY: Every renderer draws the same thing (the tokenized text with a
bold lead per word and, optionally, one highlighted word) into a
different medium. This base class enforces one interface so the CLI,
GUI and HTTP API can render with any formatter generically.

HOW: ReadingDocument bundles the tokens, the active word index and the
reader's preferences. BaseFormatter is an ABC with a ``name`` property
and a ``format()`` method returning FormatterOutput objects (suffix,
content, MIME type).

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list; current formatters return one item
- ``suffix`` starts with a hyphen, e.g. ``"-bionic.html"``
- Whitespace and punctuation are reproduced exactly from Token.raw
- Only countable tokens get a lead and can be active
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from bionic_reader.config import LeadPolicy, ReaderPreferences
from bionic_reader.core.bionic import split_lead
from bionic_reader.core.ir import Token
from bionic_reader.core.tokenizer import tokenize


@dataclass
class ReadingDocument:
    """Everything a renderer needs to draw one frame of the reader.

    RULES:
    - tokens: output of tokenize(), in order
    - active_index: word_index of the highlighted word, or None
    - preferences: explicit display preferences (font, spacing)
    - lead_policy: None means the default LeadPolicy
    """

    tokens: List[Token]
    active_index: Optional[int] = None
    preferences: ReaderPreferences = field(default_factory=ReaderPreferences)
    lead_policy: Optional[LeadPolicy] = None

    @classmethod
    def from_text(
        cls,
        text: str,
        active_index: Optional[int] = None,
        preferences: Optional[ReaderPreferences] = None,
        lead_policy: Optional[LeadPolicy] = None,
    ) -> "ReadingDocument":
        return cls(
            tokens=tokenize(text),
            active_index=active_index,
            preferences=preferences or ReaderPreferences(),
            lead_policy=lead_policy,
        )

    @property
    def word_count(self) -> int:
        return sum(1 for t in self.tokens if t.is_countable)

    def is_active(self, token: Token) -> bool:
        return token.is_countable and token.word_index == self.active_index

    def split(self, token: Token) -> Sequence[str]:
        """(lead, rest) of a countable token's core."""
        return split_lead(token.core, self.lead_policy)


@dataclass
class FormatterOutput:
    """One rendered output.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``"-bionic.html"`` → ``"chapter1-bionic.html"``.
        content: The rendered text.
        media_type: MIME type for the content, e.g. ``"text/html"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all renderers.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'HTML'."""

    @abstractmethod
    def format(self, document: ReadingDocument) -> List[FormatterOutput]:
        """Render the document into one or more outputs."""
