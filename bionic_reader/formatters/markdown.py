"""Markdown formatter — bold leads as ``**strong**`` emphasis.

WHY: Markdown is the lowest-friction way to drop bionic text into notes,
READMEs or chat. The active word (when given) is wrapped in ``==mark==``
highlight syntax, understood by most Markdown editors.

RULES:
- Lead wrapped in ``**``; rest and punctuation follow unchanged
- Markdown control characters (``\\ * _ = ` [ ]``) in the text are
  backslash-escaped so they cannot break the emphasis
- Whitespace (including newlines) is kept exactly
"""

from __future__ import annotations

import re
from typing import List

from bionic_reader.formatters.base import BaseFormatter, FormatterOutput, ReadingDocument

_MD_SPECIAL_RE = re.compile(r"([\\*_=`\[\]])")


def _escape(text: str) -> str:
    return _MD_SPECIAL_RE.sub(r"\\\1", text)


class MarkdownFormatter(BaseFormatter):
    """Render the reading document as Markdown."""

    @property
    def name(self) -> str:
        return "Markdown"

    def format(self, document: ReadingDocument) -> List[FormatterOutput]:
        parts: List[str] = []
        for token in document.tokens:
            if token.is_whitespace:
                parts.append(token.raw)
                continue
            if not token.is_countable:
                parts.append(_escape(token.raw))
                continue

            lead, rest = document.split(token)
            word = "**{}**{}".format(_escape(lead), _escape(rest))
            if document.is_active(token):
                word = "=={}==".format(word)
            parts.append(_escape(token.leading_punct) + word + _escape(token.trailing_punct))

        return [FormatterOutput(
            suffix="-bionic.md",
            content="".join(parts),
            media_type="text/markdown",
        )]
