"""ANSI terminal formatter — bold leads and a reverse-video active word.

WHY: The CLI's ``--follow`` mode and quick previews render in a
terminal. SGR escape codes give bold leads and a visible highlight
without any extra dependency.

RULES:
- Lead in bold (SGR 1 ... 22)
- Active word core in reverse video (SGR 7 ... 27)
- Text is otherwise reproduced exactly from Token.raw
"""

from __future__ import annotations

from typing import List

from bionic_reader.formatters.base import BaseFormatter, FormatterOutput, ReadingDocument

BOLD = "\x1b[1m"
NORMAL_INTENSITY = "\x1b[22m"
REVERSE = "\x1b[7m"
NO_REVERSE = "\x1b[27m"


def bold_word(lead: str, rest: str) -> str:
    return "{}{}{}{}".format(BOLD, lead, NORMAL_INTENSITY, rest)


class AnsiFormatter(BaseFormatter):
    """Render the reading document with ANSI escape sequences."""

    @property
    def name(self) -> str:
        return "ANSI terminal"

    def format(self, document: ReadingDocument) -> List[FormatterOutput]:
        parts: List[str] = []
        for token in document.tokens:
            if not token.is_countable:
                parts.append(token.raw)
                continue
            lead, rest = document.split(token)
            word = bold_word(lead, rest)
            if document.is_active(token):
                word = "{}{}{}".format(REVERSE, word, NO_REVERSE)
            parts.append(token.leading_punct + word + token.trailing_punct)

        return [FormatterOutput(
            suffix="-bionic.ansi.txt",
            content="".join(parts),
            media_type="text/plain",
        )]
