"""HTML formatter — bionic markup for a browser reader.

WHY: The browser host swaps the ``bionic-active`` class as the active
word moves, and styles ``bionic-lead`` in bold. Producing the markup on
the server keeps tokenization (and therefore word indices) identical
between the timing API and what the reader sees.

HOW: One ``<div class="bionic-reading">`` wraps the tokens. Whitespace
runs are emitted in ``<span class="whitespace-pre">`` so spacing is kept
exactly. Each countable word becomes

    <span class="bionic-word" data-word-index="N">(<span class="bionic-lead"><b>Le</b></span>ad)</span>

with its punctuation outside the lead. Preferences become inline CSS on
the wrapper.

RULES:
- All text is HTML-escaped
- Exactly one word carries ``bionic-active`` when active_index matches
- Punctuation-only tokens are plain ``<span class="bionic-punct">``
- Output is a fragment, not a full HTML page
"""

from __future__ import annotations

import html
from typing import List

from bionic_reader.config import ReaderPreferences
from bionic_reader.core.ir import Token
from bionic_reader.formatters.base import BaseFormatter, FormatterOutput, ReadingDocument


def _style(preferences: ReaderPreferences) -> str:
    parts = [
        "font-family: {}".format(preferences.font_family),
        "line-height: {:g}".format(preferences.line_height),
    ]
    if preferences.letter_spacing_em:
        parts.append("letter-spacing: {:g}em".format(preferences.letter_spacing_em))
    if preferences.word_spacing_em:
        parts.append("word-spacing: {:g}em".format(preferences.word_spacing_em))
    return "; ".join(parts)


class HtmlFormatter(BaseFormatter):
    """Render the reading document as an HTML fragment."""

    @property
    def name(self) -> str:
        return "HTML"

    def _render_token(self, token: Token, document: ReadingDocument) -> str:
        if token.is_whitespace:
            return '<span class="whitespace-pre">{}</span>'.format(html.escape(token.raw))
        if not token.is_countable:
            return '<span class="bionic-punct">{}</span>'.format(html.escape(token.raw))

        lead, rest = document.split(token)
        classes = "bionic-word bionic-active" if document.is_active(token) else "bionic-word"
        return (
            '<span class="{cls}" data-word-index="{idx}">{leading}'
            '<span class="bionic-lead"><b>{lead}</b></span>{rest}{trailing}</span>'
        ).format(
            cls=classes,
            idx=token.word_index,
            leading=html.escape(token.leading_punct),
            lead=html.escape(lead),
            rest=html.escape(rest),
            trailing=html.escape(token.trailing_punct),
        )

    def format(self, document: ReadingDocument) -> List[FormatterOutput]:
        body = "".join(self._render_token(t, document) for t in document.tokens)
        content = '<div class="bionic-reading" style="{}">{}</div>\n'.format(
            html.escape(_style(document.preferences), quote=True),
            body,
        )
        return [FormatterOutput(suffix="-bionic.html", content=content, media_type="text/html")]
