"""Whitespace-preserving tokenizer with punctuation/core decomposition.

WHY: The renderer must reproduce the original spacing and punctuation
exactly, while the estimator and synchronizer only care about words
that are actually spoken. One tokenizer serves both, so the word
indices the synchronizer reports line up with the tokens the renderer
draws.

HOW: The text is split into alternating maximal runs of whitespace and
non-whitespace. Each non-whitespace run is matched against
``(non-word)(letters|numbers|apostrophes|hyphens)(non-word)``. Runs that
do not fit that shape (``"e.g."``, ``"a/b"``) keep their non-word
prefix/suffix as punctuation and the interior as the core. A run whose
interior has no letter or number is punctuation only.

RULES:
- "".join(t.raw for t in tokenize(text)) == text, always
- A token is countable iff its core contains a Unicode letter or number
- Countable tokens are numbered 0, 1, 2, ... in order of appearance
- Never raises; empty input yields an empty list
"""

from __future__ import annotations

import re
from typing import List, Sequence, Union

from bionic_reader.core.ir import Token

_RUN_RE = re.compile(r"\s+|\S+")

# Combining diacritical mark blocks. re treats them as \W, so decomposed
# (NFD) text would otherwise lose its accents to the punctuation.
_MARKS = "\u0300-\u036f\u1ab0-\u1aff\u1dc0-\u1dff\u20d0-\u20ff\ufe20-\ufe2f"
_PUNCT = r"[^\w" + _MARKS + r"]"

# Letters and numbers (\w minus underscore), combining marks, plus
# apostrophes and hyphens.
_WORD_RE = re.compile(
    r"^(" + _PUNCT + r"*)((?:[^\W_]|[" + _MARKS + r"]|['’\-])+)(" + _PUNCT + r"*)$"
)

# Fallback split for chunks with punctuation inside the word.
_EDGES_RE = re.compile(r"^(" + _PUNCT + r"*)(.*?)(" + _PUNCT + r"*)$", re.DOTALL)

_ALNUM_RE = re.compile(r"[^\W_]")


def _has_letter_or_number(text: str) -> bool:
    return _ALNUM_RE.search(text) is not None


def _split_chunk(chunk: str) -> tuple:
    """Split a non-whitespace chunk into (leading, core, trailing)."""
    match = _WORD_RE.match(chunk)
    if match is None:
        match = _EDGES_RE.match(chunk)
    leading, core, trailing = match.groups()
    if not _has_letter_or_number(core):
        return chunk, "", ""
    return leading, core, trailing


def tokenize(text: str) -> List[Token]:
    """Split text into whitespace and word tokens, preserving every character.

    Args:
        text: Arbitrary Unicode text.

    Returns:
        Ordered tokens whose ``raw`` fields concatenate back to ``text``.
    """
    tokens: List[Token] = []
    word_index = 0

    for run in _RUN_RE.findall(text):
        if run.isspace():
            tokens.append(Token(raw=run, is_whitespace=True))
            continue

        leading, core, trailing = _split_chunk(run)
        if core:
            tokens.append(Token(
                raw=run,
                leading_punct=leading,
                core=core,
                trailing_punct=trailing,
                word_index=word_index,
            ))
            word_index += 1
        else:
            tokens.append(Token(raw=run, leading_punct=run))

    return tokens


def countable_words(source: Union[str, Sequence[Token]]) -> List[str]:
    """Return the core strings of all countable tokens, in order.

    Accepts either raw text or an already tokenized sequence.
    """
    tokens = tokenize(source) if isinstance(source, str) else source
    return [t.core for t in tokens if t.is_countable]
