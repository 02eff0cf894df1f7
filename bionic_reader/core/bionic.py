"""Bionic lead sizing — how much of each word to render in bold.

WHY: Bolding the first letters of each word gives the eye a fixation
point and speeds word recognition. Short words need only their first
letter; longer words need a proportionally longer lead.

HOW: A three-band policy on the core word length (see LeadPolicy):
  length <= short_max  → 1
  length <= medium_max → ceil(length × medium_ratio)
  otherwise            → ceil(length × long_ratio)

RULES:
- For length >= 1 the result is always in [1, length]
- Length <= 0 (empty core) → 0, nothing to bold
- Pure and total; never raises
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from bionic_reader.config import LeadPolicy

_DEFAULT_POLICY = LeadPolicy()


def lead_length(core_word_length: int, policy: Optional[LeadPolicy] = None) -> int:
    """Number of leading characters of a word to render in bold."""
    if core_word_length <= 0:
        return 0
    policy = policy or _DEFAULT_POLICY

    if core_word_length <= policy.short_max:
        count = 1
    elif core_word_length <= policy.medium_max:
        count = math.ceil(core_word_length * policy.medium_ratio)
    else:
        count = math.ceil(core_word_length * policy.long_ratio)

    return max(1, min(core_word_length, count))


def split_lead(word: str, policy: Optional[LeadPolicy] = None) -> Tuple[str, str]:
    """Split a core word into its (bold lead, remainder) parts."""
    count = lead_length(len(word), policy)
    return word[:count], word[count:]
