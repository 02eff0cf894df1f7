"""Bionic Reader — read-along word highlighting from total audio duration.

WHY: Synthesized or recorded speech rarely comes with word-level alignment.
Readers who follow along (dyslexic readers in particular) still benefit
from seeing which word is being spoken, rendered with a bolded lead so
the eye can anchor on each word quickly.

HOW: Three-stage pipeline: tokenize the text, estimate a time window per
word from the total duration, then map the live playback position to the
active word every frame. Renderers (HTML, Markdown, ANSI) consume the
tokens plus the active index; the CLI, HTTP API and GUI are thin hosts.

RULES:
- The core (tokenizer, estimator, resolver, lead formatter) is pure
- Timing windows are immutable tuples, replaced wholesale on recompute
- The synchronizer is the only stateful component and never blocks
- Nothing in the core raises for bad input; it degrades to "no highlight"
"""

__version__ = "0.1.0"
