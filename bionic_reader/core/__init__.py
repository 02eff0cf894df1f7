"""Core tokenization, timing estimation and bionic lead modules.

WHY: The core package is the pure heart of the reader. It turns text
and a duration into word windows and answers "which word is active at
time t". Every host (CLI, HTTP API, GUI) and the playback synchronizer
consume it.

HOW: ir.py defines the data structures, tokenizer.py splits text into
tokens, timing.py estimates and resolves word windows, bionic.py sizes
the bold lead of each word.

RULES:
- Every function here is pure and deterministic
- No function here raises for malformed text or durations
"""

from bionic_reader.core.bionic import lead_length, split_lead
from bionic_reader.core.ir import Token, WordTiming
from bionic_reader.core.timing import (
    estimate,
    estimate_from_words,
    estimate_word_timings,
    normalize_duration,
    resolve_active_index,
    resolve_active_word,
)
from bionic_reader.core.tokenizer import countable_words, tokenize

__all__ = [
    "Token",
    "WordTiming",
    "countable_words",
    "estimate",
    "estimate_from_words",
    "estimate_word_timings",
    "lead_length",
    "normalize_duration",
    "resolve_active_index",
    "resolve_active_word",
    "split_lead",
    "tokenize",
]
