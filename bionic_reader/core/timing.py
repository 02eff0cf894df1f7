"""Duration-only word timing estimation and active-word resolution.

WHY: The audio source tells us only how long the speech lasts, not when
each word is spoken. Longer words take longer to say, so splitting the
duration proportionally to word length gives a highlight that tracks
natural speech closely enough for a reader to follow along.

HOW: Each countable word gets weight ``max(min_char_weight, len(word))``.
Its duration is ``round_half_up(weight / total_weight × D)``. Windows
are laid end to end from 0; the last window's end is forced to D so
rounding never leaves a gap. Resolution is a binary search over the
contiguous windows.

RULES:
- Empty word list → empty tuple, whatever the duration
- windows[0].start_ms == 0, windows[i].end_ms == windows[i+1].start_ms,
  windows[-1].end_ms == D (exact coverage)
- Only the last window absorbs rounding error
- D > 0 → every window has start_ms < end_ms; non-final windows get at
  least 1 ms, and when D is too short for that the unrounded proportional
  boundaries are used instead
- D == 0 (unknown) → zero-length windows that are never active
- Negative / NaN / infinite durations are treated as unknown (0)
- resolve_active_word: start <= t < end; t < 0, t >= D, NaN → None
- Pure and deterministic: identical inputs give identical tuples
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

from bionic_reader.config import TimingPolicy
from bionic_reader.core.ir import WordTiming
from bionic_reader.core.tokenizer import countable_words

logger = logging.getLogger(__name__)

_DEFAULT_POLICY = TimingPolicy()


def normalize_duration(duration_ms: Optional[float]) -> Optional[float]:
    """Return a usable duration in ms, or None when it is unknown.

    WHY: Media elements report NaN (or nothing) until metadata loads, and
    some report Infinity for live streams. All of those mean "unknown".

    RULES:
    - None, NaN, ±Infinity, negative → None
    - 0 and positive finite values are returned as float
    """
    if duration_ms is None:
        return None
    try:
        value = float(duration_ms)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return value


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _proportional_bounds(weights: Sequence[int], total_ms: float) -> List[float]:
    """Unrounded end boundaries for each word (last one is total_ms)."""
    total_weight = sum(weights)
    bounds: List[float] = []
    cumulative = 0
    for weight in weights[:-1]:
        cumulative += weight
        bounds.append(total_ms * cumulative / total_weight)
    bounds.append(total_ms)
    return bounds


def _rounded_bounds(weights: Sequence[int], total_ms: float) -> Optional[List[float]]:
    """Rounded end boundaries, or None if the last word would get no time."""
    total_weight = sum(weights)
    bounds: List[float] = []
    end = 0
    for weight in weights[:-1]:
        end += max(1, _round_half_up(weight / total_weight * total_ms))
        bounds.append(end)
    if bounds and bounds[-1] >= total_ms:
        return None
    bounds.append(total_ms)
    return bounds


def estimate(
    word_lengths: Sequence[int],
    total_duration_ms: float,
    policy: Optional[TimingPolicy] = None,
    texts: Optional[Sequence[str]] = None,
) -> Tuple[WordTiming, ...]:
    """Estimate contiguous per-word windows from word lengths and a duration.

    Args:
        word_lengths: Character length of each countable word, in order.
        total_duration_ms: Total audio duration in milliseconds (>= 0).
        policy: Weighting policy; defaults to TimingPolicy().
        texts: Optional word strings stored on each window for display.

    Returns:
        A tuple of WordTiming, one per word, covering [0, total_duration_ms).
    """
    if not word_lengths:
        return ()

    policy = policy or _DEFAULT_POLICY
    duration = normalize_duration(total_duration_ms)
    if duration is None:
        logger.debug("Unusable duration %r, treating as unknown", total_duration_ms)
        duration = 0.0

    if texts is None:
        texts = [""] * len(word_lengths)

    if duration == 0:
        return tuple(
            WordTiming(index=i, text=texts[i], start_ms=0.0, end_ms=0.0)
            for i in range(len(word_lengths))
        )

    weights = [max(policy.min_char_weight, length) for length in word_lengths]
    bounds = _rounded_bounds(weights, duration)
    if bounds is None:
        logger.debug(
            "Duration %.1f ms too short to round %d words, using proportional bounds",
            duration, len(weights),
        )
        bounds = _proportional_bounds(weights, duration)

    timings: List[WordTiming] = []
    start = 0.0
    for i, end in enumerate(bounds):
        timings.append(WordTiming(
            index=i,
            text=texts[i],
            start_ms=float(start),
            end_ms=float(end),
        ))
        start = end
    return tuple(timings)


def estimate_from_words(
    words: Sequence[str],
    total_duration_ms: float,
    policy: Optional[TimingPolicy] = None,
) -> Tuple[WordTiming, ...]:
    """Estimate windows for already extracted core words."""
    return estimate([len(w) for w in words], total_duration_ms, policy, texts=list(words))


def estimate_word_timings(
    text: str,
    total_duration_ms: float,
    policy: Optional[TimingPolicy] = None,
) -> Tuple[WordTiming, ...]:
    """Tokenize text and estimate a window for each countable word.

    This is the host-facing entry point: punctuation-only tokens and
    whitespace never receive a window, so window indices match the
    ``word_index`` of the tokens the renderer draws.
    """
    return estimate_from_words(countable_words(text), total_duration_ms, policy)


def resolve_active_index(
    timings: Sequence[WordTiming],
    current_time_ms: float,
) -> Optional[int]:
    """Position in ``timings`` of the window containing current_time_ms.

    Binary search over the contiguous, sorted windows. Returns None when
    the time is negative, NaN, at/after the end, or the sequence is
    empty or zero-length.
    """
    if not timings:
        return None
    try:
        t = float(current_time_ms)
    except (TypeError, ValueError):
        return None
    if math.isnan(t) or t < 0 or t >= timings[-1].end_ms:
        return None

    lo, hi = 0, len(timings) - 1
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if timings[mid].start_ms <= t:
            lo = mid
        else:
            hi = mid - 1

    if timings[lo].contains(t):
        return lo
    return None


def resolve_active_word(
    timings: Sequence[WordTiming],
    current_time_ms: float,
) -> Optional[WordTiming]:
    """Return the window containing current_time_ms, or None."""
    position = resolve_active_index(timings, current_time_ms)
    if position is None:
        return None
    return timings[position]
