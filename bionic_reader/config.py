"""Configuration constants, heuristic policies, and .env loading.

WHY: The word-weight floor and the bionic lead thresholds are tuning
values, not laws. Keeping them (and the reader's display preferences)
in one place as plain data lets both humans and tests override them
without touching the algorithms.

HOW: python-dotenv loads the .env file on import. Defaults are
module-level constants, each overridable via an environment variable.
Loader functions build frozen policy dataclasses and raise ValueError
with a clear message when a variable cannot be parsed.

RULES:
- BIONIC_MIN_CHAR_WEIGHT floors each word's timing weight (default 2)
- Lead policy: length <= 2 → 1, <= 4 → ceil(0.5 × len), else ceil(0.4 × len)
- ReaderPreferences are passed explicitly to renderers, never read globally
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_MIN_CHAR_WEIGHT = 2

DEFAULT_SHORT_WORD_MAX = 2
DEFAULT_MEDIUM_WORD_MAX = 4
DEFAULT_MEDIUM_RATIO = 0.5
DEFAULT_LONG_RATIO = 0.4

DEFAULT_FRAME_RATE = 60.0
"""Frames per second for timer-driven schedulers (thread, asyncio, Tk)."""

DEFAULT_LINE_HEIGHT = 1.6

DYSLEXIA_FONT_FAMILY = "OpenDyslexic, 'Comic Sans MS', sans-serif"
DEFAULT_FONT_FAMILY = "system-ui, sans-serif"

SUPPORTED_TEXT_EXTENSIONS: set[str] = {".txt", ".md"}
"""Input file extensions accepted by the CLI and GUI (lowercase, with dot)."""


def _env(name: str, default: T, parse: Callable[[str], T]) -> T:
    """Read and parse an environment variable, falling back to a default.

    Raises ValueError naming the variable when the value cannot be parsed.
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError:
        raise ValueError(
            "Invalid value for {}: {!r}".format(name, raw)
        ) from None


def _parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(raw)


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimingPolicy:
    """Tuning values for the duration-based timing estimator.

    RULES:
    - min_char_weight >= 1; words shorter than this are weighted as if
      they had min_char_weight characters
    """

    min_char_weight: int = DEFAULT_MIN_CHAR_WEIGHT

    def __post_init__(self) -> None:
        if self.min_char_weight < 1:
            raise ValueError(
                "min_char_weight must be at least 1, got {}".format(self.min_char_weight)
            )


@dataclass(frozen=True)
class LeadPolicy:
    """Thresholds and ratios that size the bolded lead of a word.

    RULES:
    - Words up to short_max characters get a single bold letter
    - Words up to medium_max characters get ceil(len × medium_ratio)
    - Longer words get ceil(len × long_ratio)
    - Ratios must lie in (0, 1]
    """

    short_max: int = DEFAULT_SHORT_WORD_MAX
    medium_max: int = DEFAULT_MEDIUM_WORD_MAX
    medium_ratio: float = DEFAULT_MEDIUM_RATIO
    long_ratio: float = DEFAULT_LONG_RATIO

    def __post_init__(self) -> None:
        if self.short_max < 1 or self.medium_max < self.short_max:
            raise ValueError(
                "Lead thresholds must satisfy 1 <= short_max <= medium_max, "
                "got short_max={} medium_max={}".format(self.short_max, self.medium_max)
            )
        for name, ratio in (("medium_ratio", self.medium_ratio), ("long_ratio", self.long_ratio)):
            if not 0.0 < ratio <= 1.0:
                raise ValueError("{} must be in (0, 1], got {}".format(name, ratio))


@dataclass(frozen=True)
class ReaderPreferences:
    """Display preferences handed to renderers as an explicit value.

    WHY: The reader's font and spacing choices belong to the host (they
    are persisted elsewhere). Renderers receive them as a parameter so
    no formatter depends on ambient state.

    RULES:
    - letter_spacing_em / word_spacing_em are extra spacing in em units
    - line_height is unitless (CSS line-height)
    """

    dyslexia_font: bool = False
    letter_spacing_em: float = 0.0
    word_spacing_em: float = 0.0
    line_height: float = DEFAULT_LINE_HEIGHT

    @property
    def font_family(self) -> str:
        return DYSLEXIA_FONT_FAMILY if self.dyslexia_font else DEFAULT_FONT_FAMILY


def load_timing_policy() -> TimingPolicy:
    """Build the TimingPolicy from BIONIC_MIN_CHAR_WEIGHT."""
    return TimingPolicy(
        min_char_weight=_env("BIONIC_MIN_CHAR_WEIGHT", DEFAULT_MIN_CHAR_WEIGHT, int),
    )


def load_lead_policy() -> LeadPolicy:
    """Build the LeadPolicy from the BIONIC_*_WORD_MAX / *_RATIO variables."""
    return LeadPolicy(
        short_max=_env("BIONIC_SHORT_WORD_MAX", DEFAULT_SHORT_WORD_MAX, int),
        medium_max=_env("BIONIC_MEDIUM_WORD_MAX", DEFAULT_MEDIUM_WORD_MAX, int),
        medium_ratio=_env("BIONIC_MEDIUM_RATIO", DEFAULT_MEDIUM_RATIO, float),
        long_ratio=_env("BIONIC_LONG_RATIO", DEFAULT_LONG_RATIO, float),
    )


def load_reader_preferences() -> ReaderPreferences:
    """Build ReaderPreferences from the BIONIC_* display variables."""
    return ReaderPreferences(
        dyslexia_font=_env("BIONIC_DYSLEXIA_FONT", False, _parse_bool),
        letter_spacing_em=_env("BIONIC_LETTER_SPACING", 0.0, float),
        word_spacing_em=_env("BIONIC_WORD_SPACING", 0.0, float),
        line_height=_env("BIONIC_LINE_HEIGHT", DEFAULT_LINE_HEIGHT, float),
    )


def load_frame_rate() -> float:
    """Frames per second for timer-driven schedulers (BIONIC_FRAME_RATE)."""
    fps = _env("BIONIC_FRAME_RATE", DEFAULT_FRAME_RATE, float)
    if fps <= 0:
        raise ValueError("BIONIC_FRAME_RATE must be positive, got {}".format(fps))
    return fps


# ---------------------------------------------------------------------------
# Host defaults
# ---------------------------------------------------------------------------

SERVER_HOST = os.getenv("BIONIC_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("BIONIC_PORT", "8000"))
LOG_LEVEL = os.getenv("BIONIC_LOG_LEVEL", "INFO").upper()
