"""Media clock contract and a simulated clock for hosts without audio.

WHY: The synchronizer only ever needs three read-only facts about the
media element: is it playing, where is it, and how long is it. Stating
that as a Protocol keeps the synchronizer independent of any particular
player (browser audio bridge, tkinter demo, test double).

HOW: MediaClock is a runtime-checkable Protocol. SimulatedMediaClock
advances a position from a monotonic time source while playing, which
is enough for the CLI ``--follow`` mode, the GUI and the tests (tests
inject a fake time source).

RULES:
- duration_ms is None until "metadata" is loaded
- current_time_ms may jump backward or forward (seek); consumers must
  not assume monotonic progress
- The simulated clock stops (ends) when the position reaches the duration
- While the duration is unknown, a playing clock does not advance
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class MediaClock(Protocol):
    """Read-only view of a playing media element."""

    @property
    def is_playing(self) -> bool: ...

    @property
    def current_time_ms(self) -> float: ...

    @property
    def duration_ms(self) -> Optional[float]: ...


class SimulatedMediaClock:
    """A wall-clock driven stand-in for an audio element.

    WHY: The CLI and GUI have no audio decoder, but still need a clock
    that behaves like one: unknown duration until loaded, play/pause,
    seeking, and an end of playback.

    HOW: Stores the position at the last state change (the anchor) and
    the time source reading at that moment. While playing, the current
    position is anchor + elapsed × rate, clamped to the duration.

    RULES:
    - load(duration_ms) plays the role of "loadedmetadata"
    - seek() clamps to [0, duration] and clears the ended flag
    - Reaching the duration sets ended and is_playing becomes False
    - All state changes are serialized by an internal lock
    """

    def __init__(
        self,
        duration_ms: Optional[float] = None,
        rate: float = 1.0,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive, got {}".format(rate))
        self._lock = threading.Lock()
        self._time_source = time_source
        self._duration_ms = duration_ms
        self._rate = rate
        self._playing = False
        self._position_ms = 0.0
        self._anchor_s = time_source()

    # ------------------------------------------------------------------
    # MediaClock
    # ------------------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        with self._lock:
            self._settle()
            return self._playing

    @property
    def current_time_ms(self) -> float:
        with self._lock:
            self._settle()
            return self._position_ms

    @property
    def duration_ms(self) -> Optional[float]:
        return self._duration_ms

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def ended(self) -> bool:
        with self._lock:
            self._settle()
            return self._at_end()

    def load(self, duration_ms: Optional[float]) -> None:
        """Set (or replace) the media duration."""
        with self._lock:
            self._settle()
            self._duration_ms = duration_ms
            self._anchor_s = self._time_source()

    def play(self) -> None:
        with self._lock:
            self._settle()
            if self._at_end():
                self._position_ms = 0.0
            self._playing = True
            self._anchor_s = self._time_source()

    def pause(self) -> None:
        with self._lock:
            self._settle()
            self._playing = False

    def seek(self, position_ms: float) -> None:
        with self._lock:
            self._settle()
            position = max(0.0, float(position_ms))
            if self._has_duration():
                position = min(position, float(self._duration_ms))
            self._position_ms = position
            self._anchor_s = self._time_source()

    def set_rate(self, rate: float) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive, got {}".format(rate))
        with self._lock:
            self._settle()
            self._rate = rate

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _has_duration(self) -> bool:
        return self._duration_ms is not None and not math.isnan(self._duration_ms)

    def _at_end(self) -> bool:
        return self._has_duration() and self._position_ms >= self._duration_ms

    def _settle(self) -> None:
        """Fold elapsed play time into the stored position."""
        now = self._time_source()
        if self._playing and self._has_duration():
            elapsed_ms = (now - self._anchor_s) * 1000.0 * self._rate
            self._position_ms = min(self._position_ms + elapsed_ms, float(self._duration_ms))
            if self._at_end():
                self._playing = False
        self._anchor_s = now
