"""Playback synchronizer — the state machine behind the moving highlight.

WHY: Word windows alone don't highlight anything; something has to watch
the media clock and tell the renderer when the active word changes. That
watcher must start only once the duration is known, follow seeks in both
directions, and stop cleanly (no stray ticks) when playback pauses, the
text changes, or the host tears the view down.

HOW: PlaybackSynchronizer owns the timing tuple, the active index and a
FrameLoop. Its states and transitions are explicit:

  idle ──start()──▶ waiting_for_duration ──notify_duration_changed()──▶ tracking
  idle/stopped ──start() with known duration──▶ tracking
  tracking ──tick──▶ tracking (resolve, report on change)
  tracking/waiting ──stop() | set_text(new) | close() | clock stopped──▶ stopped
  stopped ──start()──▶ (fresh session)

Every tick resolves the active word from scratch against the current
clock time, so backward and forward seeks need no special handling.

RULES:
- The sink is called only when the active index changes, with an int
  word index or None ("no highlight")
- Leaving tracking cancels the frame loop before anything else and
  reports None if a word was active
- Durations that are unknown, zero, negative or non-finite keep the
  session in waiting_for_duration
- Timing tuples are never mutated; a duration change swaps the tuple
- Empty text yields empty timings; the session tracks but never starts
  a frame loop and never reports an index
- Control methods (start/stop/set_text/...) are called from one host
  thread; ticks may run on the scheduler's thread
- Ending a session is serialized by a lock: a tick that sees playback
  stopped and a host stop() racing it report None once between them
- A sink that raises ends the session (without calling the sink again)
  and the exception propagates to the scheduler
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Optional, Tuple

from bionic_reader.config import TimingPolicy
from bionic_reader.core.ir import WordTiming
from bionic_reader.core.timing import (
    estimate_word_timings,
    normalize_duration,
    resolve_active_index,
)
from bionic_reader.playback.clock import MediaClock
from bionic_reader.playback.scheduler import FrameLoop, FrameScheduler

logger = logging.getLogger(__name__)

ActiveWordSink = Callable[[Optional[int]], None]


class SyncState(str, enum.Enum):
    """Lifecycle states of a playback synchronization session.

    Inherits from str so values serialize cleanly (logs, JSON).
    """

    IDLE = "idle"
    WAITING_FOR_DURATION = "waiting_for_duration"
    TRACKING = "tracking"
    STOPPED = "stopped"


_ACTIVE_STATES = (SyncState.WAITING_FOR_DURATION, SyncState.TRACKING)


def _usable(duration: Optional[float]) -> bool:
    return duration is not None and duration > 0


class PlaybackSynchronizer:
    """Map a live media clock to the active word index, frame by frame.

    Args:
        clock: Read-only media clock (is_playing, current_time_ms, duration_ms).
        scheduler: Source of per-frame callbacks.
        on_active_word: Sink receiving the new active word index or None.
        text: Initial text to follow.
        policy: Timing policy for the estimator.
    """

    def __init__(
        self,
        clock: MediaClock,
        scheduler: FrameScheduler,
        on_active_word: ActiveWordSink,
        text: str = "",
        policy: Optional[TimingPolicy] = None,
    ) -> None:
        self._clock = clock
        self._scheduler = scheduler
        self._sink = on_active_word
        self._text = text
        self._policy = policy
        self._state = SyncState.IDLE
        self._timings: Tuple[WordTiming, ...] = ()
        self._duration_ms: Optional[float] = None
        self._current_index: Optional[int] = None
        self._loop: Optional[FrameLoop] = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def current_index(self) -> Optional[int]:
        return self._current_index

    @property
    def timings(self) -> Tuple[WordTiming, ...]:
        return self._timings

    @property
    def text(self) -> str:
        return self._text

    @property
    def loop_running(self) -> bool:
        loop = self._loop
        return loop is not None and loop.running

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin a session: playback intent is present.

        Goes to tracking when the clock already knows its duration,
        otherwise waits for notify_duration_changed(). No-op while a
        session is active.
        """
        if self._state in _ACTIVE_STATES:
            return
        self._current_index = None
        duration = normalize_duration(self._clock.duration_ms)
        if _usable(duration):
            self._begin_tracking(duration)
        else:
            self._transition(SyncState.WAITING_FOR_DURATION, "duration unknown")

    def notify_duration_changed(self) -> None:
        """Host signal that the media duration became known or changed.

        Starts tracking from waiting_for_duration; while tracking,
        re-estimates the windows if the duration actually changed.
        Ignored in idle/stopped (the next start() reads the clock).
        """
        duration = normalize_duration(self._clock.duration_ms)
        if not _usable(duration):
            return
        if self._state == SyncState.WAITING_FOR_DURATION:
            self._begin_tracking(duration)
        elif self._state == SyncState.TRACKING and duration != self._duration_ms:
            self._duration_ms = duration
            self._timings = estimate_word_timings(self._text, duration, self._policy)
            logger.debug("Duration changed to %.1f ms, re-estimated %d windows",
                         duration, len(self._timings))

    def set_text(self, text: str) -> None:
        """Replace the followed text; an active session is stopped.

        The old windows no longer describe the text, so the session ends
        and the host starts a new one when playback continues.
        """
        if text == self._text:
            return
        self._text = text
        if self._state in _ACTIVE_STATES:
            self._end_session("text changed")
        self._timings = ()
        self._duration_ms = None

    def stop(self) -> None:
        """Pause/stop: cancel the frame loop and clear the highlight."""
        if self._state in _ACTIVE_STATES:
            self._end_session("stopped by host")

    def close(self) -> None:
        """Tear the session down (host view going away)."""
        if self._state in _ACTIVE_STATES:
            self._end_session("closed")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, state: SyncState, reason: str) -> None:
        logger.debug("Sync %s -> %s (%s)", self._state.value, state.value, reason)
        self._state = state

    def _begin_tracking(self, duration: float) -> None:
        self._duration_ms = duration
        self._timings = estimate_word_timings(self._text, duration, self._policy)
        self._transition(
            SyncState.TRACKING,
            "{} windows over {:.1f} ms".format(len(self._timings), duration),
        )
        if not self._timings:
            return
        loop = FrameLoop(self._scheduler, self._tick)
        self._loop = loop
        loop.start()

    def _end_session(self, reason: str, clear_highlight: bool = True) -> None:
        # Cancel before taking our lock: a tick holds the loop's lock and
        # then ours, so the locks are always acquired in that order.
        loop = self._loop
        if loop is not None:
            loop.cancel()
        with self._lock:
            if self._state not in _ACTIVE_STATES:
                return
            if self._loop is loop:
                self._loop = None
            self._transition(SyncState.STOPPED, reason)
            if clear_highlight:
                self._report(None)
            else:
                self._current_index = None

    def _tick(self) -> None:
        if not self._clock.is_playing:
            self._end_session("playback not running")
            return
        try:
            with self._lock:
                if self._state != SyncState.TRACKING:
                    return
                timings = self._timings
                position = resolve_active_index(timings, self._clock.current_time_ms)
                self._report(timings[position].index if position is not None else None)
        except Exception:
            logger.warning("Active-word sink failed; ending session")
            self._end_session("sink failed", clear_highlight=False)
            raise

    def _report(self, index: Optional[int]) -> None:
        if index == self._current_index:
            return
        self._current_index = index
        self._sink(index)
