"""Playback synchronization — media clock, frame scheduling, synchronizer.

WHY: The core answers "which word is active at time t"; something has
to keep asking that question while audio plays and tell the renderer
when the answer changes. This package holds that live part.

HOW: clock.py defines the read-only media clock contract (plus a
simulated clock for hosts without a media element), scheduler.py the
per-frame callback schedulers and the cancellable FrameLoop, and
synchronizer.py the state machine that ties them to the estimator.

RULES:
- Exactly one writer of the active index: the synchronizer's frame loop
- A cancelled FrameLoop never runs another tick
- Nothing here blocks the caller
"""

from bionic_reader.playback.clock import MediaClock, SimulatedMediaClock
from bionic_reader.playback.scheduler import (
    AsyncioFrameScheduler,
    FrameLoop,
    FrameRequest,
    FrameScheduler,
    ManualFrameScheduler,
    ThreadFrameScheduler,
    TkFrameScheduler,
)
from bionic_reader.playback.synchronizer import PlaybackSynchronizer, SyncState

__all__ = [
    "AsyncioFrameScheduler",
    "FrameLoop",
    "FrameRequest",
    "FrameScheduler",
    "ManualFrameScheduler",
    "MediaClock",
    "PlaybackSynchronizer",
    "SimulatedMediaClock",
    "SyncState",
    "ThreadFrameScheduler",
    "TkFrameScheduler",
]
