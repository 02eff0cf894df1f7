"""Per-frame callback schedulers and the cancellable FrameLoop.

WHY: The highlight must follow the audio at display cadence, which
means re-checking the clock once per frame for as long as playback
lasts. Self-rescheduling callbacks are the classic source of orphaned
ticks when a session is torn down, so the loop and its cancellation
live in one small, well-tested place.

HOW: A FrameScheduler turns "call me on the next frame" into a
FrameRequest handle. Four schedulers cover the hosts we run in:
  ManualFrameScheduler  — host calls advance(); deterministic, for tests
                          and external render loops
  ThreadFrameScheduler  — one daemon thread emitting frames at ``fps``
  AsyncioFrameScheduler — loop.call_later on an asyncio event loop
  TkFrameScheduler      — widget.after / after_cancel on the Tk main loop
FrameLoop runs a tick on every frame and requests the next frame after
each tick, until cancelled.

RULES:
- FrameRequest.cancel() and FrameLoop.cancel() are idempotent
- A cancelled FrameRequest never invokes its callback
- FrameLoop checks its cancelled flag under a re-entrant lock before
  every tick, so no tick starts after cancel() returns even if the host
  already queued the frame; cancel() from inside a tick is allowed
- Ticks of one FrameLoop never overlap
- If a tick raises, the loop is cancelled and the exception propagates
"""

from __future__ import annotations

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from bionic_reader.config import DEFAULT_FRAME_RATE

logger = logging.getLogger(__name__)


class FrameRequest:
    """Handle for one pending frame callback.

    The scheduler calls run() when the frame arrives; cancel() makes
    run() a no-op and releases any host-side timer via ``on_cancel``.
    """

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._cancelled = False
        self._done = False
        self.on_cancel: Optional[Callable[[], None]] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    def cancel(self) -> None:
        if self._cancelled or self._done:
            return
        self._cancelled = True
        if self.on_cancel is not None:
            self.on_cancel()

    def run(self) -> None:
        if self._cancelled or self._done:
            return
        self._done = True
        self._callback()


class FrameScheduler(ABC):
    """Abstract source of "next frame" callbacks.

    To add a new host:
    1. Subclass FrameScheduler
    2. Implement request_frame() so the request's run() is invoked once
       on the host's next frame
    3. Set request.on_cancel when the host timer can be released early
    """

    @abstractmethod
    def request_frame(self, callback: Callable[[], None]) -> FrameRequest:
        """Schedule callback for the next frame and return its handle."""


class ManualFrameScheduler(FrameScheduler):
    """Scheduler whose frames are emitted explicitly by the host.

    WHY: Tests (and hosts with their own render loop) need full control
    over when frames happen.

    RULES:
    - advance(n) emits n frames; each frame runs only the requests that
      were pending when that frame started
    - Requests made during a frame run on the following frame
    """

    def __init__(self) -> None:
        self._pending: List[FrameRequest] = []
        self.frame_count = 0

    @property
    def pending_count(self) -> int:
        return sum(1 for r in self._pending if not r.cancelled)

    def request_frame(self, callback: Callable[[], None]) -> FrameRequest:
        request = FrameRequest(callback)
        self._pending.append(request)
        return request

    def advance(self, frames: int = 1) -> None:
        for _ in range(frames):
            batch, self._pending = self._pending, []
            self.frame_count += 1
            for request in batch:
                request.run()


class ThreadFrameScheduler(FrameScheduler):
    """Emit frames from a background daemon thread at a fixed rate.

    WHY: The CLI has no event loop of its own; a single worker thread
    gives the synchronizer a steady frame signal without blocking the
    main thread.

    HOW: Requests are queued under a lock. The worker sleeps one frame
    interval (on a threading.Event so close() wakes it), snapshots the
    queue, and runs the snapshot outside the lock.

    RULES:
    - All frame callbacks run on the worker thread, one at a time
    - close() stops the worker; pending requests are dropped
    - An exception from a callback is logged and does not kill the worker
    """

    def __init__(self, fps: float = DEFAULT_FRAME_RATE) -> None:
        if fps <= 0:
            raise ValueError("fps must be positive, got {}".format(fps))
        self._interval_s = 1.0 / fps
        self._pending: List[FrameRequest] = []
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def request_frame(self, callback: Callable[[], None]) -> FrameRequest:
        request = FrameRequest(callback)
        with self._lock:
            if self._stop_event.is_set():
                raise RuntimeError("ThreadFrameScheduler is closed")
            self._pending.append(request)
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._run,
                    name="bionic-frame-scheduler",
                    daemon=True,
                )
                self._thread.start()
        return request

    def close(self, timeout: Optional[float] = 1.0) -> None:
        self._stop_event.set()
        with self._lock:
            thread = self._thread
            for request in self._pending:
                request.cancel()
            self._pending = []
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def __enter__(self) -> "ThreadFrameScheduler":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval_s):
            with self._lock:
                batch, self._pending = self._pending, []
            for request in batch:
                if self._stop_event.is_set():
                    return
                try:
                    request.run()
                except Exception:
                    logger.exception("Frame callback failed")


class AsyncioFrameScheduler(FrameScheduler):
    """Schedule frames with ``loop.call_later`` on an asyncio event loop.

    RULES:
    - When no loop is given, the running loop is used at request time
    - Cancelling a request cancels its TimerHandle
    """

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        fps: float = DEFAULT_FRAME_RATE,
    ) -> None:
        if fps <= 0:
            raise ValueError("fps must be positive, got {}".format(fps))
        self._loop = loop
        self._interval_s = 1.0 / fps

    def request_frame(self, callback: Callable[[], None]) -> FrameRequest:
        loop = self._loop or asyncio.get_running_loop()
        request = FrameRequest(callback)
        timer = loop.call_later(self._interval_s, request.run)
        request.on_cancel = timer.cancel
        return request


class TkFrameScheduler(FrameScheduler):
    """Schedule frames with ``widget.after`` on the Tk main loop.

    RULES:
    - Callbacks run on the Tk main thread, so they may touch widgets
    - Cancelling a request calls ``widget.after_cancel``
    """

    def __init__(self, widget: Any, fps: float = DEFAULT_FRAME_RATE) -> None:
        if fps <= 0:
            raise ValueError("fps must be positive, got {}".format(fps))
        self._widget = widget
        self._interval_ms = max(1, int(round(1000.0 / fps)))

    def request_frame(self, callback: Callable[[], None]) -> FrameRequest:
        request = FrameRequest(callback)
        after_id = self._widget.after(self._interval_ms, request.run)
        request.on_cancel = lambda: self._widget.after_cancel(after_id)
        return request


class FrameLoop:
    """Run ``tick`` once per frame until cancelled.

    WHY: The synchronizer needs "keep polling every frame" with a hard
    guarantee that teardown stops it. This class is the only place that
    re-requests frames, and it checks cancellation before every tick.

    HOW: start() requests the first frame. Each frame callback takes the
    lock, returns immediately if cancelled, runs the tick, and requests
    the next frame unless the tick cancelled the loop. cancel() takes the
    same lock, so it waits for an in-flight tick on another thread and
    then cancels the pending request.

    RULES:
    - start() on a started or cancelled loop is a no-op
    - cancel() is idempotent and valid before start()
    - A loop cannot be restarted; create a new one per session
    """

    def __init__(self, scheduler: FrameScheduler, tick: Callable[[], None]) -> None:
        self._scheduler = scheduler
        self._tick = tick
        self._lock = threading.RLock()
        self._started = False
        self._cancelled = False
        self._pending: Optional[FrameRequest] = None
        self.tick_count = 0

    @property
    def running(self) -> bool:
        return self._started and not self._cancelled

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def start(self) -> None:
        with self._lock:
            if self._started or self._cancelled:
                return
            self._started = True
            self._pending = self._scheduler.request_frame(self._on_frame)

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            pending, self._pending = self._pending, None
            if pending is not None:
                pending.cancel()

    def _on_frame(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._pending = None
            self.tick_count += 1
            try:
                self._tick()
            except Exception:
                self.cancel()
                raise
            if not self._cancelled:
                self._pending = self._scheduler.request_frame(self._on_frame)
