"""Tests for frame schedulers and the cancellable FrameLoop.

WHY: The frame loop is where read-along highlighters usually leak: a
self-rescheduling callback that outlives its session keeps writing the
highlight after the text changed or the view closed. These tests pin
down that a cancelled loop never ticks again, whichever host drives it.

HOW: ManualFrameScheduler gives exact control over frames. The asyncio
scheduler runs on a real event loop for a few frames; the Tk scheduler
is exercised against a MagicMock widget. The thread scheduler runs
briefly on a real worker thread with short waits.

RULES:
- No tick after cancel(), even when a frame was already queued
- cancel() is idempotent and may be called from inside a tick
"""

import asyncio
import threading
import time
from unittest.mock import MagicMock

import pytest

from bionic_reader.playback.scheduler import (
    AsyncioFrameScheduler,
    FrameLoop,
    FrameRequest,
    ManualFrameScheduler,
    ThreadFrameScheduler,
    TkFrameScheduler,
)


class TestFrameRequest:
    """A request runs at most once and never after cancel."""

    def test_run_invokes_callback_once(self):
        callback = MagicMock()
        request = FrameRequest(callback)
        request.run()
        request.run()
        callback.assert_called_once_with()
        assert request.done

    def test_cancelled_request_does_not_run(self):
        callback = MagicMock()
        request = FrameRequest(callback)
        request.cancel()
        request.run()
        callback.assert_not_called()
        assert request.cancelled

    def test_cancel_hook_called_once(self):
        request = FrameRequest(MagicMock())
        request.on_cancel = MagicMock()
        request.cancel()
        request.cancel()
        request.on_cancel.assert_called_once_with()


class TestManualFrameScheduler:
    """Frames are emitted only by advance()."""

    def test_requests_wait_for_advance(self, scheduler):
        callback = MagicMock()
        scheduler.request_frame(callback)
        callback.assert_not_called()
        assert scheduler.pending_count == 1
        scheduler.advance()
        callback.assert_called_once_with()
        assert scheduler.pending_count == 0
        assert scheduler.frame_count == 1

    def test_request_during_frame_runs_next_frame(self, scheduler):
        calls = []

        def first():
            calls.append("first")
            scheduler.request_frame(lambda: calls.append("second"))

        scheduler.request_frame(first)
        scheduler.advance()
        assert calls == ["first"]
        scheduler.advance()
        assert calls == ["first", "second"]


class TestFrameLoop:
    """The loop ticks once per frame until cancelled."""

    def test_ticks_once_per_frame(self, scheduler):
        tick = MagicMock()
        loop = FrameLoop(scheduler, tick)
        loop.start()
        scheduler.advance(5)
        assert tick.call_count == 5
        assert loop.tick_count == 5
        assert loop.running

    def test_no_tick_before_first_frame(self, scheduler):
        tick = MagicMock()
        FrameLoop(scheduler, tick).start()
        tick.assert_not_called()

    def test_cancel_stops_ticks(self, scheduler):
        tick = MagicMock()
        loop = FrameLoop(scheduler, tick)
        loop.start()
        scheduler.advance(2)
        loop.cancel()
        scheduler.advance(5)
        assert tick.call_count == 2
        assert not loop.running
        assert loop.cancelled
        assert scheduler.pending_count == 0

    def test_cancel_is_idempotent(self, scheduler):
        loop = FrameLoop(scheduler, MagicMock())
        loop.start()
        loop.cancel()
        loop.cancel()
        assert loop.cancelled

    def test_cancel_before_start(self, scheduler):
        tick = MagicMock()
        loop = FrameLoop(scheduler, tick)
        loop.cancel()
        loop.start()
        scheduler.advance(3)
        tick.assert_not_called()
        assert not loop.running

    def test_start_twice_requests_one_frame(self, scheduler):
        loop = FrameLoop(scheduler, MagicMock())
        loop.start()
        loop.start()
        assert scheduler.pending_count == 1

    def test_queued_frame_after_cancel_does_not_tick(self):
        """A host that already dequeued the frame still gets no tick."""
        captured = []

        class CapturingScheduler(ManualFrameScheduler):
            def request_frame(self, callback):
                captured.append(callback)
                return super().request_frame(callback)

        scheduler = CapturingScheduler()
        tick = MagicMock()
        loop = FrameLoop(scheduler, tick)
        loop.start()
        loop.cancel()
        # Simulate a host invoking the raw callback despite cancellation.
        captured[0]()
        tick.assert_not_called()

    def test_cancel_from_inside_tick(self, scheduler):
        loop = None
        ticks = []

        def tick():
            ticks.append(1)
            loop.cancel()

        loop = FrameLoop(scheduler, tick)
        loop.start()
        scheduler.advance(3)
        assert len(ticks) == 1
        assert scheduler.pending_count == 0

    def test_tick_exception_cancels_and_propagates(self, scheduler):
        tick = MagicMock(side_effect=RuntimeError("sink failed"))
        loop = FrameLoop(scheduler, tick)
        loop.start()
        with pytest.raises(RuntimeError, match="sink failed"):
            scheduler.advance()
        assert loop.cancelled
        assert scheduler.pending_count == 0
        scheduler.advance(2)
        assert tick.call_count == 1


class TestThreadFrameScheduler:
    """Frames arrive on a worker thread until the scheduler closes."""

    def test_frames_run_on_worker_thread(self):
        ran = threading.Event()
        thread_names = []

        def callback():
            thread_names.append(threading.current_thread().name)
            ran.set()

        with ThreadFrameScheduler(fps=200) as scheduler:
            scheduler.request_frame(callback)
            assert ran.wait(2.0)
        assert thread_names == ["bionic-frame-scheduler"]

    def test_loop_stops_after_cancel(self):
        ticked = threading.Event()
        tick = MagicMock(side_effect=lambda: ticked.set())
        with ThreadFrameScheduler(fps=200) as scheduler:
            loop = FrameLoop(scheduler, tick)
            loop.start()
            assert ticked.wait(2.0)
            loop.cancel()
            count = tick.call_count
            time.sleep(0.05)
            assert tick.call_count == count

    def test_request_after_close_raises(self):
        scheduler = ThreadFrameScheduler(fps=100)
        scheduler.close()
        with pytest.raises(RuntimeError):
            scheduler.request_frame(MagicMock())

    def test_invalid_fps(self):
        with pytest.raises(ValueError):
            ThreadFrameScheduler(fps=0)


class TestAsyncioFrameScheduler:
    """Frames are call_later timers on the event loop."""

    def test_loop_ticks_and_cancels(self):
        async def scenario():
            scheduler = AsyncioFrameScheduler(fps=1000)
            tick = MagicMock()
            loop = FrameLoop(scheduler, tick)
            loop.start()
            while tick.call_count < 3:
                await asyncio.sleep(0.001)
            loop.cancel()
            count = tick.call_count
            await asyncio.sleep(0.02)
            return count, tick.call_count

        before, after = asyncio.run(scenario())
        assert before == after
        assert before >= 3

    def test_cancel_releases_timer(self):
        event_loop = MagicMock()
        timer = MagicMock()
        event_loop.call_later.return_value = timer
        scheduler = AsyncioFrameScheduler(loop=event_loop, fps=50)

        request = scheduler.request_frame(MagicMock())
        delay, callback = event_loop.call_later.call_args.args
        assert delay == pytest.approx(0.02)
        request.cancel()
        timer.cancel.assert_called_once_with()


class TestTkFrameScheduler:
    """Frames are widget.after callbacks; cancel uses after_cancel."""

    def test_after_and_after_cancel(self):
        widget = MagicMock()
        widget.after.return_value = "after#1"
        scheduler = TkFrameScheduler(widget, fps=60)

        request = scheduler.request_frame(MagicMock())
        interval, callback = widget.after.call_args.args
        assert interval == 17
        request.cancel()
        widget.after_cancel.assert_called_once_with("after#1")

    def test_frame_runs_callback(self):
        widget = MagicMock()
        scheduler = TkFrameScheduler(widget, fps=30)
        tick = MagicMock()
        FrameLoop(scheduler, tick).start()

        # Fire the pending after() callback like Tk's main loop would.
        widget.after.call_args.args[1]()
        tick.assert_called_once_with()
        assert widget.after.call_count == 2
