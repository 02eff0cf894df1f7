"""Tkinter desktop reader with bionic text and a moving word highlight.

WHY: Readers without a browser setup still want to try the read-along
experience: open a text, enter the narration length, press Play, and
watch the highlight walk through the bold-lead text.

HOW: A single ReaderApp class builds a toolbar (Open, duration, Play,
Pause, Stop, dyslexia font), a read-only Text widget and a seek scale.
Playback is a SimulatedMediaClock; the PlaybackSynchronizer runs on a
TkFrameScheduler, so every tick (and every sink call) happens on the Tk
main loop. The Text widget gets a "lead" tag for the bold part of each
word and an "active" tag that the sink moves from word to word.

RULES:
- tkinter widgets are ONLY touched from the main thread
- Word ranges are recorded while rendering, keyed by word_index, so the
  sink's index maps straight to a Text range
- Opening a new file calls set_text(), which stops the current session
- Closing the window closes the synchronizer before destroying Tk
- Letter/word spacing preferences are not supported by the Text widget;
  line height maps to paragraph spacing
"""

from __future__ import annotations

import logging
import sys
import tkinter as tk
import tkinter.font as tkfont
from pathlib import Path
from tkinter import filedialog, messagebox, ttk
from typing import Dict, Optional, Tuple

from bionic_reader.cli import load_text
from bionic_reader.config import (
    SUPPORTED_TEXT_EXTENSIONS,
    load_frame_rate,
    load_lead_policy,
    load_reader_preferences,
    load_timing_policy,
)
from bionic_reader.core.bionic import split_lead
from bionic_reader.core.tokenizer import tokenize
from bionic_reader.playback.clock import SimulatedMediaClock
from bionic_reader.playback.scheduler import TkFrameScheduler
from bionic_reader.playback.synchronizer import PlaybackSynchronizer, SyncState

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE = "Bionic Reader"
_WINDOW_MIN_WIDTH = 640
_WINDOW_MIN_HEIGHT = 480
_PAD = 8
_SEEK_POLL_MS = 200
_BASE_FONT_SIZE = 14
_ACTIVE_BACKGROUND = "#fff3a3"
_DYSLEXIA_FAMILY = "OpenDyslexic"

_SAMPLE_TEXT = (
    "Open a text file, enter how long the narration lasts, and press Play. "
    "The highlight follows the estimated position of each spoken word."
)


class ReaderApp:
    """Main application window for the bionic reader.

    RULES:
    - All synchronizer callbacks arrive on the Tk main loop
    - The seek scale is refreshed by an .after() poll while playing
    """

    def __init__(self, root: tk.Tk) -> None:
        self._root = root
        self._root.title(_WINDOW_TITLE)
        self._root.minsize(_WINDOW_MIN_WIDTH, _WINDOW_MIN_HEIGHT)

        self._preferences = load_reader_preferences()
        self._lead_policy = load_lead_policy()
        self._word_ranges: Dict[int, Tuple[str, str]] = {}
        self._seek_poll_id: Optional[str] = None
        self._updating_scale = False

        self._clock = SimulatedMediaClock()
        self._sync = PlaybackSynchronizer(
            self._clock,
            TkFrameScheduler(root, fps=load_frame_rate()),
            self._on_active_word,
            policy=load_timing_policy(),
        )

        self._build_ui()
        self._set_text(_SAMPLE_TEXT)
        self._root.protocol("WM_DELETE_WINDOW", self._on_close)

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        main = ttk.Frame(self._root, padding=_PAD)
        main.pack(fill=tk.BOTH, expand=True)

        toolbar = ttk.Frame(main)
        toolbar.pack(fill=tk.X, pady=(0, _PAD))

        ttk.Button(toolbar, text="Open...", command=self._browse_file).pack(side=tk.LEFT)

        ttk.Label(toolbar, text="Duration (s):").pack(side=tk.LEFT, padx=(_PAD, 4))
        self._duration_var = tk.StringVar(value="10")
        ttk.Entry(toolbar, textvariable=self._duration_var, width=8).pack(side=tk.LEFT)

        self._play_btn = ttk.Button(toolbar, text="Play", command=self._play)
        self._play_btn.pack(side=tk.LEFT, padx=(_PAD, 0))
        ttk.Button(toolbar, text="Pause", command=self._pause).pack(side=tk.LEFT, padx=(4, 0))
        ttk.Button(toolbar, text="Stop", command=self._stop).pack(side=tk.LEFT, padx=(4, 0))

        self._dyslexia_var = tk.BooleanVar(value=self._preferences.dyslexia_font)
        ttk.Checkbutton(
            toolbar,
            text="Dyslexia font",
            variable=self._dyslexia_var,
            command=self._apply_fonts,
        ).pack(side=tk.RIGHT)

        text_frame = ttk.Frame(main)
        text_frame.pack(fill=tk.BOTH, expand=True)
        scrollbar = ttk.Scrollbar(text_frame, orient=tk.VERTICAL)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)
        self._text = tk.Text(
            text_frame,
            wrap=tk.WORD,
            padx=_PAD,
            pady=_PAD,
            yscrollcommand=scrollbar.set,
        )
        self._text.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scrollbar.configure(command=self._text.yview)

        self._position_var = tk.DoubleVar(value=0.0)
        self._scale = ttk.Scale(
            main,
            from_=0.0,
            to=1.0,
            variable=self._position_var,
            command=self._on_seek,
        )
        self._scale.pack(fill=tk.X, pady=(_PAD, 0))

        self._status_var = tk.StringVar(value="Ready")
        ttk.Label(main, textvariable=self._status_var, foreground="gray").pack(
            fill=tk.X, pady=(4, 0)
        )

        self._apply_fonts()

    def _apply_fonts(self) -> None:
        """(Re)configure the base, lead and active fonts and tags."""
        if self._dyslexia_var.get():
            family = _DYSLEXIA_FAMILY
        else:
            family = tkfont.nametofont("TkTextFont").actual("family")
        base = tkfont.Font(family=family, size=_BASE_FONT_SIZE)
        bold = tkfont.Font(family=family, size=_BASE_FONT_SIZE, weight="bold")
        line_gap = int(_BASE_FONT_SIZE * max(0.0, self._preferences.line_height - 1.0))

        self._text.configure(font=base, spacing2=line_gap, spacing3=line_gap)
        self._text.tag_configure("lead", font=bold)
        self._text.tag_configure("active", background=_ACTIVE_BACKGROUND)
        # Tk font objects must stay referenced while the widget uses them.
        self._fonts = (base, bold)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _set_text(self, text: str) -> None:
        """Render bionic text into the Text widget and record word ranges."""
        self._sync.set_text(text)
        self._word_ranges = {}

        self._text.configure(state=tk.NORMAL)
        self._text.delete("1.0", tk.END)
        offset = 0
        for token in tokenize(text):
            if not token.is_countable:
                self._text.insert(tk.END, token.raw)
                offset += len(token.raw)
                continue

            lead, rest = split_lead(token.core, self._lead_policy)
            self._text.insert(tk.END, token.leading_punct)
            core_start = offset + len(token.leading_punct)
            self._text.insert(tk.END, lead, ("lead",))
            self._text.insert(tk.END, rest + token.trailing_punct)
            self._word_ranges[token.word_index] = (
                "1.0 + {} chars".format(core_start),
                "1.0 + {} chars".format(core_start + len(token.core)),
            )
            offset += len(token.raw)
        self._text.configure(state=tk.DISABLED)

        self._status_var.set("{} words".format(len(self._word_ranges)))

    def _browse_file(self) -> None:
        patterns = " ".join("*{}".format(ext) for ext in sorted(SUPPORTED_TEXT_EXTENSIONS))
        path = filedialog.askopenfilename(
            title="Open text",
            filetypes=[("Text files", patterns), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            text = load_text(Path(path))
        except (ValueError, FileNotFoundError, UnicodeDecodeError) as e:
            messagebox.showerror("Cannot open file", str(e))
            return
        self._stop()
        self._set_text(text)
        self._root.title("{} - {}".format(_WINDOW_TITLE, Path(path).name))

    # ------------------------------------------------------------------
    # Playback Control
    # ------------------------------------------------------------------

    def _read_duration_ms(self) -> Optional[float]:
        try:
            seconds = float(self._duration_var.get())
        except ValueError:
            return None
        return seconds * 1000.0 if seconds > 0 else None

    def _play(self) -> None:
        duration_ms = self._read_duration_ms()
        if duration_ms is None:
            messagebox.showwarning("No Duration", "Please enter the narration length in seconds.")
            return

        self._clock.play()
        self._sync.start()
        if self._clock.duration_ms != duration_ms:
            self._clock.load(duration_ms)
            self._scale.configure(to=duration_ms / 1000.0)
            self._sync.notify_duration_changed()
        self._status_var.set("Playing")
        self._poll_position()

    def _pause(self) -> None:
        self._clock.pause()
        self._sync.stop()
        self._status_var.set("Paused")

    def _stop(self) -> None:
        self._clock.pause()
        self._clock.seek(0)
        self._sync.stop()
        self._set_scale(0.0)
        self._status_var.set("Stopped")

    def _on_seek(self, value: str) -> None:
        if self._updating_scale:
            return
        self._clock.seek(float(value) * 1000.0)

    def _set_scale(self, seconds: float) -> None:
        self._updating_scale = True
        try:
            self._position_var.set(seconds)
        finally:
            self._updating_scale = False

    def _poll_position(self) -> None:
        """Mirror the clock position on the seek scale while playing."""
        if self._seek_poll_id is not None:
            self._root.after_cancel(self._seek_poll_id)
            self._seek_poll_id = None

        self._set_scale(self._clock.current_time_ms / 1000.0)
        if self._sync.state == SyncState.STOPPED and not self._clock.is_playing:
            if self._clock.ended:
                self._status_var.set("Finished")
            return
        self._seek_poll_id = self._root.after(_SEEK_POLL_MS, self._poll_position)

    # ------------------------------------------------------------------
    # Synchronizer sink
    # ------------------------------------------------------------------

    def _on_active_word(self, index: Optional[int]) -> None:
        self._text.tag_remove("active", "1.0", tk.END)
        if index is None:
            return
        word_range = self._word_ranges.get(index)
        if word_range is None:
            return
        start, end = word_range
        self._text.tag_add("active", start, end)
        self._text.see(start)

    def _on_close(self) -> None:
        self._sync.close()
        if self._seek_poll_id is not None:
            self._root.after_cancel(self._seek_poll_id)
        self._root.destroy()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _ensure_foreground_app() -> None:
    """Register the process as a macOS GUI application before Tk starts.

    Tk started from a terminal or a .command file can abort in TkpInit
    without foreground app status. PyObjC's NSApplication gives it that
    status; without PyObjC the reader starts anyway.
    """
    if sys.platform != "darwin":
        return
    try:
        import AppKit  # PyObjC, bundled with the macOS system Python
    except ImportError:
        logger.debug("PyObjC not available; starting Tk without NSApplication")
        return
    AppKit.NSApplication.sharedApplication()


def main() -> None:
    """Launch the Tkinter reader.

    RULES:
    - This function blocks until the window is closed
    - Must be called from the main thread
    """
    _ensure_foreground_app()
    root = tk.Tk()
    ReaderApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
