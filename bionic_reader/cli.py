"""Command-line interface for the bionic reader.

WHY: Users need a quick way to turn a text file into bionic markup, to
inspect how a narration's duration would be split across words, and to
watch the highlight follow along without a browser.

HOW: Uses argparse to accept an input text file (or ``-`` for stdin),
an optional narration duration, output format selection and output
directory. Renders each selected formatter and saves the files next to
the source (or to --output-dir). ``--timings`` prints the estimated
windows; ``--follow`` simulates playback with a SimulatedMediaClock and
a ThreadFrameScheduler and prints each word as the synchronizer reports
it. Status messages go to stderr.

RULES:
- Positional argument: input text file path, or ``-`` for stdin
- Validates the extension against SUPPORTED_TEXT_EXTENSIONS
- --formats: comma-separated formatter keys (default: all registered)
- --timings / --follow require --duration (seconds, > 0)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-bionic-2.html)
- Stdin input without --output-dir prints the rendered output to stdout
- Status output goes to stderr (not stdout)
- Errors print "Error: ..." to stderr and exit with status 1
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from bionic_reader.config import (
    LOG_LEVEL,
    SUPPORTED_TEXT_EXTENSIONS,
    TimingPolicy,
    load_frame_rate,
    load_lead_policy,
    load_reader_preferences,
    load_timing_policy,
)
from bionic_reader.core.bionic import split_lead
from bionic_reader.core.ir import WordTiming
from bionic_reader.core.timing import estimate_word_timings
from bionic_reader.formatters import FORMATTERS
from bionic_reader.formatters.ansi_terminal import bold_word
from bionic_reader.formatters.base import FormatterOutput, ReadingDocument
from bionic_reader.playback.clock import SimulatedMediaClock
from bionic_reader.playback.scheduler import ThreadFrameScheduler
from bionic_reader.playback.synchronizer import PlaybackSynchronizer

STDIN_NAME = "-"


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def load_text(path: Path) -> str:
    """Read a UTF-8 text file for rendering.

    RULES:
    - Raises FileNotFoundError when the file does not exist
    - Raises ValueError for unsupported extensions
    """
    if not path.is_file():
        raise FileNotFoundError("File not found: {}".format(path))
    ext = path.suffix.lower()
    if ext not in SUPPORTED_TEXT_EXTENSIONS:
        raise ValueError(
            "Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_TEXT_EXTENSIONS))
            )
        )
    return path.read_text(encoding="utf-8")


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. chapter1-bionic.html)
    - Conflict: insert a counter before the first dot of the suffix
      (e.g. chapter1-bionic-2.html, chapter1-bionic-2.ansi.txt)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.find(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    """Write one formatter output as UTF-8 and return its path."""
    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def _parse_formats(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(FORMATTERS.keys())
    keys = [f.strip() for f in raw.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            raise ValueError(
                "Unknown format '{}'. Available formats: {}".format(
                    key, ", ".join(sorted(FORMATTERS.keys()))
                )
            )
    return keys


def _print_timings(timings: Tuple[WordTiming, ...]) -> None:
    """Print the estimated window table to stdout."""
    print("{:>6}  {:>10}  {:>10}  {}".format("index", "start_ms", "end_ms", "word"))
    for w in timings:
        print("{:>6}  {:>10.1f}  {:>10.1f}  {}".format(w.index, w.start_ms, w.end_ms, w.text))


def _follow(
    text: str,
    duration_ms: float,
    rate: float,
    policy: TimingPolicy,
) -> None:
    """Simulate playback and print each word as it becomes active.

    WHY: Lets users feel the estimated pacing without a browser or audio.

    HOW: A SimulatedMediaClock plays at ``rate``; the synchronizer runs
    on a ThreadFrameScheduler. The clock is started before its duration
    is "loaded", so the session passes through waiting_for_duration just
    like a real media element. The main thread waits until the frame
    loop stops (end of playback) or Ctrl+C.
    """
    use_ansi = sys.stdout.isatty()
    lead_policy = load_lead_policy()
    clock = SimulatedMediaClock(rate=rate)

    with ThreadFrameScheduler(fps=load_frame_rate()) as scheduler:
        sync: Optional[PlaybackSynchronizer] = None

        def on_word(index: Optional[int]) -> None:
            if index is None or sync is None:
                return
            word = sync.timings[index]
            lead, rest = split_lead(word.text, lead_policy)
            shown = bold_word(lead, rest) if use_ansi else word.text
            print("[{:>4}/{}] {:>8.2f}s  {}".format(
                index + 1, len(sync.timings), word.start_ms / 1000.0, shown,
            ), flush=True)

        sync = PlaybackSynchronizer(clock, scheduler, on_word, text=text, policy=policy)
        clock.play()
        sync.start()
        clock.load(duration_ms)
        sync.notify_duration_changed()

        try:
            while sync.loop_running:
                time.sleep(0.05)
        finally:
            clock.pause()
            sync.close()


def _run(args: argparse.Namespace) -> None:
    """Execute the CLI actions for parsed arguments."""
    format_keys = [] if args.no_files else _parse_formats(args.formats)
    policy = load_timing_policy()

    duration_ms: Optional[float] = None
    if args.duration is not None:
        if not args.duration > 0:
            raise ValueError("--duration must be a positive number of seconds")
        duration_ms = args.duration * 1000.0
    if (args.timings or args.follow) and duration_ms is None:
        raise ValueError("--timings and --follow require --duration")

    if args.input_file == STDIN_NAME:
        text = sys.stdin.read()
        stem = "stdin"
        source_dir: Optional[Path] = None
    else:
        input_path = Path(args.input_file).resolve()
        text = load_text(input_path)
        stem = input_path.stem
        source_dir = input_path.parent

    if args.output_dir:
        output_dir: Optional[Path] = Path(args.output_dir).resolve()
        if not output_dir.is_dir():
            raise ValueError("Output directory does not exist: {}".format(output_dir))
    else:
        output_dir = source_dir

    document = ReadingDocument.from_text(
        text,
        preferences=load_reader_preferences(),
        lead_policy=load_lead_policy(),
    )
    _status("Loaded {} words".format(document.word_count))

    if format_keys:
        saved: List[Path] = []
        for key in format_keys:
            formatter = FORMATTERS[key]()
            for output in formatter.format(document):
                if output_dir is None:
                    sys.stdout.write(output.content)
                    continue
                path = _save_output(output, stem, output_dir)
                saved.append(path)
                _status("  Saved: {}".format(path.name))
        if saved:
            _status("Done! Saved {} file(s) to {}".format(len(saved), output_dir))

    if args.timings:
        _print_timings(estimate_word_timings(text, duration_ms, policy))

    if args.follow:
        _status("Following {:.2f}s of narration at {:g}x...".format(args.duration, args.rate))
        _follow(text, duration_ms, args.rate, policy)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Separating parser construction from main() makes the CLI testable.
    """
    parser = argparse.ArgumentParser(
        prog="bionic_reader",
        description="Render text in bionic (bold-lead) style and estimate "
                    "read-along word timings from a narration's duration.",
    )

    parser.add_argument(
        "input_file",
        help="Path to a text file ({}), or '-' for stdin.".format(
            ", ".join(sorted(SUPPORTED_TEXT_EXTENSIONS))
        ),
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Narration duration in seconds (needed for --timings/--follow).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--no-files",
        action="store_true",
        help="Do not render any output files.",
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    parser.add_argument(
        "--timings",
        action="store_true",
        help="Print the estimated per-word windows.",
    )

    parser.add_argument(
        "--follow",
        action="store_true",
        help="Simulate playback and print each word as it becomes active.",
    )

    parser.add_argument(
        "--rate",
        type=float,
        default=1.0,
        help="Playback rate for --follow (default: %(default)s).",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        _run(args)
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (ValueError, FileNotFoundError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
