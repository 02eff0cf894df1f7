"""Renderer registry — pluggable bionic output formats.

WHY: The CLI, GUI and HTTP API need a single lookup to find a renderer
by name. A central dict makes adding a format trivial: create the
formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["html"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and API bodies)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bionic_reader.formatters.ansi_terminal import AnsiFormatter
from bionic_reader.formatters.html_reader import HtmlFormatter
from bionic_reader.formatters.markdown import MarkdownFormatter

if TYPE_CHECKING:
    from bionic_reader.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "html": HtmlFormatter,
    "markdown": MarkdownFormatter,
    "ansi": AnsiFormatter,
}
