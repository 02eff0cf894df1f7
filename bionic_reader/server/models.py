"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each endpoint pair (request + response) has its own model. All
models include Field descriptions for rich OpenAPI docs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Durations and times are float milliseconds
- duration_ms may be null or negative; the API treats that as unknown
  (zero-length windows) rather than rejecting the request
- Response models never expose internal implementation details
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from bionic_reader.config import DEFAULT_LINE_HEIGHT, ReaderPreferences
from bionic_reader.core.ir import WordTiming


# ---------------------------------------------------------------------------
# Shared models
# ---------------------------------------------------------------------------


class WordTimingModel(BaseModel):
    """One estimated word window."""

    index: int = Field(description="0-based index among countable words.")
    text: str = Field(description="The core word.")
    start_ms: float = Field(description="Window start (inclusive), milliseconds.")
    end_ms: float = Field(description="Window end (exclusive), milliseconds.")

    @classmethod
    def from_timing(cls, timing: WordTiming) -> "WordTimingModel":
        return cls(
            index=timing.index,
            text=timing.text,
            start_ms=timing.start_ms,
            end_ms=timing.end_ms,
        )


class PreferencesModel(BaseModel):
    """Reader display preferences applied by renderers.

    WHY: Preferences are stored by the client; it sends them with each
    render request instead of the server keeping any user state.
    """

    dyslexia_font: bool = Field(default=False, description="Use a dyslexia-friendly font stack.")
    letter_spacing_em: float = Field(default=0.0, ge=0.0, description="Extra letter spacing in em.")
    word_spacing_em: float = Field(default=0.0, ge=0.0, description="Extra word spacing in em.")
    line_height: float = Field(
        default=DEFAULT_LINE_HEIGHT,
        gt=0.0,
        description="Unitless CSS line height.",
    )

    def to_preferences(self) -> ReaderPreferences:
        return ReaderPreferences(
            dyslexia_font=self.dyslexia_font,
            letter_spacing_em=self.letter_spacing_em,
            word_spacing_em=self.word_spacing_em,
            line_height=self.line_height,
        )


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class TimingRequest(BaseModel):
    """Text and total narration duration to split into word windows."""

    text: str = Field(description="Text being narrated.")
    duration_ms: Optional[float] = Field(
        default=None,
        description="Total audio duration in milliseconds; null while unknown.",
    )
    min_char_weight: Optional[int] = Field(
        default=None,
        ge=1,
        description="Override the word weight floor (defaults to server config).",
    )

    model_config = {"json_schema_extra": {
        "examples": [{"text": "Hi there", "duration_ms": 2000}]
    }}


class ResolveRequest(TimingRequest):
    """A timing request plus the playback position to resolve."""

    current_time_ms: float = Field(description="Current playback position in milliseconds.")

    model_config = {"json_schema_extra": {
        "examples": [{"text": "Hi there", "duration_ms": 2000, "current_time_ms": 600}]
    }}


class RenderRequest(BaseModel):
    """Text to render in bionic style."""

    text: str = Field(description="Text to render.")
    format: str = Field(default="html", description="Formatter key (see GET /formats).")
    active_index: Optional[int] = Field(
        default=None,
        ge=0,
        description="Word index to highlight, or null for none.",
    )
    preferences: PreferencesModel = Field(
        default_factory=PreferencesModel,
        description="Display preferences.",
    )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TimingResponse(BaseModel):
    """Estimated windows for every countable word."""

    word_count: int = Field(description="Number of countable words.")
    duration_ms: float = Field(description="Duration used for estimation (0 when unknown).")
    duration_known: bool = Field(description="False when the supplied duration was unusable.")
    words: List[WordTimingModel] = Field(description="Contiguous word windows in order.")


class ResolveResponse(BaseModel):
    """The active word at the requested time, if any."""

    index: Optional[int] = Field(default=None, description="Active word index, or null.")
    word: Optional[WordTimingModel] = Field(default=None, description="Active word window, or null.")


class RenderResponse(BaseModel):
    """Rendered bionic text."""

    format: str = Field(description="Formatter key used.")
    media_type: str = Field(description="MIME type of the content.")
    word_count: int = Field(description="Number of countable words rendered.")
    content: str = Field(description="Rendered output.")


class FormatInfo(BaseModel):
    """Description of an available output format."""

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '-bionic.html').")
    media_type: str = Field(description="MIME type of the rendered content.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
