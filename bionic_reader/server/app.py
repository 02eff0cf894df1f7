"""FastAPI application exposing timing estimation, resolution and rendering.

WHY: Browser readers (and other clients) hold the audio element and the
playback clock, but should share one tokenizer and estimator so word
indices agree everywhere. An HTTP API serves the timing windows and the
bionic markup; the client then resolves the active word locally each
frame, or calls /resolve when it cannot.

HOW: A single FastAPI app exposes five endpoints grouped by tags. All
endpoints are stateless: nothing about a reader or a session is stored
server-side, and computed timings are returned, never persisted.

RULES:
- All endpoints have OpenAPI descriptions on every parameter and response
- Error responses use a consistent ErrorResponse schema
- Unusable durations (null, negative) are "unknown", not errors
- Unknown formatter keys are rejected with 400
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException

from bionic_reader import __version__
from bionic_reader.config import (
    LOG_LEVEL,
    SERVER_HOST,
    SERVER_PORT,
    TimingPolicy,
    load_lead_policy,
    load_timing_policy,
)
from bionic_reader.core.timing import (
    estimate_word_timings,
    normalize_duration,
    resolve_active_word,
)
from bionic_reader.core.tokenizer import tokenize
from bionic_reader.formatters import FORMATTERS
from bionic_reader.formatters.base import ReadingDocument
from bionic_reader.server.models import (
    ErrorResponse,
    FormatInfo,
    HealthResponse,
    RenderRequest,
    RenderResponse,
    ResolveRequest,
    ResolveResponse,
    TimingRequest,
    TimingResponse,
    WordTimingModel,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Bionic Reader API",
    description=(
        "Estimate per-word read-along timings from a narration's total "
        "duration, resolve the active word at a playback position, and "
        "render text in bionic (bold-lead) style."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _policy_for(min_char_weight: Optional[int]) -> TimingPolicy:
    if min_char_weight is None:
        return load_timing_policy()
    return TimingPolicy(min_char_weight=min_char_weight)


# ---------------------------------------------------------------------------
# Endpoints: Timings
# ---------------------------------------------------------------------------


@app.post(
    "/timings",
    response_model=TimingResponse,
    tags=["timings"],
    summary="Estimate word timings",
    description=(
        "Split the total duration across the countable words of the text, "
        "proportionally to word length. Windows are contiguous, start at 0 "
        "and end exactly at the duration. An unknown duration yields "
        "zero-length windows."
    ),
)
async def create_timings(request: TimingRequest) -> TimingResponse:
    duration = normalize_duration(request.duration_ms)
    timings = estimate_word_timings(
        request.text,
        duration or 0.0,
        _policy_for(request.min_char_weight),
    )
    logger.info("Estimated %d word windows over %.1f ms", len(timings), duration or 0.0)
    return TimingResponse(
        word_count=len(timings),
        duration_ms=duration or 0.0,
        duration_known=bool(duration),
        words=[WordTimingModel.from_timing(t) for t in timings],
    )


@app.post(
    "/resolve",
    response_model=ResolveResponse,
    tags=["timings"],
    summary="Resolve the active word",
    description=(
        "Estimate the windows for the text and duration, then return the "
        "word whose half-open window contains current_time_ms. Times before "
        "0 or at/after the end resolve to null."
    ),
)
async def resolve_word(request: ResolveRequest) -> ResolveResponse:
    duration = normalize_duration(request.duration_ms)
    timings = estimate_word_timings(
        request.text,
        duration or 0.0,
        _policy_for(request.min_char_weight),
    )
    active = resolve_active_word(timings, request.current_time_ms)
    if active is None:
        return ResolveResponse()
    return ResolveResponse(index=active.index, word=WordTimingModel.from_timing(active))


# ---------------------------------------------------------------------------
# Endpoints: Rendering
# ---------------------------------------------------------------------------


@app.post(
    "/render",
    response_model=RenderResponse,
    tags=["render"],
    summary="Render bionic text",
    description=(
        "Render the text with bolded word leads in the requested format, "
        "optionally highlighting one word."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Unknown output format"},
    },
)
async def render_text(request: RenderRequest) -> RenderResponse:
    formatter_cls = FORMATTERS.get(request.format)
    if formatter_cls is None:
        raise HTTPException(
            status_code=400,
            detail="Unknown format '{}'. Available formats: {}".format(
                request.format, ", ".join(sorted(FORMATTERS.keys()))
            ),
        )

    document = ReadingDocument(
        tokens=tokenize(request.text),
        active_index=request.active_index,
        preferences=request.preferences.to_preferences(),
        lead_policy=load_lead_policy(),
    )
    output = formatter_cls().format(document)[0]
    return RenderResponse(
        format=request.format,
        media_type=output.media_type,
        word_count=document.word_count,
        content=output.content,
    )


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["render"],
    summary="List available output formats",
    description=(
        "Returns all supported output formats with their identifiers, "
        "human-readable names, file suffixes and media types."
    ),
)
async def list_formats() -> List[FormatInfo]:
    empty = ReadingDocument(tokens=[])
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        output = formatter.format(empty)[0]
        result.append(FormatInfo(
            key=key,
            name=formatter.name,
            suffix=output.suffix,
            media_type=output.media_type,
        ))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def main() -> None:
    """Entry point for the bionic-reader-api console script."""
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT)


if __name__ == "__main__":
    main()
