from __future__ import annotations

import logging
import time

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from jazzcomposer.logging_utils import (
    clear_request_context,
    configure_logging,
    current_request_id,
    log_event,
    new_request_id,
    request_elapsed_ms,
    set_request_context,
)
from jazzcomposer.models import (
    ArrangementRequest,
    BlueprintOverview,
    ClientLogEvent,
    KeyOption,
    LyricSheet,
    LyricsRequest,
    PlaybackSession,
    PlaybackSessionRequest,
    PreparedArrangement,
)
from jazzcomposer.services.arrangement_validation import (
    ArrangementValidationError,
    validate_arrangement,
    validate_blueprint,
)
from jazzcomposer.services.arranger import blueprint_sections, build_arrangement
from jazzcomposer.services.blueprint import KEY_OPTIONS, key_option, total_measures
from jazzcomposer.services.lyrics import generate_lyrics
from jazzcomposer.services.music_theory import PitchError
from jazzcomposer.services.playback import build_playback_session

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Jazz Composer")


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or new_request_id()
    set_request_context(request_id=request_id, route=request.url.path, method=request.method)
    started = time.perf_counter()
    log_event(logger, "request_started")
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = request_elapsed_ms(started)
        log_event(logger, "request_completed", status_code=500, duration_ms=elapsed_ms)
        raise

    elapsed_ms = request_elapsed_ms(started)
    log_event(logger, "request_completed", status_code=response.status_code, duration_ms=elapsed_ms)
    response.headers["X-Request-ID"] = request_id
    clear_request_context()
    return response


@app.exception_handler(Exception)
async def global_exception_handler(_request: Request, exc: Exception):
    request_id = current_request_id()
    logger.exception(
        "unhandled_exception",
        extra={"event": "unhandled_exception", "request_id": request_id},
    )
    response = JSONResponse(
        status_code=500,
        content={
            "detail": "Something went wrong while processing your request. Please try again.",
            "request_id": request_id,
        },
        headers={"X-Request-ID": request_id},
    )
    clear_request_context()
    return response


def _handle_generation_fault(action: str, exc: Exception) -> HTTPException:
    diagnostics = getattr(exc, "diagnostics", None)
    log_event(
        logger,
        "generation_failed",
        level=logging.ERROR,
        action=action,
        reason=str(exc),
        exception_type=type(exc).__name__,
        diagnostics=diagnostics,
    )
    return HTTPException(
        status_code=500,
        detail={
            "message": f"{action} failed. Please try again or choose another key.",
            "request_id": current_request_id(),
        },
    )


def _evaluate_arrangement_gate(arrangement: PreparedArrangement) -> None:
    report = validate_arrangement(arrangement)
    log_event(
        logger,
        "arrangement_validation_gate_decision",
        key=arrangement.key,
        fatal_count=len(report.fatal),
        warning_count=len(report.warnings),
        diagnostics_preview=[*report.fatal, *report.warnings][:3],
    )
    if report.fatal:
        raise ArrangementValidationError(report.fatal)
    if report.warnings:
        log_event(logger, "validation_failed", level=logging.WARNING, action="Arrangement", diagnostics=report.warnings)


def _prepare_arrangement(key: KeyOption) -> PreparedArrangement:
    arrangement = build_arrangement(key.tonic, key_id=key.id)
    _evaluate_arrangement_gate(arrangement)
    return arrangement


def check_blueprint() -> None:
    report = validate_blueprint()
    if report.fatal:
        log_event(logger, "blueprint_invalid", level=logging.ERROR, diagnostics=report.fatal)
    elif report.warnings:
        log_event(logger, "validation_failed", level=logging.WARNING, action="Blueprint", diagnostics=report.warnings)
    else:
        log_event(logger, "validation_passed", action="Blueprint", total_measures=total_measures())


check_blueprint()


@app.get("/api/keys", response_model=list[KeyOption])
def list_keys_endpoint():
    return list(KEY_OPTIONS)


@app.get("/api/blueprint", response_model=BlueprintOverview)
def blueprint_endpoint():
    return BlueprintOverview(total_measures=total_measures(), sections=blueprint_sections())


@app.post("/api/arrangement", response_model=PreparedArrangement)
def arrangement_endpoint(payload: ArrangementRequest):
    key = key_option(payload.key)
    log_event(logger, "arrangement_inputs_received", key=key.id, tonic=key.tonic)
    try:
        return _prepare_arrangement(key)
    except (PitchError, ArrangementValidationError) as exc:
        raise _handle_generation_fault("Arrangement generation", exc) from exc


@app.post("/api/lyrics", response_model=LyricSheet)
def lyrics_endpoint(payload: LyricsRequest):
    key = key_option(payload.key)
    try:
        return generate_lyrics(key.label, payload.seed)
    except ValueError as exc:
        raise _handle_generation_fault("Lyric generation", exc) from exc


@app.post("/api/playback-session", response_model=PlaybackSession)
def playback_session_endpoint(payload: PlaybackSessionRequest):
    key = key_option(payload.key)
    log_event(
        logger,
        "playback_inputs_received",
        key=key.id,
        tempo_bpm=payload.tempo_bpm,
        swing=payload.swing,
        seed_supplied=payload.seed is not None,
    )
    try:
        arrangement = _prepare_arrangement(key)
        return build_playback_session(key, payload.tempo_bpm, payload.swing, payload.seed, arrangement=arrangement)
    except (PitchError, ArrangementValidationError) as exc:
        raise _handle_generation_fault("Playback session", exc) from exc


@app.post("/api/client-log")
def client_log_endpoint(payload: ClientLogEvent):
    log_event(
        logger,
        "client_playback_event",
        client_ts=payload.ts,
        client_event=payload.event,
        key=payload.key,
        reason=payload.reason,
        tempo_bpm=payload.tempo_bpm,
        swing=payload.swing,
        offset_seconds=payload.offsetSeconds,
        progress_seconds=payload.progressSeconds,
    )
    return {"ok": True}
