from __future__ import annotations

import logging

from jazzcomposer.logging_utils import log_event
from jazzcomposer.models import KeyOption, PlaybackSession, PreparedArrangement, RideHit, TransportSettings
from jazzcomposer.services.arranger import build_arrangement
from jazzcomposer.services.lyrics import generate_lyrics, new_seed
from jazzcomposer.services.timing import running_time

SWING_SUBDIVISION = "8n"
RIDE_HIT_DURATION = "32n"
TEMPO_MARKS: tuple[tuple[str, int], ...] = (
    ("Ballad", 90),
    ("Medium", 120),
    ("Up", 148),
)

logger = logging.getLogger(__name__)


def swing_label(swing: float) -> str:
    if swing < 0.3:
        return "Light swing"
    if swing < 0.65:
        return "Classic swing"
    return "Hard swing"


def tempo_mark(bpm: int) -> str | None:
    for label, value in TEMPO_MARKS:
        if value == bpm:
            return label
    return None


def build_ride_pattern(total_measures: int) -> tuple[RideHit, ...]:
    # Two hits per measure: the downbeat and the "and" of beat three.
    return tuple(
        RideHit(
            time=f"{index / 2:g}m + 0:0:{0 if index % 2 == 0 else 2}",
            duration=RIDE_HIT_DURATION,
        )
        for index in range(total_measures * 2)
    )


def transport_settings(bpm: int, swing: float, total_measures: int) -> TransportSettings:
    return TransportSettings(
        bpm=bpm,
        swing=swing,
        swing_subdivision=SWING_SUBDIVISION,
        swing_label=swing_label(swing),
        tempo_mark=tempo_mark(bpm),
        running_time=running_time(bpm, total_measures),
    )


def build_playback_session(
    key: KeyOption,
    tempo_bpm: int,
    swing: float,
    seed: float | None = None,
    arrangement: PreparedArrangement | None = None,
) -> PlaybackSession:
    if arrangement is None:
        arrangement = build_arrangement(key.tonic, key_id=key.id)
    if seed is None:
        seed = new_seed()
    session = PlaybackSession(
        arrangement=arrangement,
        lyrics=generate_lyrics(key.label, seed),
        transport=transport_settings(tempo_bpm, swing, arrangement.total_measures),
        ride_events=build_ride_pattern(arrangement.total_measures),
    )
    log_event(
        logger,
        "playback_session_built",
        key=key.id,
        tempo_bpm=tempo_bpm,
        swing=swing,
        seed=seed,
        running_time=session.transport.running_time,
        ride_hit_count=len(session.ride_events),
    )
    return session
