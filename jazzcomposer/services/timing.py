from __future__ import annotations

import math
import re

BEATS_PER_MEASURE = 4
SIXTEENTHS_PER_BEAT = 4

DURATION_BEATS = {
    "1m": 4,
    "2n": 2,
    "4n": 1,
}

_POSITION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)m \+ (\d+):(\d+):(\d+)")


def duration_to_beats(duration: str) -> int:
    # Unrecognised symbols fill the whole measure.
    return DURATION_BEATS.get(duration, BEATS_PER_MEASURE)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_beat_offset(beat: float) -> str:
    """Format a beat offset as ``0:<beats>:<sixteenths>``.

    The sixteenth count may round up to 4; the transport carries it into the
    next beat.
    """
    whole_beats = math.floor(beat)
    sixteenths = _round_half_up((beat - whole_beats) * SIXTEENTHS_PER_BEAT)
    return f"0:{whole_beats}:{sixteenths}"


def create_time_at(measure_offset: int, beat: float) -> str:
    return f"{measure_offset}m + {format_beat_offset(beat)}"


def position_to_beats(position: str) -> float:
    match = _POSITION_PATTERN.fullmatch(position)
    if not match:
        raise ValueError(f"Unsupported transport position {position!r}.")
    measures, bars, beats, sixteenths = match.groups()
    return (
        (float(measures) + int(bars)) * BEATS_PER_MEASURE
        + int(beats)
        + int(sixteenths) / SIXTEENTHS_PER_BEAT
    )


def running_time(bpm: float, measures: int) -> str:
    total_seconds = round(measures * BEATS_PER_MEASURE * 60 / bpm)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"
