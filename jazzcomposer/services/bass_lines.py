from __future__ import annotations

from jazzcomposer.models import BassApproach, ChordQuality, PartEvent
from jazzcomposer.services.chord_catalog import chord_intervals
from jazzcomposer.services.music_theory import SEMITONES_PER_OCTAVE, midi_to_note, note_to_midi, transpose
from jazzcomposer.services.timing import create_time_at

BASS_OCTAVE = 2
BASS_NOTE_DURATION = "4n"
SCALAR_PATTERN: tuple[int, ...] = (0, 2, 4, 5)
FLAT_SEVENTH = 10
APPROACH_NUDGE: dict[BassApproach, int] = {
    "chromaticDown": -1,
    "chromaticUp": 1,
    "scalar": 0,
}


def chord_tone_pattern(quality: ChordQuality) -> tuple[int, ...]:
    intervals = chord_intervals(quality)
    color = intervals[1] if len(intervals) > 1 else 3
    fifth = intervals[2] if len(intervals) > 2 else 7
    return (0, color, fifth, FLAT_SEVENTH)


def bass_offsets(quality: ChordQuality, beats: int, approach: BassApproach | None) -> list[int]:
    """Semitone offsets above the bass root, one per beat of the cell.

    The last beat carries the approach nudge and, for cells of two beats or
    more, reaches up an octave toward the next chord.
    """
    pattern = SCALAR_PATTERN if approach == "scalar" else chord_tone_pattern(quality)
    offsets: list[int] = []
    for index in range(beats):
        offset = pattern[index % len(pattern)]
        if index == beats - 1:
            offset += APPROACH_NUDGE.get(approach, 0)
            if beats >= 2:
                offset += SEMITONES_PER_OCTAVE
        offsets.append(offset)
    return offsets


def create_bass_pattern(
    tonic: str,
    degree: int,
    quality: ChordQuality,
    beats: int,
    measure_offset: int,
    beat_start: float,
    approach: BassApproach | None,
) -> list[PartEvent]:
    root_midi = note_to_midi(transpose(f"{tonic}{BASS_OCTAVE}", degree))
    return [
        PartEvent(
            time=create_time_at(measure_offset, beat_start + index),
            duration=BASS_NOTE_DURATION,
            notes=(midi_to_note(root_midi + offset),),
        )
        for index, offset in enumerate(bass_offsets(quality, beats, approach))
    ]
