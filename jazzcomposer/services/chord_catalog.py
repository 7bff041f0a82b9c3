from __future__ import annotations

from dataclasses import dataclass

from jazzcomposer.models import ChordQuality
from jazzcomposer.services.music_theory import transpose

CHORD_OCTAVE = 3

# Upper extensions are written as offsets above the octave (14 = 9th, 17 = 11th, 21 = 13th).
QUALITY_INTERVALS: dict[ChordQuality, tuple[int, ...]] = {
    "maj9": (0, 4, 7, 11, 14),
    "min9": (0, 3, 7, 10, 14),
    "min11": (0, 3, 7, 10, 14, 17),
    "dom13": (0, 4, 7, 10, 14, 17, 21),
    "dom13b9": (0, 4, 7, 10, 13, 17, 21),
    "maj7sharp11": (0, 4, 6, 11, 14),
    "halfDim": (0, 3, 6, 10, 13),
    "dim7": (0, 3, 6, 9),
    "altDom": (0, 4, 7, 10, 13, 15),
}


@dataclass(frozen=True)
class Chord:
    root: str
    notes: tuple[str, ...]


def chord_intervals(quality: ChordQuality) -> tuple[int, ...]:
    return QUALITY_INTERVALS[quality]


def build_chord(tonic: str, degree: int, quality: ChordQuality) -> Chord:
    """Voice ``quality`` on the scale degree ``degree`` semitones above ``tonic``.

    The root sits in octave 3 and the notes keep catalog order, so extensions
    above the octave stay on top of the voicing.
    """
    root = transpose(f"{tonic}{CHORD_OCTAVE}", degree)
    notes = tuple(transpose(root, interval) for interval in chord_intervals(quality))
    return Chord(root=root, notes=notes)
