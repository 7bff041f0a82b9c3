from __future__ import annotations

import re
from dataclasses import dataclass

NOTE_SEQUENCE: tuple[str, ...] = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
NOTE_TO_SEMITONE = {name: index for index, name in enumerate(NOTE_SEQUENCE)}
SEMITONES_PER_OCTAVE = 12

_NOTE_PATTERN = re.compile(r"([A-G]#?)(-?\d+)")


class PitchError(ValueError):
    """A note string reached the pitch model in a form it cannot represent."""


class InvalidNoteFormatError(PitchError):
    def __init__(self, note: str):
        super().__init__(f"Invalid note {note!r}; expected a letter A-G, an optional '#', and an octave number.")
        self.note = note


class UnknownPitchClassError(PitchError):
    def __init__(self, pitch_class: str):
        super().__init__(f"Unknown pitch class {pitch_class!r}.")
        self.pitch_class = pitch_class


@dataclass(frozen=True)
class Pitch:
    pitch_class: int
    octave: int

    @property
    def midi(self) -> int:
        return self.pitch_class + (self.octave + 1) * SEMITONES_PER_OCTAVE

    def __str__(self) -> str:
        return f"{NOTE_SEQUENCE[self.pitch_class]}{self.octave}"


def parse_note(note: str) -> Pitch:
    match = _NOTE_PATTERN.fullmatch(note)
    if not match:
        raise InvalidNoteFormatError(note)
    name, octave = match.groups()
    if name not in NOTE_TO_SEMITONE:
        raise UnknownPitchClassError(name)
    return Pitch(pitch_class=NOTE_TO_SEMITONE[name], octave=int(octave))


def note_to_midi(note: str) -> int:
    return parse_note(note).midi


def midi_to_note(midi: int) -> str:
    octave = (midi // SEMITONES_PER_OCTAVE) - 1
    return f"{NOTE_SEQUENCE[midi % SEMITONES_PER_OCTAVE]}{octave}"


def transpose(note: str, semitones: int) -> str:
    return midi_to_note(note_to_midi(note) + semitones)


def with_octave(note: str, octave: int) -> str:
    """Return ``note`` with its pitch class kept and its octave replaced."""
    return str(Pitch(pitch_class=parse_note(note).pitch_class, octave=octave))
