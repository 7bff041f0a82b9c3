from __future__ import annotations

import logging
import math

from jazzcomposer.logging_utils import timed_event
from jazzcomposer.models import GeneratedSection, KeyId, PartEvent, PreparedArrangement
from jazzcomposer.services.bass_lines import create_bass_pattern
from jazzcomposer.services.blueprint import SECTION_BLUEPRINTS, SectionBlueprint, total_measures
from jazzcomposer.services.chord_catalog import build_chord
from jazzcomposer.services.music_theory import SEMITONES_PER_OCTAVE, transpose, with_octave
from jazzcomposer.services.timing import create_time_at, duration_to_beats

MELODY_OCTAVE = 4
MELODY_INTERVAL_CYCLE: tuple[int, ...] = (0, 4, 7, 9)
MELODY_OFFBEAT = 0.5
MELODY_DURATION = "4n."

logger = logging.getLogger(__name__)


def melody_notes(root: str, beat_cursor: float) -> tuple[str, str]:
    interval = MELODY_INTERVAL_CYCLE[math.floor(beat_cursor) % len(MELODY_INTERVAL_CYCLE)]
    note = transpose(with_octave(root, MELODY_OCTAVE), interval)
    return note, transpose(note, -SEMITONES_PER_OCTAVE)


def build_arrangement(
    tonic: str,
    *,
    key_id: KeyId | None = None,
    blueprint: tuple[SectionBlueprint, ...] = SECTION_BLUEPRINTS,
) -> PreparedArrangement:
    """Walk ``blueprint`` and render chord, bass and melody streams in ``tonic``.

    Measures are laid out back to back; cell durations are trusted to fill
    each measure exactly. Any pitch error aborts the whole arrangement.
    """
    with timed_event(logger, "arrangement_generation", tonic=tonic, key=key_id) as summary:
        chord_events: list[PartEvent] = []
        bass_events: list[PartEvent] = []
        melody_events: list[PartEvent] = []
        sections: list[GeneratedSection] = []
        measure_offset = 0

        for section in blueprint:
            section_measures: list[tuple[str, ...]] = []
            for measure in section.measures:
                labels: list[str] = []
                beat_cursor = 0.0
                for cell in measure:
                    chord = build_chord(tonic, cell.degree, cell.quality)
                    beats = duration_to_beats(cell.duration)

                    chord_events.append(
                        PartEvent(
                            time=create_time_at(measure_offset, beat_cursor),
                            duration=cell.duration,
                            notes=chord.notes,
                        )
                    )
                    bass_events.extend(
                        create_bass_pattern(
                            tonic,
                            cell.degree,
                            cell.quality,
                            beats,
                            measure_offset,
                            beat_cursor,
                            cell.bass_approach,
                        )
                    )
                    melody_events.append(
                        PartEvent(
                            time=create_time_at(measure_offset, beat_cursor + MELODY_OFFBEAT),
                            duration=MELODY_DURATION,
                            notes=melody_notes(chord.root, beat_cursor),
                        )
                    )

                    labels.append(cell.display)
                    beat_cursor += beats
                section_measures.append(tuple(labels))
                measure_offset += 1

            sections.append(GeneratedSection(label=section.label, measures=tuple(section_measures)))

        arrangement = PreparedArrangement(
            key=key_id,
            tonic=tonic,
            total_measures=total_measures(blueprint),
            sections=tuple(sections),
            chord_events=tuple(chord_events),
            bass_events=tuple(bass_events),
            melody_events=tuple(melody_events),
        )
        summary.update(
            measure_count=measure_offset,
            chord_event_count=len(arrangement.chord_events),
            bass_event_count=len(arrangement.bass_events),
            melody_event_count=len(arrangement.melody_events),
        )
    return arrangement


def blueprint_sections(blueprint: tuple[SectionBlueprint, ...] = SECTION_BLUEPRINTS) -> tuple[GeneratedSection, ...]:
    """Display rows of the blueprint; these do not depend on the key."""
    return tuple(
        GeneratedSection(
            label=section.label,
            measures=tuple(tuple(cell.display for cell in measure) for measure in section.measures),
        )
        for section in blueprint
    )
